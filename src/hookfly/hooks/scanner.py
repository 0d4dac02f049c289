# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Annotation scanner — collects decorated candidate methods of a hook class."""

from __future__ import annotations

import inspect
import types
import typing
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from hookfly.diagnostics import report_exception
from hookfly.hooks.decorators import HOOK_ONCE_ATTR, INTENTS_ATTR, PARAM_SLOTS_ATTR, RETURN_TYPE_ATTR
from hookfly.hooks.types import Intent, KeepParam, Param, ParamMarker
from hookfly.interceptor.types import HookParam
from hookfly.kernel.exceptions import ConfigurationError
from hookfly.resolver import canonical_name, evaluate_hints

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(frozen=True)
class IdentityKey:
    """Stable identity of a candidate within one scan: qualname plus intent."""

    identity: str
    intent: Intent


@dataclass(frozen=True, eq=False)
class CandidateOperation:
    """One decorated hook method and its parsed metadata.

    Attributes:
        function: The plain function declared on the hook class.
        intent: The intent this candidate was scanned for.
        names: Target method names (empty for constructor intents).
        parameter_types: Declared parameter types after ``self``, context
            parameter included; ``None`` where unannotated.
        annotations: Marker tuples. One per parameter (context included)
            when read from ``Annotated``; the compacted list given to
            ``@param_slots`` otherwise.
        return_type: Return-type filter, ``""`` when absent.
        one_shot: Set by ``@hook_once``.
    """

    function: Callable[..., Any]
    intent: Intent
    names: tuple[str, ...]
    parameter_types: tuple[Any, ...]
    annotations: tuple[tuple[ParamMarker, ...], ...]
    return_type: str = ""
    one_shot: bool = False

    @property
    def name(self) -> str:
        return self.function.__name__

    @property
    def key(self) -> IdentityKey:
        return IdentityKey(self.function.__qualname__, self.intent)

    def has_intent(self, intent: Intent) -> bool:
        return intent in getattr(self.function, INTENTS_ATTR, {})

    def bind(self, instance: Any) -> Callable[..., Any]:
        """The candidate as a method bound to *instance*."""
        return types.MethodType(self.function, instance)

    def describe(self) -> str:
        params = ", ".join(canonical_name(tp) if tp is not None else "Any" for tp in self.parameter_types)
        return f"{self.function.__qualname__}({params})"


def declared_functions(cls: type) -> list[tuple[str, Callable[..., Any]]]:
    """Plain functions declared on *cls* itself, in definition order."""
    return [(name, value) for name, value in vars(cls).items() if inspect.isfunction(value)]


def scan(cls: type, intent: Intent) -> dict[IdentityKey, CandidateOperation]:
    """Collect the methods of *cls* decorated for *intent*.

    A method with a malformed signature is reported as a
    :class:`ConfigurationError` and left out; the scan goes on.
    """
    found: dict[IdentityKey, CandidateOperation] = {}
    for name, fn in declared_functions(cls):
        intents = getattr(fn, INTENTS_ATTR, None)
        if not intents or intent not in intents:
            continue
        try:
            candidate = build_candidate(fn, intent, intents[intent])
        except ConfigurationError as exc:
            report_exception(exc, hook=cls.__qualname__, method=name, intent=intent.value)
            continue
        found[candidate.key] = candidate
    return found


def build_candidate(fn: Callable[..., Any], intent: Intent, names: tuple[str, ...]) -> CandidateOperation:
    """Parse *fn*'s signature into a :class:`CandidateOperation`.

    Raises:
        ConfigurationError: when *fn* has no context parameter, when its
            first parameter is not a :class:`HookParam`, or when it takes
            variadic parameters.
    """
    signature = inspect.signature(fn)
    params = list(signature.parameters.values())[1:]
    context = {"method": fn.__qualname__}

    if any(p.kind not in _POSITIONAL for p in params):
        raise ConfigurationError(
            f"{fn.__qualname__}: hook methods take positional parameters only",
            code="HOOK_SIGNATURE",
            context=context,
        )
    if not params:
        raise ConfigurationError(
            f"{fn.__qualname__}: parameter list is empty, the first parameter must be a HookParam",
            code="HOOK_SIGNATURE",
            context=context,
        )

    hints = evaluate_hints(fn, include_extras=True)
    declared: list[Any] = []
    markers: list[tuple[ParamMarker, ...]] = []
    for p in params:
        base, meta = _split_annotated(hints.get(p.name))
        declared.append(base)
        markers.append(meta)

    if not is_context_type(declared[0]):
        raise ConfigurationError(
            f"{fn.__qualname__}: the first parameter must be a HookParam, got {canonical_name(declared[0])}",
            code="HOOK_SIGNATURE",
            context=context,
        )

    slots = getattr(fn, PARAM_SLOTS_ATTR, None)
    return CandidateOperation(
        function=fn,
        intent=intent,
        names=tuple(names),
        parameter_types=tuple(declared),
        annotations=tuple(slots) if slots is not None else tuple(markers),
        return_type=str(getattr(fn, RETURN_TYPE_ATTR, "") or "").strip(),
        one_shot=bool(getattr(fn, HOOK_ONCE_ATTR, False)),
    )


def is_context_type(tp: Any) -> bool:
    if isinstance(tp, type):
        return issubclass(tp, HookParam)
    if isinstance(tp, str):
        return tp.rsplit(".", 1)[-1] == HookParam.__name__
    return False


def _split_annotated(hint: Any) -> tuple[Any, tuple[ParamMarker, ...]]:
    if typing.get_origin(hint) is typing.Annotated:
        markers = tuple(m for m in hint.__metadata__ if isinstance(m, (Param, KeepParam)))
        return hint.__origin__, markers
    return hint, ()
