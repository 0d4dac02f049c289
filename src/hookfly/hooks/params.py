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
"""Parameter-type resolution for candidate hook methods.

Turns a candidate's declared parameters and override markers into one
:data:`TypeConstraint` per target parameter (the context parameter is
dropped).

Markers arrive in one of two shapes:

* positional: one marker tuple per parameter, empty for unmarked ones
  (what ``typing.Annotated`` yields);
* compacted: fewer tuples than parameters (what ``@param_slots`` yields).
  Correspondence is rebuilt by walking the declared types and consuming a
  slot only for loosely typed parameters, so a ``KeepParam()`` slot on an
  ``Any`` parameter keeps later overrides aligned.
"""

from __future__ import annotations

import typing
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from hookfly.diagnostics import DiagnosticKind, report
from hookfly.hooks.scanner import CandidateOperation
from hookfly.hooks.types import Param, ParamMarker
from hookfly.kernel.exceptions import ResolutionError
from hookfly.resolver import TypeLoader, TypeResolver, canonical_name, get_resolver


class Unconstrained:
    """Matches a parameter of any type."""

    _instance: Unconstrained | None = None

    def __new__(cls) -> Unconstrained:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def accepts(self, actual: Any) -> bool:
        return True

    def __repr__(self) -> str:
        return "Unconstrained"


UNCONSTRAINED = Unconstrained()


@dataclass(frozen=True)
class Exact:
    """Matches a parameter whose declared type is assignable to *type*."""

    type: Any

    def accepts(self, actual: Any) -> bool:
        """Whether a target parameter declared as *actual* satisfies this constraint.

        Unannotated parameters count as ``object``. Unevaluated (string)
        annotations are compared by name.
        """
        expected = self.type
        if actual is None:
            actual = object
        if isinstance(actual, (str, typing.ForwardRef)):
            name = canonical_name(actual)
            return name == canonical_name(expected) or name == getattr(expected, "__qualname__", None)
        origin = typing.get_origin(actual) or actual
        if isinstance(origin, type) and isinstance(expected, type):
            return issubclass(origin, expected)
        return actual == expected or canonical_name(actual) == canonical_name(expected)

    def __repr__(self) -> str:
        return f"Exact({canonical_name(self.type)})"


TypeConstraint = Exact | Unconstrained


def is_top_type(tp: Any) -> bool:
    """Whether *tp* is the loose placeholder type: missing, ``Any`` or ``object``."""
    return tp is None or tp is Any or tp is object


def resolve_param_types(
    candidate: CandidateOperation,
    resolver: TypeResolver | None = None,
    loader: TypeLoader | None = None,
) -> list[TypeConstraint]:
    """Resolve the constraints for every parameter after the context parameter."""
    resolver = resolver if resolver is not None else get_resolver()
    declared = candidate.parameter_types
    annotations = candidate.annotations

    if len(annotations) < len(declared):
        return _resolve_compacted(candidate, annotations, declared, resolver, loader)
    return _resolve_positional(candidate, annotations, declared, resolver, loader)


def _resolve_positional(
    candidate: CandidateOperation,
    annotations: Sequence[tuple[ParamMarker, ...]],
    declared: Sequence[Any],
    resolver: TypeResolver,
    loader: TypeLoader | None,
) -> list[TypeConstraint]:
    constraints: list[TypeConstraint] = []
    for markers, tp in zip(annotations[1:], declared[1:]):
        param = _first_param(markers)
        if param is None:
            constraints.append(_declared_constraint(tp, resolver, loader))
        else:
            constraints.append(_override(candidate, param, resolver, loader))
    return constraints


def _resolve_compacted(
    candidate: CandidateOperation,
    annotations: Sequence[tuple[ParamMarker, ...]],
    declared: Sequence[Any],
    resolver: TypeResolver,
    loader: TypeLoader | None,
) -> list[TypeConstraint]:
    constraints: list[TypeConstraint] = []
    index = 0
    for tp in declared[1:]:
        if not is_top_type(tp):
            constraints.append(_declared_constraint(tp, resolver, loader))
            continue
        markers = annotations[index] if index < len(annotations) else ()
        index += 1
        param = _first_param(markers)
        constraints.append(UNCONSTRAINED if param is None else _override(candidate, param, resolver, loader))
    return constraints


def _first_param(markers: tuple[ParamMarker, ...]) -> Param | None:
    return next((m for m in markers if isinstance(m, Param)), None)


def _declared_constraint(tp: Any, resolver: TypeResolver, loader: TypeLoader | None) -> TypeConstraint:
    if is_top_type(tp):
        return UNCONSTRAINED
    if isinstance(tp, str):
        # Annotation that did not evaluate where the hook was declared.
        found = resolver.find(tp, loader)
        return Exact(found) if found is not None else Exact(tp)
    return Exact(tp)


def _override(
    candidate: CandidateOperation,
    param: Param,
    resolver: TypeResolver,
    loader: TypeLoader | None,
) -> TypeConstraint:
    if param.matches_any:
        return UNCONSTRAINED
    try:
        return Exact(resolver.resolve(param.name, loader))
    except ResolutionError as exc:
        # Unresolvable overrides widen to any type rather than failing the candidate.
        report(
            DiagnosticKind.RESOLUTION,
            f"Override type '{param.name}' not found, matching any type",
            error=exc,
            candidate=candidate.describe(),
            type_name=param.name,
        )
        return UNCONSTRAINED
