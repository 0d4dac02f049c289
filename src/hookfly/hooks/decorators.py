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
"""Hook decorators — intent markers and per-method filters.

Decorators only annotate the function; nothing is bound until the
declaring :class:`~hookfly.hooks.entity.HookEntity` is instantiated.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar, overload

from hookfly.hooks.types import Intent, KeepParam, Param, ParamMarker

F = TypeVar("F", bound=Callable[..., Any])

INTENTS_ATTR = "__hookfly_intents__"
PARAM_SLOTS_ATTR = "__hookfly_param_slots__"
RETURN_TYPE_ATTR = "__hookfly_return_type__"
HOOK_ONCE_ATTR = "__hookfly_hook_once__"


def _mark(fn: F, intent: Intent, names: tuple[str, ...]) -> F:
    intents = dict(getattr(fn, INTENTS_ATTR, {}))
    intents[intent] = names
    setattr(fn, INTENTS_ATTR, intents)
    return fn


# ---------------------------------------------------------------------------
# Method intents: @on_before, @on_after, @on_replace
# ---------------------------------------------------------------------------


def _make_method_intent(intent: Intent) -> Callable[..., Callable[[F], F]]:
    """Create a decorator factory taking the target method names."""

    def factory(*names: str) -> Callable[[F], F]:
        def decorator(fn: F) -> F:
            return _mark(fn, intent, tuple(names))

        return decorator

    factory.__name__ = f"on_{intent.timing.value}"
    return factory


on_before = _make_method_intent(Intent.BEFORE_METHOD)
on_after = _make_method_intent(Intent.AFTER_METHOD)
on_replace = _make_method_intent(Intent.REPLACE_METHOD)


# ---------------------------------------------------------------------------
# Constructor intents: usable bare or called
# ---------------------------------------------------------------------------


class _ConstructorIntent:
    def __init__(self, intent: Intent) -> None:
        self._intent = intent

    @overload
    def __call__(self, fn: F) -> F: ...

    @overload
    def __call__(self) -> Callable[[F], F]: ...

    def __call__(self, fn: Any = None) -> Any:
        if fn is not None:
            return _mark(fn, self._intent, ())
        return lambda inner: _mark(inner, self._intent, ())

    def __repr__(self) -> str:
        return f"<constructor intent {self._intent.value}>"


on_constructor_before = _ConstructorIntent(Intent.BEFORE_CONSTRUCTOR)
on_constructor_after = _ConstructorIntent(Intent.AFTER_CONSTRUCTOR)
on_constructor_replace = _ConstructorIntent(Intent.REPLACE_CONSTRUCTOR)


# ---------------------------------------------------------------------------
# Filters and modifiers
# ---------------------------------------------------------------------------


def param_slots(*slots: str | ParamMarker | None) -> Callable[[F], F]:
    """Declare parameter overrides as a compacted slot list.

    Slots are consumed, in order, only by parameters annotated with a loose
    type (``Any``, ``object`` or nothing); concretely typed parameters
    keep their own type and take no slot. A ``str`` slot is shorthand for
    ``Param(str)``, ``None`` is an empty slot.

    ::

        @on_before("save")
        @param_slots("shop.models.User", KeepParam())
        def before_save(self, param: HookParam, user, count: int, extra): ...
    """
    normalized: list[tuple[ParamMarker, ...]] = []
    for slot in slots:
        if slot is None:
            normalized.append(())
        elif isinstance(slot, str):
            normalized.append((Param(slot),))
        elif isinstance(slot, (Param, KeepParam)):
            normalized.append((slot,))
        else:
            raise TypeError(f"param_slots() accepts str, Param, KeepParam or None, not {type(slot).__name__}")

    def decorator(fn: F) -> F:
        setattr(fn, PARAM_SLOTS_ATTR, tuple(normalized))
        return fn

    return decorator


def return_type(name: str) -> Callable[[F], F]:
    """Only match target methods whose return type is *name*."""

    def decorator(fn: F) -> F:
        setattr(fn, RETURN_TYPE_ATTR, name)
        return fn

    return decorator


def hook_once(fn: F) -> F:
    """Unhook every binding of *fn* right after its first dispatch."""
    setattr(fn, HOOK_ONCE_ATTR, True)
    return fn
