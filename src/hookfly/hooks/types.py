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
"""Hook core types — intents, parameter markers, lifecycle states."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from hookfly.interceptor.types import Timing
from hookfly.resolver import simple_name


class Intent(str, Enum):
    """Timing and kind of a candidate hook method."""

    BEFORE_METHOD = "before_method"
    AFTER_METHOD = "after_method"
    REPLACE_METHOD = "replace_method"
    BEFORE_CONSTRUCTOR = "before_constructor"
    AFTER_CONSTRUCTOR = "after_constructor"
    REPLACE_CONSTRUCTOR = "replace_constructor"

    @property
    def timing(self) -> Timing:
        return _TIMINGS[self]

    @property
    def is_constructor(self) -> bool:
        return self in (Intent.BEFORE_CONSTRUCTOR, Intent.AFTER_CONSTRUCTOR, Intent.REPLACE_CONSTRUCTOR)

    @property
    def is_replace(self) -> bool:
        return self.timing is Timing.REPLACE

    @property
    def replace_intent(self) -> Intent:
        """The replace intent of the same kind, which excludes this one."""
        return Intent.REPLACE_CONSTRUCTOR if self.is_constructor else Intent.REPLACE_METHOD


_TIMINGS: dict[Intent, Timing] = {
    Intent.BEFORE_METHOD: Timing.BEFORE,
    Intent.AFTER_METHOD: Timing.AFTER,
    Intent.REPLACE_METHOD: Timing.REPLACE,
    Intent.BEFORE_CONSTRUCTOR: Timing.BEFORE,
    Intent.AFTER_CONSTRUCTOR: Timing.AFTER,
    Intent.REPLACE_CONSTRUCTOR: Timing.REPLACE,
}

# Fixed order of the binding passes.
PASS_ORDER: tuple[Intent, ...] = (
    Intent.BEFORE_METHOD,
    Intent.AFTER_METHOD,
    Intent.REPLACE_METHOD,
    Intent.BEFORE_CONSTRUCTOR,
    Intent.AFTER_CONSTRUCTOR,
    Intent.REPLACE_CONSTRUCTOR,
)


@dataclass(frozen=True)
class Param:
    """Override the type a hook parameter matches.

    Use inside ``typing.Annotated`` when the target's parameter type cannot
    be imported where the hook is written::

        @on_before("save")
        def before_save(self, param: HookParam, user: Annotated[Any, Param("shop.models.User")]): ...

    *name* is a fully qualified type name; ``""`` or ``"null"`` (the
    default) matches any type.
    """

    name: str = "null"

    @property
    def matches_any(self) -> bool:
        return simple_name(self.name) in ("", "null")


@dataclass(frozen=True)
class KeepParam:
    """Placeholder marker that only keeps positional correspondence.

    Needed with :func:`~hookfly.hooks.decorators.param_slots`, where slots
    are consumed by loosely typed parameters only.
    """


ParamMarker = Param | KeepParam


class HookState(str, Enum):
    """Construction state of a :class:`~hookfly.hooks.entity.HookEntity`."""

    UNINITIALIZED = "uninitialized"
    TARGET_RESOLVED = "target_resolved"
    SCANNED = "scanned"
    BOUND = "bound"
    READY = "ready"
    SKIPPED = "skipped"
    FAILED = "failed"


class NoneHook:
    """Target sentinel: the hook definition is skipped entirely."""


class EmptyHook:
    """Target sentinel: nothing is bound, but ``on_init()`` still runs."""
