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
"""Interceptor core types — HookParam callback context, timings, handles."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from hookfly.interceptor.operation import TargetOperation


class Timing(str, Enum):
    """When a hook runs relative to the original operation."""

    BEFORE = "before"
    AFTER = "after"
    REPLACE = "replace"


class _NoValue:
    """Marker returned by replace hooks that produced no value."""

    _instance: _NoValue | None = None

    def __new__(cls) -> _NoValue:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_VALUE"

    def __bool__(self) -> bool:
        return False


NO_VALUE = _NoValue()


@dataclass(eq=False)
class HookParam:
    """Context handed to every hook callback.

    Attributes:
        method: The operation being intercepted.
        this_object: The receiver (instance, or class for classmethods);
            ``None`` for static methods.
        args: Positional arguments after the receiver. Before hooks may
            mutate them; the original sees the mutated list.
        kwargs: Keyword arguments.
        result: Return value, available to after hooks.
        throwable: Exception raised by the original, available to after hooks.
        returned_early: Set by :meth:`set_result` / :meth:`set_throwable`
            in a before hook to skip the original.
    """

    method: TargetOperation
    this_object: Any
    args: list[Any] | None
    kwargs: dict[str, Any] = field(default_factory=dict)
    result: Any = None
    throwable: BaseException | None = None
    returned_early: bool = False

    @property
    def args_or_empty(self) -> list[Any]:
        return self.args if self.args is not None else []

    @property
    def has_this(self) -> bool:
        return self.this_object is not None

    def set_result(self, value: Any) -> None:
        """Set the call's result; from a before hook this skips the original."""
        self.result = value
        self.throwable = None
        self.returned_early = True

    def set_throwable(self, error: BaseException) -> None:
        """Make the call raise *error*; from a before hook this skips the original."""
        self.throwable = error
        self.result = None
        self.returned_early = True

    def get_result_or_throwable(self) -> Any:
        if self.throwable is not None:
            raise self.throwable
        return self.result


HookCallback = Callable[[HookParam], Any]
UnhookCallback = Callable[["HookHandle"], None]


@dataclass(eq=False)
class HookHandle:
    """A registration of one callback on one operation.

    Attributes:
        operation: The hooked operation.
        timing: Before, after or replace.
        callback: The callable invoked with a :class:`HookParam`.
        one_shot: Unregister right after the first dispatch.
        on_unhook: Called once the registration has been removed.
    """

    operation: TargetOperation
    timing: Timing
    callback: HookCallback
    one_shot: bool = False
    on_unhook: UnhookCallback | None = None
    active: bool = True
    fired: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def claim(self) -> bool:
        """Reserve one dispatch; a one-shot handle can be claimed once only."""
        with self._lock:
            if not self.active or (self.one_shot and self.fired):
                return False
            self.fired += 1
            return True

    def deactivate(self) -> bool:
        """Mark the handle inactive; return whether it was active."""
        with self._lock:
            was_active, self.active = self.active, False
            return was_active
