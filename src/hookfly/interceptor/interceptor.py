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
"""MethodInterceptor — redirects class attributes through a hook dispatcher.

Installing the first hook on ``(owner, attr)`` replaces the attribute on the
owner class with a dispatcher built around the original function; removing
the last hook puts the original attribute back. Dispatch order:

1. before hooks, in registration order
2. the most recent replace hook, or the original operation
3. after hooks, in registration order

An exception raised by the original is stored on the :class:`HookParam` and
re-raised once the after hooks have run. The dispatcher of a coroutine
function awaits hook results that are awaitable; a synchronous dispatcher
reports a coroutine returned by a hook as a callback failure.
"""

from __future__ import annotations

import functools
import inspect
import threading
from dataclasses import dataclass, field
from typing import Any

from hookfly.diagnostics import DiagnosticKind, report
from hookfly.interceptor.operation import OperationKind, TargetOperation
from hookfly.interceptor.types import (
    NO_VALUE,
    HookCallback,
    HookHandle,
    HookParam,
    Timing,
    UnhookCallback,
)
from hookfly.kernel.exceptions import InterceptorError

_ORIGINAL_ATTR = "__hookfly_original__"


@dataclass
class _PatchedSlot:
    owner: type
    attr_name: str
    kind: OperationKind
    original_attr: Any
    original_function: Any
    handles: tuple[HookHandle, ...] = field(default_factory=tuple)


def unwrap_dispatcher(fn: Any) -> Any:
    """Return the original function behind a hookfly dispatcher, or *fn* itself."""
    return getattr(fn, _ORIGINAL_ATTR, fn)


class MethodInterceptor:
    """Installs and removes hooks on class operations.

    Installation is serialised; dispatch reads an immutable snapshot of the
    slot's handles, so hooks may fire concurrently from any thread and an
    uninstall never interrupts a dispatch already in flight.
    """

    def __init__(self) -> None:
        self._slots: dict[tuple[type, str], _PatchedSlot] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def install(
        self,
        operation: TargetOperation,
        timing: Timing,
        callback: HookCallback,
        *,
        one_shot: bool = False,
        on_unhook: UnhookCallback | None = None,
    ) -> HookHandle:
        """Register *callback* on *operation*.

        Raises:
            InterceptorError: when the owner's attribute cannot be replaced.
        """
        handle = HookHandle(
            operation=operation,
            timing=timing,
            callback=callback,
            one_shot=one_shot,
            on_unhook=on_unhook,
        )
        key = (operation.owner, operation.attr_name)
        with self._lock:
            slot = self._slots.get(key)
            if slot is None:
                slot = self._patch(operation)
                self._slots[key] = slot
            slot.handles = (*slot.handles, handle)
        return handle

    def uninstall(self, handle: HookHandle) -> bool:
        """Remove *handle*; return False when it was already removed."""
        if not handle.deactivate():
            return False
        key = (handle.operation.owner, handle.operation.attr_name)
        with self._lock:
            slot = self._slots.get(key)
            if slot is not None:
                slot.handles = tuple(h for h in slot.handles if h is not handle)
                if not slot.handles:
                    self._restore(slot)
                    del self._slots[key]
        if handle.on_unhook is not None:
            try:
                handle.on_unhook(handle)
            except Exception as exc:
                report(
                    DiagnosticKind.CALLBACK,
                    "Unhook callback failed",
                    error=exc,
                    operation=handle.operation.describe(),
                )
        return True

    def uninstall_all(self) -> int:
        """Remove every registration; return how many were removed."""
        with self._lock:
            handles = [h for slot in self._slots.values() for h in slot.handles]
        return sum(1 for handle in handles if self.uninstall(handle))

    def installed(self, operation: TargetOperation | None = None) -> list[HookHandle]:
        """Active handles, optionally only those registered on *operation*."""
        with self._lock:
            handles = [h for slot in self._slots.values() for h in slot.handles]
        if operation is None:
            return handles
        return [h for h in handles if h.operation is operation]

    def is_patched(self, owner: type, attr_name: str) -> bool:
        with self._lock:
            return (owner, attr_name) in self._slots

    # ------------------------------------------------------------------
    # Patching
    # ------------------------------------------------------------------

    def _patch(self, operation: TargetOperation) -> _PatchedSlot:
        owner, attr_name = operation.owner, operation.attr_name
        original_attr = owner.__dict__.get(attr_name)
        if original_attr is None:
            raise InterceptorError(
                f"{owner.__qualname__} does not declare '{attr_name}'",
                code="HOOK_NOT_DECLARED",
                context={"owner": owner.__qualname__, "attr": attr_name},
            )
        if isinstance(original_attr, (staticmethod, classmethod)):
            original_function = original_attr.__func__
        else:
            original_function = original_attr

        slot = _PatchedSlot(
            owner=owner,
            attr_name=attr_name,
            kind=operation.kind,
            original_attr=original_attr,
            original_function=original_function,
        )

        if inspect.iscoroutinefunction(original_function):
            dispatcher = self._build_async_dispatcher(slot)
        else:
            dispatcher = self._build_sync_dispatcher(slot)
        setattr(dispatcher, _ORIGINAL_ATTR, original_function)

        replacement: Any = dispatcher
        if isinstance(original_attr, staticmethod):
            replacement = staticmethod(dispatcher)
        elif isinstance(original_attr, classmethod):
            replacement = classmethod(dispatcher)

        try:
            setattr(owner, attr_name, replacement)
        except (TypeError, AttributeError) as exc:
            raise InterceptorError(
                f"Cannot patch {owner.__qualname__}.{attr_name}: {exc}",
                code="HOOK_PATCH_FAILED",
                context={"owner": owner.__qualname__, "attr": attr_name},
            ) from exc
        return slot

    def _restore(self, slot: _PatchedSlot) -> None:
        try:
            setattr(slot.owner, slot.attr_name, slot.original_attr)
        except (TypeError, AttributeError) as exc:
            raise InterceptorError(
                f"Cannot restore {slot.owner.__qualname__}.{slot.attr_name}: {exc}",
                code="HOOK_RESTORE_FAILED",
            ) from exc

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _build_sync_dispatcher(self, slot: _PatchedSlot) -> Any:
        original = slot.original_function

        @functools.wraps(original)
        def dispatcher(*args: Any, **kwargs: Any) -> Any:
            started = self._begin(slot, args, kwargs)
            if started is None:
                return original(*args, **kwargs)
            param, handles = started

            self._run(handles, Timing.BEFORE, param)
            if not param.returned_early:
                replace = self._claim_replace(handles)
                if replace is not None:
                    param.result = self._replacement(self._fire(replace, param, claimed=True))
                else:
                    try:
                        param.result = original(*self._call_args(slot, param), **param.kwargs)
                    except Exception as exc:
                        param.throwable = exc
            self._run(handles, Timing.AFTER, param)
            return self._outcome(slot, param)

        return dispatcher

    def _build_async_dispatcher(self, slot: _PatchedSlot) -> Any:
        original = slot.original_function

        @functools.wraps(original)
        async def dispatcher(*args: Any, **kwargs: Any) -> Any:
            started = self._begin(slot, args, kwargs)
            if started is None:
                return await original(*args, **kwargs)
            param, handles = started

            await self._run_async(handles, Timing.BEFORE, param)
            if not param.returned_early:
                replace = self._claim_replace(handles)
                if replace is not None:
                    param.result = self._replacement(await self._fire_async(replace, param, claimed=True))
                else:
                    try:
                        param.result = await original(*self._call_args(slot, param), **param.kwargs)
                    except Exception as exc:
                        param.throwable = exc
            await self._run_async(handles, Timing.AFTER, param)
            return self._outcome(slot, param)

        return dispatcher

    def _begin(
        self, slot: _PatchedSlot, args: tuple[Any, ...], kwargs: dict[str, Any]
    ) -> tuple[HookParam, tuple[HookHandle, ...]] | None:
        handles = tuple(h for h in slot.handles if h.active and h.operation.accepts_call(args, kwargs))
        if not handles:
            return None
        if slot.kind is OperationKind.STATIC:
            receiver, rest = None, list(args)
        else:
            receiver, rest = (args[0] if args else None), list(args[1:])
        param = HookParam(method=handles[0].operation, this_object=receiver, args=rest, kwargs=dict(kwargs))
        return param, handles

    @staticmethod
    def _call_args(slot: _PatchedSlot, param: HookParam) -> list[Any]:
        if slot.kind is OperationKind.STATIC:
            return param.args_or_empty
        return [param.this_object, *param.args_or_empty]

    @staticmethod
    def _claim_replace(handles: tuple[HookHandle, ...]) -> HookHandle | None:
        """The most recent replace handle that can still fire, already claimed.

        A one-shot replace that is spent, or held by a call still in flight,
        is passed over; with none left the original operation runs.
        """
        for handle in reversed(handles):
            if handle.timing is Timing.REPLACE and handle.claim():
                return handle
        return None

    @staticmethod
    def _replacement(value: Any) -> Any:
        return None if value is NO_VALUE else value

    @staticmethod
    def _outcome(slot: _PatchedSlot, param: HookParam) -> Any:
        if param.throwable is not None:
            raise param.throwable
        if slot.kind is OperationKind.CONSTRUCTOR:
            return None
        return param.result

    def _run(self, handles: tuple[HookHandle, ...], timing: Timing, param: HookParam) -> None:
        for handle in handles:
            if handle.timing is timing:
                self._fire(handle, param)

    async def _run_async(self, handles: tuple[HookHandle, ...], timing: Timing, param: HookParam) -> None:
        for handle in handles:
            if handle.timing is timing:
                await self._fire_async(handle, param)

    def _fire(self, handle: HookHandle, param: HookParam, *, claimed: bool = False) -> Any:
        if not claimed and not handle.claim():
            return NO_VALUE
        param.method = handle.operation
        try:
            value = handle.callback(param)
            if inspect.iscoroutine(value):
                value.close()
                raise InterceptorError(
                    f"{handle.operation.describe()} is synchronous; its hook returned a coroutine",
                    code="HOOK_NOT_AWAITED",
                )
            return value
        except Exception as exc:
            self._report_failure(handle, exc)
            return NO_VALUE
        finally:
            if handle.one_shot:
                self.uninstall(handle)

    async def _fire_async(self, handle: HookHandle, param: HookParam, *, claimed: bool = False) -> Any:
        if not claimed and not handle.claim():
            return NO_VALUE
        param.method = handle.operation
        try:
            value = handle.callback(param)
            if inspect.isawaitable(value):
                value = await value
            return value
        except Exception as exc:
            self._report_failure(handle, exc)
            return NO_VALUE
        finally:
            if handle.one_shot:
                self.uninstall(handle)

    @staticmethod
    def _report_failure(handle: HookHandle, exc: Exception) -> None:
        report(
            DiagnosticKind.CALLBACK,
            "Hook callback raised",
            error=exc,
            operation=handle.operation.describe(),
            timing=handle.timing.value,
        )


_interceptor = MethodInterceptor()


def get_interceptor() -> MethodInterceptor:
    return _interceptor


def set_interceptor(interceptor: MethodInterceptor) -> MethodInterceptor:
    """Replace the process-wide interceptor, returning the previous one."""
    global _interceptor
    previous, _interceptor = _interceptor, interceptor
    return previous
