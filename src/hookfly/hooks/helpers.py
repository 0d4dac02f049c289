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
"""Imperative hooking helpers for code that does not use a HookEntity.

::

    hooks = hook_class("shop.models.Cart")
    hooks.method("add", "shop.models.Item", int, before=log_add)
    hooks.constructors_all(after=track_new_cart)
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from hookfly.diagnostics import DiagnosticKind, report
from hookfly.hooks.matcher import discover_operations, matches
from hookfly.hooks.params import Exact, TypeConstraint
from hookfly.interceptor.interceptor import MethodInterceptor, get_interceptor
from hookfly.interceptor.operation import TargetOperation
from hookfly.interceptor.types import HookCallback, HookHandle, HookParam, Timing, UnhookCallback
from hookfly.resolver import TypeLoader, TypeResolver, get_resolver


class ClassHooks:
    """Hooks operations of one target class directly through the interceptor.

    Every install method takes the same callbacks: *before*, *after* and
    *replace* receive a :class:`HookParam`; passing *on_unhook* makes the
    installation one-shot and calls it once the hook is removed.
    """

    def __init__(
        self,
        target: type,
        *,
        interceptor: MethodInterceptor | None = None,
        resolver: TypeResolver | None = None,
        loader: TypeLoader | None = None,
    ) -> None:
        self.target = target
        self._interceptor = interceptor if interceptor is not None else get_interceptor()
        self._resolver = resolver if resolver is not None else get_resolver()
        self._loader = loader

    def method(
        self,
        name: str,
        *arg_types: type | str,
        before: HookCallback | None = None,
        after: HookCallback | None = None,
        replace: HookCallback | None = None,
        on_unhook: UnhookCallback | None = None,
    ) -> list[HookHandle]:
        """Hook the method *name* whose parameters are exactly *arg_types*."""
        methods, _ = discover_operations(self.target)
        return self._install_exact(methods, (name,), arg_types, before, after, replace, on_unhook)

    def constructor(
        self,
        *arg_types: type | str,
        before: HookCallback | None = None,
        after: HookCallback | None = None,
        replace: HookCallback | None = None,
        on_unhook: UnhookCallback | None = None,
    ) -> list[HookHandle]:
        """Hook the constructor whose parameters are exactly *arg_types*."""
        _, constructors = discover_operations(self.target)
        return self._install_exact(constructors, (), arg_types, before, after, replace, on_unhook)

    def method_all(
        self,
        *,
        before: HookCallback | None = None,
        after: HookCallback | None = None,
        replace: HookCallback | None = None,
        on_unhook: UnhookCallback | None = None,
    ) -> list[HookHandle]:
        """Hook every concrete method declared on the target."""
        methods, _ = discover_operations(self.target, expand_overloads=False)
        concrete = [op for op in methods if not op.is_abstract]
        return self._install(concrete, before, after, replace, on_unhook)

    def constructors_all(
        self,
        *,
        before: HookCallback | None = None,
        after: HookCallback | None = None,
        replace: HookCallback | None = None,
        on_unhook: UnhookCallback | None = None,
    ) -> list[HookHandle]:
        """Hook every constructor declared on the target."""
        _, constructors = discover_operations(self.target, expand_overloads=False)
        return self._install(constructors, before, after, replace, on_unhook)

    def _install_exact(
        self,
        operations: Sequence[TargetOperation],
        names: tuple[str, ...],
        arg_types: tuple[type | str, ...],
        before: HookCallback | None,
        after: HookCallback | None,
        replace: HookCallback | None,
        on_unhook: UnhookCallback | None,
    ) -> list[HookHandle]:
        constraints = self._constraints(arg_types)
        selected = [
            op
            for op in operations
            if len(op.param_types) == len(constraints) and matches(op, names, constraints, "")
        ]
        if not selected:
            report(
                DiagnosticKind.NO_MATCH,
                f"No operation of {self.target.__qualname__} matches {'/'.join(names) or '<init>'}",
                target=self.target.__qualname__,
                names=list(names),
                param_types=[repr(c) for c in constraints],
            )
        return self._install(selected, before, after, replace, on_unhook)

    def _constraints(self, arg_types: tuple[type | str, ...]) -> list[TypeConstraint]:
        return [
            Exact(self._resolver.resolve(tp, self._loader) if isinstance(tp, str) else tp)
            for tp in arg_types
        ]

    def _install(
        self,
        operations: Sequence[TargetOperation],
        before: HookCallback | None,
        after: HookCallback | None,
        replace: HookCallback | None,
        on_unhook: UnhookCallback | None,
    ) -> list[HookHandle]:
        handles: list[HookHandle] = []
        try:
            for op in operations:
                for timing, callback in ((Timing.BEFORE, before), (Timing.AFTER, after), (Timing.REPLACE, replace)):
                    if callback is None:
                        continue
                    handles.append(
                        self._interceptor.install(
                            op,
                            timing,
                            callback,
                            one_shot=on_unhook is not None,
                            on_unhook=on_unhook,
                        )
                    )
        except Exception:
            for handle in handles:
                self._interceptor.uninstall(handle)
            raise
        return handles


def hook_class(
    target: type | str,
    loader: TypeLoader | None = None,
    *,
    interceptor: MethodInterceptor | None = None,
    resolver: TypeResolver | None = None,
) -> ClassHooks:
    """Return :class:`ClassHooks` for *target*, resolving it first when given by name."""
    resolver = resolver if resolver is not None else get_resolver()
    cls = resolver.resolve(target, loader) if isinstance(target, str) else target
    return ClassHooks(cls, interceptor=interceptor, resolver=resolver, loader=loader)


@dataclass(frozen=True)
class HookResult:
    """Outcome of :func:`hook_block_running`."""

    value: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def on_failure(self, handler: Callable[[BaseException], Any]) -> HookResult:
        if self.error is not None:
            handler(self.error)
        return self


def hook_block_running(param: HookParam, block: Callable[[HookParam], Any]) -> HookResult:
    """Run *block* inside a hook, reporting instead of raising on failure."""
    try:
        return HookResult(value=block(param))
    except Exception as exc:
        report(
            DiagnosticKind.CALLBACK,
            f"Hook block failed in {param.method.describe()}",
            error=exc,
            operation=param.method.describe(),
        )
        return HookResult(error=exc)
