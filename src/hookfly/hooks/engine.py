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
"""Binding engine — plans and activates the bindings of a hook definition.

Binding is split into two phases:

* :meth:`BindingEngine.plan` is pure data gathering. It scans the hook
  class, resolves parameter types and filters the target's operations,
  producing a :class:`BindingPlan`.
* :meth:`BindingEngine.activate` registers every planned binding with the
  method interceptor.

Six passes run in a fixed order (see :data:`~hookfly.hooks.types.PASS_ORDER`).
A method that also carries the replace intent of the same kind is left out
of the before and after passes: replace is exclusive.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from hookfly.diagnostics import report_exception
from hookfly.hooks.adapter import build_callback
from hookfly.hooks.helpers import ClassHooks
from hookfly.hooks.matcher import discover_operations, filter_operations
from hookfly.hooks.params import TypeConstraint, resolve_param_types
from hookfly.hooks.scanner import CandidateOperation, IdentityKey, scan
from hookfly.hooks.types import PASS_ORDER, Intent
from hookfly.interceptor.interceptor import MethodInterceptor, get_interceptor
from hookfly.interceptor.operation import TargetOperation
from hookfly.interceptor.types import HookHandle, HookParam
from hookfly.kernel.exceptions import ConfigurationError
from hookfly.resolver import TypeLoader, TypeResolver, get_resolver

logger = structlog.get_logger("hookfly.hooks.engine")


@dataclass(frozen=True)
class PlannedBinding:
    """One (candidate, target operation) pair awaiting registration."""

    candidate: CandidateOperation
    operation: TargetOperation
    param_types: tuple[TypeConstraint, ...]

    @property
    def intent(self) -> Intent:
        return self.candidate.intent

    @property
    def one_shot(self) -> bool:
        return self.candidate.one_shot


@dataclass
class BindingPlan:
    """Everything the build phase learned about one hook class and its target.

    Attributes:
        hook: The hook definition class.
        target: The resolved target class.
        methods: Method operations of the target, in declaration order.
        constructors: Constructor operations of the target.
        bindings: Planned bindings, pass by pass.
        excluded: Candidates left out of a before/after pass because they
            also carry the replace intent.
        unmatched: Candidates whose criteria matched nothing.
    """

    hook: type
    target: type
    methods: list[TargetOperation] = field(default_factory=list)
    constructors: list[TargetOperation] = field(default_factory=list)
    bindings: list[PlannedBinding] = field(default_factory=list)
    excluded: list[IdentityKey] = field(default_factory=list)
    unmatched: list[CandidateOperation] = field(default_factory=list)

    def for_intent(self, intent: Intent) -> list[PlannedBinding]:
        return [b for b in self.bindings if b.intent is intent]


@dataclass(eq=False)
class Binding:
    """A planned binding that has been registered with the interceptor."""

    planned: PlannedBinding
    handle: HookHandle
    interceptor: MethodInterceptor

    @property
    def active(self) -> bool:
        return self.handle.active

    def uninstall(self) -> bool:
        return self.interceptor.uninstall(self.handle)


class BindingEngine:
    """Plans and activates hook bindings.

    *interceptor* and *resolver* default to the process-wide instances,
    looked up when they are first needed.
    """

    def __init__(
        self,
        interceptor: MethodInterceptor | None = None,
        resolver: TypeResolver | None = None,
    ) -> None:
        self._interceptor = interceptor
        self._resolver = resolver

    @property
    def interceptor(self) -> MethodInterceptor:
        return self._interceptor if self._interceptor is not None else get_interceptor()

    @property
    def resolver(self) -> TypeResolver:
        return self._resolver if self._resolver is not None else get_resolver()

    # ------------------------------------------------------------------
    # Build phase
    # ------------------------------------------------------------------

    def plan(self, hook: type, target: type, *, loader: TypeLoader | None = None) -> BindingPlan:
        """Scan *hook*, match it against *target*, and return the plan."""
        methods, constructors = discover_operations(target)
        plan = BindingPlan(hook=hook, target=target, methods=methods, constructors=constructors)

        for intent in PASS_ORDER:
            operations = constructors if intent.is_constructor else methods
            for key, candidate in scan(hook, intent).items():
                if not intent.is_replace and candidate.has_intent(intent.replace_intent):
                    plan.excluded.append(key)
                    continue
                try:
                    param_types = resolve_param_types(candidate, self.resolver, loader)
                    matched = filter_operations(candidate, operations, param_types, hook=hook, target=target)
                except Exception as exc:
                    report_exception(exc, hook=hook.__qualname__, candidate=candidate.describe())
                    continue
                if matched and inspect.iscoroutinefunction(candidate.function):
                    matched = _async_only(hook, candidate, matched)
                    if not matched:
                        continue
                if not matched:
                    plan.unmatched.append(candidate)
                plan.bindings.extend(PlannedBinding(candidate, op, tuple(param_types)) for op in matched)

        logger.debug(
            "binding_plan_built",
            hook=hook.__qualname__,
            target=target.__qualname__,
            bindings=len(plan.bindings),
            excluded=len(plan.excluded),
            unmatched=len(plan.unmatched),
        )
        return plan

    # ------------------------------------------------------------------
    # Activate phase
    # ------------------------------------------------------------------

    def activate(self, entity: Any, plan: BindingPlan) -> list[Binding]:
        """Register every planned binding on behalf of *entity*.

        A binding that fails to install is reported and skipped.
        """
        interceptor = self.interceptor
        bindings: list[Binding] = []
        for planned in plan.bindings:
            try:
                callback = build_callback(entity, planned.candidate, planned.param_types)
                handle = interceptor.install(
                    planned.operation,
                    planned.intent.timing,
                    callback,
                    one_shot=planned.one_shot,
                    on_unhook=_log_unhook if planned.one_shot else None,
                )
            except Exception as exc:
                report_exception(
                    exc,
                    hook=plan.hook.__qualname__,
                    candidate=planned.candidate.describe(),
                    operation=planned.operation.describe(),
                )
                continue
            bindings.append(Binding(planned=planned, handle=handle, interceptor=interceptor))
        return bindings

    def install_catch_all(
        self,
        target: type,
        *,
        methods: tuple[Callable[[HookParam], Any], Callable[[HookParam], Any]] | None = None,
        constructors: tuple[Callable[[HookParam], Any], Callable[[HookParam], Any]] | None = None,
    ) -> list[HookHandle]:
        """Install before/after dispatch pairs on every method and/or constructor.

        The after dispatch is skipped when the call has no receiver. When an
        installation fails, the handles installed so far are removed before
        the error propagates.
        """
        interceptor = self.interceptor
        hooks = ClassHooks(target, interceptor=interceptor, resolver=self.resolver)
        handles: list[HookHandle] = []
        try:
            if methods is not None:
                before, after = methods
                handles.extend(hooks.method_all(before=before, after=_with_receiver(after)))
            if constructors is not None:
                before, after = constructors
                handles.extend(hooks.constructors_all(before=before, after=_with_receiver(after)))
        except Exception:
            for handle in handles:
                interceptor.uninstall(handle)
            raise
        return handles


def _with_receiver(dispatch: Callable[[HookParam], Any]) -> Callable[[HookParam], Any]:
    def after(param: HookParam) -> Any:
        if param.this_object is None:
            return None
        return dispatch(param)

    return after


def _log_unhook(handle: HookHandle) -> None:
    logger.debug(
        "one_shot_binding_released",
        operation=handle.operation.describe(),
        timing=handle.timing.value,
    )


def _async_only(hook: type, candidate: CandidateOperation, matched: list[TargetOperation]) -> list[TargetOperation]:
    """Drop the synchronous operations a coroutine hook method matched, reporting them."""
    rejected = [op for op in matched if not op.is_async]
    if rejected:
        report_exception(
            ConfigurationError(
                f"{candidate.describe()} is a coroutine function and cannot hook synchronous operations",
                code="HOOK_SIGNATURE",
                context={"operations": [op.describe() for op in rejected]},
            ),
            hook=hook.__qualname__,
            candidate=candidate.describe(),
        )
    return [op for op in matched if op.is_async]
