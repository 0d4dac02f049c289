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
"""Tests for HookEntity construction, target resolution and catch-all hooks."""

from __future__ import annotations

from typing import Any

import pytest

from hookfly.diagnostics import CapturingSink, DiagnosticKind
from hookfly.hooks.decorators import on_after, on_before
from hookfly.hooks.engine import BindingEngine
from hookfly.hooks.entity import CallConstructors, CallMethods, HookEntity
from hookfly.hooks.types import EmptyHook, HookState, NoneHook
from hookfly.interceptor.interceptor import MethodInterceptor
from hookfly.interceptor.types import HookParam
from hookfly.kernel.exceptions import ConfigurationError, ResolutionError
from hookfly.resolver import NamespaceLoader


class Ledger:
    def __init__(self, total: int = 0) -> None:
        self.total = total

    def credit(self, amount: int) -> int:
        self.total += amount
        return self.total

    @staticmethod
    def zero() -> int:
        return 0


LOADER = NamespaceLoader({"bank.Ledger": Ledger})


# ---------------------------------------------------------------------------
# Hook definitions
# ---------------------------------------------------------------------------


class LedgerHooks(HookEntity[Ledger]):
    def __init__(self) -> None:
        self.seen: list[Any] = []
        self.initialized = False
        super().__init__()

    def on_init(self) -> None:
        self.initialized = True

    @on_before("credit")
    def before_credit(self, param: HookParam, amount: int) -> None:
        self.seen.append(amount)


class EngineHooks(HookEntity[Ledger]):
    @on_before("credit")
    def before_credit(self, param: HookParam) -> None: ...


class NamedTargetHooks(HookEntity["bank.Ledger"]):
    @on_after("credit")
    def after_credit(self, param: HookParam) -> None: ...


class MissingTargetHooks(HookEntity["bank.Missing"]):
    @on_after("credit")
    def after_credit(self, param: HookParam) -> None: ...


class UntargetedHooks(HookEntity):
    pass


class SkippedHooks(HookEntity[NoneHook]):
    def on_init(self) -> None:
        raise AssertionError("on_init must not run for a skipped hook")


class EmptyHooks(HookEntity[EmptyHook]):
    def on_init(self) -> None:
        self.initialized = True


class RuntimeTargetHooks(HookEntity):
    def __init__(self, class_name: str) -> None:
        self.class_name = class_name
        super().__init__(LOADER)

    def set_target_class(self) -> type:
        return self.find_class(self.class_name)

    @on_before("credit")
    def before_credit(self, param: HookParam) -> None: ...


class FailingInitHooks(HookEntity[Ledger]):
    def on_init(self) -> None:
        raise RuntimeError("setup failed")


class FaultyHooks(HookEntity[Ledger]):
    def __init__(self) -> None:
        self.calls = 0
        super().__init__()

    @on_before("credit")
    def explode(self, param: HookParam) -> None:
        self.calls += 1
        raise ValueError("hook bug")

    @on_before("credit")
    def broken_signature(self, amount: int) -> None: ...


class MethodWatch(HookEntity[Ledger], CallMethods):
    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []
        super().__init__()

    def call_on_before_methods(self, param: HookParam) -> None:
        self.events.append(("before", param.method.name))

    def call_on_after_methods(self, param: HookParam) -> None:
        self.events.append(("after", param.method.name))


class ConstructorWatch(HookEntity[Ledger], CallConstructors):
    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []
        super().__init__()

    def call_on_before_constructors(self, param: HookParam) -> None:
        self.events.append(("before", list(param.args)))

    def call_on_after_constructors(self, param: HookParam) -> None:
        self.events.append(("after", param.this_object.total))


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_ready_after_binding(self) -> None:
        hooks = LedgerHooks()

        assert hooks.state is HookState.READY
        assert hooks.target_class is Ledger
        assert hooks.initialized
        assert len(hooks.bindings) == 1

    def test_bindings_dispatch_to_the_instance(self) -> None:
        hooks = LedgerHooks()
        Ledger().credit(5)
        assert hooks.seen == [5]

    def test_two_instances_bind_independently(self) -> None:
        first, second = LedgerHooks(), LedgerHooks()
        Ledger().credit(2)
        assert first.seen == [2]
        assert second.seen == [2]

    def test_unhook_all(self, interceptor: MethodInterceptor) -> None:
        hooks = LedgerHooks()

        assert hooks.unhook_all() == 1
        assert hooks.unhook_all() == 0
        Ledger().credit(5)
        assert hooks.seen == []
        assert not interceptor.is_patched(Ledger, "credit")

    def test_injected_engine(self) -> None:
        custom = MethodInterceptor()
        try:
            hooks = EngineHooks(engine=BindingEngine(interceptor=custom))

            assert hooks.interceptor is custom
            assert len(custom.installed()) == 1
        finally:
            custom.uninstall_all()


# ---------------------------------------------------------------------------
# Target resolution
# ---------------------------------------------------------------------------


class TestTargetResolution:
    def test_type_argument_by_name(self) -> None:
        hooks = NamedTargetHooks(LOADER)

        assert hooks.state is HookState.READY
        assert hooks.target_class is Ledger
        assert hooks.loader is LOADER

    def test_unresolvable_target_fails_the_hook(self, diagnostics: CapturingSink) -> None:
        hooks = MissingTargetHooks(LOADER)

        assert hooks.state is HookState.FAILED
        assert hooks.bindings == []
        (diagnostic,) = diagnostics.of_kind(DiagnosticKind.RESOLUTION)
        assert isinstance(diagnostic.error, ResolutionError)
        assert diagnostic.context["hook"] == "MissingTargetHooks"

    def test_missing_type_argument_is_a_configuration_error(self, diagnostics: CapturingSink) -> None:
        hooks = UntargetedHooks()

        assert hooks.state is HookState.FAILED
        (diagnostic,) = diagnostics.of_kind(DiagnosticKind.CONFIGURATION)
        assert isinstance(diagnostic.error, ConfigurationError)
        assert diagnostic.error.code == "HOOK_NO_TARGET"

    def test_none_hook_skips_everything(self) -> None:
        hooks = SkippedHooks()

        assert hooks.state is HookState.SKIPPED
        assert hooks.plan is None

    def test_empty_hook_still_runs_on_init(self) -> None:
        hooks = EmptyHooks()

        assert hooks.state is HookState.READY
        assert hooks.initialized
        assert hooks.plan is None
        assert hooks.bindings == []

    def test_target_chosen_at_runtime(self) -> None:
        hooks = RuntimeTargetHooks("bank.Ledger")

        assert hooks.state is HookState.READY
        assert hooks.target_class is Ledger
        assert len(hooks.bindings) == 1

    def test_find_class_falls_back_to_none_hook(self, diagnostics: CapturingSink) -> None:
        hooks = RuntimeTargetHooks("bank.Unknown")

        assert hooks.state is HookState.SKIPPED
        assert hooks.target_class is NoneHook
        assert len(diagnostics.of_kind(DiagnosticKind.RESOLUTION)) == 1

    def test_declared_target(self) -> None:
        assert LedgerHooks.declared_target() is Ledger
        assert NamedTargetHooks.declared_target(loader=LOADER) is Ledger
        assert UntargetedHooks.declared_target() is Any

    def test_declared_target_is_inherited(self) -> None:
        class Child(LedgerHooks):
            pass

        assert Child.declared_target() is Ledger

    def test_simple_name(self) -> None:
        assert HookEntity.simple_name("Lbank/Ledger;") == "bank.Ledger"


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------


class TestErrorHandling:
    def test_failing_on_init_is_reported(self, diagnostics: CapturingSink) -> None:
        hooks = FailingInitHooks()

        assert hooks.state is HookState.FAILED
        (diagnostic,) = diagnostics.of_kind(DiagnosticKind.FAILURE)
        assert isinstance(diagnostic.error, RuntimeError)
        assert diagnostic.context["state"] == "failed"

    def test_hook_errors_do_not_disable_the_binding(self, diagnostics: CapturingSink) -> None:
        hooks = FaultyHooks()
        ledger = Ledger()

        assert ledger.credit(1) == 1
        assert ledger.credit(1) == 2
        assert hooks.calls == 2
        assert len(diagnostics.of_kind(DiagnosticKind.CALLBACK)) == 2
        assert all(binding.active for binding in hooks.bindings)

    def test_malformed_candidate_does_not_stop_the_others(self, diagnostics: CapturingSink) -> None:
        hooks = FaultyHooks()

        assert hooks.state is HookState.READY
        assert [b.planned.candidate.name for b in hooks.bindings] == ["explode"]
        (diagnostic,) = diagnostics.of_kind(DiagnosticKind.CONFIGURATION)
        assert diagnostic.context["method"] == "broken_signature"


# ---------------------------------------------------------------------------
# Catch-all
# ---------------------------------------------------------------------------


class TestCatchAll:
    def test_every_method_is_dispatched(self) -> None:
        watch = MethodWatch()

        Ledger(1).credit(2)
        assert watch.events == [("before", "credit"), ("after", "credit")]
        assert len(watch.catch_all_handles) == 4

    def test_after_dispatch_needs_a_receiver(self) -> None:
        watch = MethodWatch()

        assert Ledger.zero() == 0
        assert watch.events == [("before", "zero")]

    def test_constructors_are_dispatched(self) -> None:
        watch = ConstructorWatch()

        Ledger(3).credit(1)
        assert watch.events == [("before", [3]), ("after", 3)]

    def test_unhook_all_removes_catch_all_hooks(self, interceptor: MethodInterceptor) -> None:
        watch = MethodWatch()

        assert watch.unhook_all() == 4
        assert interceptor.installed() == []

    @pytest.mark.parametrize("hook_type", [MethodWatch, ConstructorWatch])
    def test_catch_all_does_not_create_bindings(self, hook_type: type[HookEntity[Ledger]]) -> None:
        watch = hook_type()
        assert watch.bindings == []
        assert watch.state is HookState.READY
