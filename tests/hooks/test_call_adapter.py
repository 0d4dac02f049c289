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
"""Tests for the call adapter bridging intercepted calls to hook methods."""

from __future__ import annotations

from typing import Any

from hookfly.diagnostics import CapturingSink, DiagnosticKind
from hookfly.hooks.adapter import build_callback, original_arguments
from hookfly.hooks.matcher import discover_operations
from hookfly.hooks.params import UNCONSTRAINED
from hookfly.hooks.scanner import build_candidate
from hookfly.hooks.types import Intent
from hookfly.interceptor.operation import TargetOperation
from hookfly.interceptor.types import NO_VALUE, HookParam


class Mailer:
    def __init__(self, host: str, port: int = 25) -> None:
        self.host = host

    def send(self, to: str, subject: str = "(none)", *cc: str, **headers: str) -> bool:
        return True

    def ping(self) -> None: ...

    @staticmethod
    def normalize(address: str, lower: bool = True) -> str:
        return address.lower() if lower else address


class Recorder:
    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    def context_only(self, param: HookParam) -> None:
        self.calls.append((param,))

    def with_args(self, param: HookParam, to: Any, subject: Any) -> str:
        self.calls.append((param, to, subject))
        return f"sent:{to}"

    def returns_nothing(self, param: HookParam, to: Any, subject: Any) -> None:
        self.calls.append((to,))

    def explode(self, param: HookParam) -> None:
        raise RuntimeError("hook failed")


def _op(attr_name: str) -> TargetOperation:
    methods, constructors = discover_operations(Mailer)
    return next(op for op in (*methods, *constructors) if op.attr_name == attr_name)


def _callback(recorder: Recorder, name: str, intent: Intent, param_types: list[Any]) -> Any:
    candidate = build_candidate(Recorder.__dict__[name], intent, ("send",))
    return build_callback(recorder, candidate, param_types)


# ---------------------------------------------------------------------------
# original_arguments()
# ---------------------------------------------------------------------------


class TestOriginalArguments:
    def test_keywords_are_folded_into_positions(self) -> None:
        mailer = Mailer("smtp")
        param = HookParam(method=_op("send"), this_object=mailer, args=[], kwargs={"to": "a@b", "subject": "hi"})
        assert original_arguments(param) == ["a@b", "hi"]

    def test_defaults_fill_omitted_arguments(self) -> None:
        param = HookParam(method=_op("send"), this_object=Mailer("smtp"), args=["a@b"])
        assert original_arguments(param) == ["a@b", "(none)"]

    def test_variadic_extras_are_left_to_the_context(self) -> None:
        param = HookParam(
            method=_op("send"),
            this_object=Mailer("smtp"),
            args=["a@b", "hi", "c@d", "e@f"],
            kwargs={"priority": "high"},
        )
        assert original_arguments(param) == ["a@b", "hi"]
        assert param.args == ["a@b", "hi", "c@d", "e@f"]

    def test_static_methods_have_no_receiver_to_strip(self) -> None:
        param = HookParam(method=_op("normalize"), this_object=None, args=["A@B"])
        assert original_arguments(param) == ["A@B", True]

    def test_missing_arguments_are_an_empty_list(self) -> None:
        param = HookParam(method=_op("ping"), this_object=Mailer("smtp"), args=None)
        assert original_arguments(param) == []

    def test_unbindable_call_falls_back_to_raw_arguments(self) -> None:
        param = HookParam(method=_op("ping"), this_object=Mailer("smtp"), args=[1, 2])
        assert original_arguments(param) == [1, 2]


# ---------------------------------------------------------------------------
# build_callback()
# ---------------------------------------------------------------------------


class TestBuildCallback:
    def test_no_resolved_parameters_passes_only_the_context(self) -> None:
        recorder = Recorder()
        callback = _callback(recorder, "context_only", Intent.BEFORE_METHOD, [])
        param = HookParam(method=_op("send"), this_object=Mailer("smtp"), args=["a@b", "hi"])

        callback(param)
        assert recorder.calls == [(param,)]

    def test_resolved_parameters_receive_the_original_arguments(self) -> None:
        recorder = Recorder()
        callback = _callback(recorder, "with_args", Intent.AFTER_METHOD, [UNCONSTRAINED, UNCONSTRAINED])
        param = HookParam(method=_op("send"), this_object=Mailer("smtp"), args=["a@b"], kwargs={"subject": "hi"})

        assert callback(param) == "sent:a@b"
        assert recorder.calls == [(param, "a@b", "hi")]

    def test_replace_returns_the_hook_value(self) -> None:
        callback = _callback(Recorder(), "with_args", Intent.REPLACE_METHOD, [UNCONSTRAINED, UNCONSTRAINED])
        param = HookParam(method=_op("send"), this_object=Mailer("smtp"), args=["x", "y"])
        assert callback(param) == "sent:x"

    def test_replace_without_value_yields_no_value(self) -> None:
        callback = _callback(Recorder(), "returns_nothing", Intent.REPLACE_METHOD, [UNCONSTRAINED, UNCONSTRAINED])
        param = HookParam(method=_op("send"), this_object=Mailer("smtp"), args=["x", "y"])
        assert callback(param) is NO_VALUE

    def test_constructor_replace_yields_the_receiver(self) -> None:
        callback = _callback(Recorder(), "context_only", Intent.REPLACE_CONSTRUCTOR, [])
        mailer = object.__new__(Mailer)
        param = HookParam(method=_op("__init__"), this_object=mailer, args=["smtp"])

        assert callback(param) is mailer

    def test_hook_errors_are_reported_not_raised(self, diagnostics: CapturingSink) -> None:
        callback = _callback(Recorder(), "explode", Intent.BEFORE_METHOD, [])
        param = HookParam(method=_op("send"), this_object=Mailer("smtp"), args=["a@b"])

        assert callback(param) is NO_VALUE
        (diagnostic,) = diagnostics.of_kind(DiagnosticKind.CALLBACK)
        assert isinstance(diagnostic.error, RuntimeError)
        assert diagnostic.context["hook"] == "Recorder"
        assert diagnostic.context["operation"] == _op("send").describe()
