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
"""Tests for the intent decorators and hook parameter markers."""

from __future__ import annotations

import pytest

from hookfly.hooks.decorators import (
    HOOK_ONCE_ATTR,
    INTENTS_ATTR,
    PARAM_SLOTS_ATTR,
    RETURN_TYPE_ATTR,
    hook_once,
    on_after,
    on_before,
    on_constructor_after,
    on_constructor_before,
    on_constructor_replace,
    on_replace,
    param_slots,
    return_type,
)
from hookfly.hooks.types import PASS_ORDER, Intent, KeepParam, Param
from hookfly.interceptor.types import Timing


# ---------------------------------------------------------------------------
# Method intents
# ---------------------------------------------------------------------------


class TestMethodIntents:
    def test_on_before_records_target_names(self) -> None:
        @on_before("save", "update")
        def hook(self, param): ...

        assert getattr(hook, INTENTS_ATTR) == {Intent.BEFORE_METHOD: ("save", "update")}

    def test_decorator_returns_the_same_function(self) -> None:
        def hook(self, param): ...

        assert on_after("save")(hook) is hook

    def test_stacked_intents_accumulate(self) -> None:
        @on_before("save")
        @on_replace("save")
        def hook(self, param): ...

        intents = getattr(hook, INTENTS_ATTR)
        assert intents == {Intent.REPLACE_METHOD: ("save",), Intent.BEFORE_METHOD: ("save",)}

    def test_no_names_is_allowed(self) -> None:
        @on_after()
        def hook(self, param): ...

        assert getattr(hook, INTENTS_ATTR) == {Intent.AFTER_METHOD: ()}


# ---------------------------------------------------------------------------
# Constructor intents
# ---------------------------------------------------------------------------


class TestConstructorIntents:
    def test_bare_usage(self) -> None:
        @on_constructor_before
        def hook(self, param): ...

        assert getattr(hook, INTENTS_ATTR) == {Intent.BEFORE_CONSTRUCTOR: ()}

    def test_called_usage(self) -> None:
        @on_constructor_after()
        def hook(self, param): ...

        assert getattr(hook, INTENTS_ATTR) == {Intent.AFTER_CONSTRUCTOR: ()}

    def test_replace_constructor(self) -> None:
        @on_constructor_replace
        def hook(self, param): ...

        assert Intent.REPLACE_CONSTRUCTOR in getattr(hook, INTENTS_ATTR)


# ---------------------------------------------------------------------------
# Filters and modifiers
# ---------------------------------------------------------------------------


class TestParamSlots:
    def test_slots_are_normalized_to_marker_tuples(self) -> None:
        @param_slots("shop.models.User", None, KeepParam(), Param("int"))
        def hook(self, param, a, b, c, d): ...

        assert getattr(hook, PARAM_SLOTS_ATTR) == (
            (Param("shop.models.User"),),
            (),
            (KeepParam(),),
            (Param("int"),),
        )

    def test_rejects_other_values(self) -> None:
        with pytest.raises(TypeError, match="param_slots"):
            param_slots(42)  # type: ignore[arg-type]


class TestModifiers:
    def test_return_type(self) -> None:
        @return_type("builtins.str")
        def hook(self, param): ...

        assert getattr(hook, RETURN_TYPE_ATTR) == "builtins.str"

    def test_hook_once(self) -> None:
        @hook_once
        def hook(self, param): ...

        assert getattr(hook, HOOK_ONCE_ATTR) is True


# ---------------------------------------------------------------------------
# Markers and intents
# ---------------------------------------------------------------------------


class TestParamMarker:
    def test_default_matches_any(self) -> None:
        assert Param().matches_any

    def test_empty_name_matches_any(self) -> None:
        assert Param("").matches_any

    def test_named_type_does_not_match_any(self) -> None:
        assert not Param("shop.models.User").matches_any


class TestIntent:
    def test_timings(self) -> None:
        assert Intent.BEFORE_METHOD.timing is Timing.BEFORE
        assert Intent.AFTER_CONSTRUCTOR.timing is Timing.AFTER
        assert Intent.REPLACE_CONSTRUCTOR.timing is Timing.REPLACE

    def test_constructor_flag(self) -> None:
        assert Intent.BEFORE_CONSTRUCTOR.is_constructor
        assert not Intent.REPLACE_METHOD.is_constructor

    def test_replace_intent_of_the_same_kind(self) -> None:
        assert Intent.AFTER_METHOD.replace_intent is Intent.REPLACE_METHOD
        assert Intent.BEFORE_CONSTRUCTOR.replace_intent is Intent.REPLACE_CONSTRUCTOR

    def test_pass_order(self) -> None:
        assert PASS_ORDER == (
            Intent.BEFORE_METHOD,
            Intent.AFTER_METHOD,
            Intent.REPLACE_METHOD,
            Intent.BEFORE_CONSTRUCTOR,
            Intent.AFTER_CONSTRUCTOR,
            Intent.REPLACE_CONSTRUCTOR,
        )
