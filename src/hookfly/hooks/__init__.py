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
"""Declarative hook definitions and the binding engine behind them."""

from hookfly.hooks.decorators import (
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
from hookfly.hooks.engine import Binding, BindingEngine, BindingPlan, PlannedBinding
from hookfly.hooks.entity import CallConstructors, CallMethods, HookEntity
from hookfly.hooks.helpers import ClassHooks, HookResult, hook_block_running, hook_class
from hookfly.hooks.params import UNCONSTRAINED, Exact, TypeConstraint, Unconstrained, resolve_param_types
from hookfly.hooks.types import EmptyHook, HookState, Intent, KeepParam, NoneHook, Param

__all__ = [
    "UNCONSTRAINED",
    "Binding",
    "BindingEngine",
    "BindingPlan",
    "CallConstructors",
    "CallMethods",
    "ClassHooks",
    "EmptyHook",
    "Exact",
    "HookEntity",
    "HookResult",
    "HookState",
    "Intent",
    "KeepParam",
    "NoneHook",
    "Param",
    "PlannedBinding",
    "TypeConstraint",
    "Unconstrained",
    "hook_block_running",
    "hook_class",
    "hook_once",
    "on_after",
    "on_before",
    "on_constructor_after",
    "on_constructor_before",
    "on_constructor_replace",
    "on_replace",
    "param_slots",
    "resolve_param_types",
    "return_type",
]
