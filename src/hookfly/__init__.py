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
"""hookfly — annotation-driven method hooking for Python classes."""

from hookfly.core import Config, configure
from hookfly.diagnostics import CapturingSink, Diagnostic, DiagnosticKind, capture_diagnostics
from hookfly.hooks import (
    CallConstructors,
    CallMethods,
    EmptyHook,
    HookEntity,
    HookState,
    KeepParam,
    NoneHook,
    Param,
    hook_block_running,
    hook_class,
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
from hookfly.interceptor import NO_VALUE, HookParam, MethodInterceptor, Timing
from hookfly.resolver import ImportLoader, NamespaceLoader, TypeResolver

__version__ = "0.1.0"

__all__ = [
    "NO_VALUE",
    "CallConstructors",
    "CallMethods",
    "CapturingSink",
    "Config",
    "Diagnostic",
    "DiagnosticKind",
    "EmptyHook",
    "HookEntity",
    "HookParam",
    "HookState",
    "ImportLoader",
    "KeepParam",
    "MethodInterceptor",
    "NamespaceLoader",
    "NoneHook",
    "Param",
    "Timing",
    "TypeResolver",
    "__version__",
    "capture_diagnostics",
    "configure",
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
    "return_type",
]
