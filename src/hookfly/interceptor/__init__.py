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
"""Method interception — runtime redirection of class operations."""

from hookfly.interceptor.interceptor import (
    MethodInterceptor,
    get_interceptor,
    set_interceptor,
    unwrap_dispatcher,
)
from hookfly.interceptor.operation import OperationKind, TargetOperation
from hookfly.interceptor.types import NO_VALUE, HookHandle, HookParam, Timing

__all__ = [
    "NO_VALUE",
    "HookHandle",
    "HookParam",
    "MethodInterceptor",
    "OperationKind",
    "TargetOperation",
    "Timing",
    "get_interceptor",
    "set_interceptor",
    "unwrap_dispatcher",
]
