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
"""Unified exception hierarchy for hookfly.

All hookfly errors inherit from HookflyException, enabling unified error
handling across the binding engine, the resolver and the interceptor.

Categories:
- ConfigurationError: malformed hook definitions (bad signatures, missing
  context parameter, missing target class)
- ResolutionError: a named type could not be found through the loader chain
- NoMatchWarning: a candidate's filter criteria matched no target operation
- UserCallbackError: an exception escaped a user hook callback
- InterceptorError: the interceptor could not patch or restore an operation
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class HookflyException(Exception):
    """Base exception for all hookfly errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "HOOK_CONFIG").
        context: Arbitrary key-value pairs describing where the error arose.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Definition Exceptions
# =============================================================================


class ConfigurationError(HookflyException):
    """A hook definition or one of its candidate methods is malformed."""


class NoMatchWarning(HookflyException):
    """Filter criteria of a candidate method matched no target operation."""


# =============================================================================
# Resolution Exceptions
# =============================================================================


class ResolutionError(HookflyException):
    """A named type could not be resolved."""


class TypeResolutionError(ResolutionError):
    """No loader in the chain could produce the requested type."""


# =============================================================================
# Runtime Exceptions
# =============================================================================


class UserCallbackError(HookflyException):
    """An exception was raised inside an installed hook callback."""


class InterceptorError(HookflyException):
    """The interceptor failed to install or restore a redirection."""
