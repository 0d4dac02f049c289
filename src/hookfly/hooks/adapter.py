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
"""Call adapter — bridges an intercepted call back to the hook method."""

from __future__ import annotations

import inspect
from collections.abc import Sequence
from typing import Any

from hookfly.diagnostics import DiagnosticKind, report
from hookfly.hooks.params import TypeConstraint
from hookfly.hooks.scanner import CandidateOperation
from hookfly.interceptor.types import NO_VALUE, HookCallback, HookParam, Timing


def original_arguments(param: HookParam) -> list[Any]:
    """Values of the operation's formal parameters, in declaration order.

    Keyword arguments are folded into their positions and omitted arguments
    take their defaults. Extra positional and keyword arguments collected by
    ``*args`` and ``**kwargs`` are left out, matching the parameter types
    the operation is matched on; they stay reachable through ``param.args``
    and ``param.kwargs``. A call that does not bind to the signature yields
    the positional arguments as given.
    """
    args = param.args_or_empty
    signature = param.method.signature
    if signature is None:
        return list(args)

    prefix = [param.this_object] if param.method.has_receiver else []
    try:
        bound = signature.bind(*prefix, *args, **param.kwargs)
    except TypeError:
        return list(args)
    bound.apply_defaults()

    variadic = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    values = [value for name, value in bound.arguments.items() if signature.parameters[name].kind not in variadic]
    return values[len(prefix):]


def build_callback(
    entity: Any,
    candidate: CandidateOperation,
    param_types: Sequence[TypeConstraint],
) -> HookCallback:
    """Build the callback the interceptor invokes for *candidate* on *entity*.

    The hook method receives only the context when it declares no target
    parameters, the context followed by the original arguments otherwise.
    Replace hooks on methods yield the hook's return value, or ``NO_VALUE``
    when it returned nothing; replace hooks on constructors yield the
    receiver. Exceptions from the hook method are reported and swallowed
    here, so the binding stays installed.
    """
    method = candidate.bind(entity)
    takes_args = bool(param_types)
    timing = candidate.intent.timing
    constructor = candidate.intent.is_constructor
    hook_name = type(entity).__qualname__

    def callback(param: HookParam) -> Any:
        args = (param, *original_arguments(param)) if takes_args else (param,)
        try:
            value = method(*args)
        except Exception as exc:
            report(
                DiagnosticKind.CALLBACK,
                f"Hook method {candidate.describe()} raised {type(exc).__name__}",
                error=exc,
                hook=hook_name,
                candidate=candidate.describe(),
                operation=param.method.describe(),
            )
            return NO_VALUE

        if timing is not Timing.REPLACE:
            return value
        if constructor:
            return param.this_object
        return NO_VALUE if value is None else value

    callback.__qualname__ = f"{hook_name}.{candidate.name}.<hook>"
    return callback
