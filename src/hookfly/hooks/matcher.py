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
"""Target matcher — discovers target operations and filters them per candidate."""

from __future__ import annotations

import inspect
import typing
from collections.abc import Callable, Sequence
from typing import Any

from hookfly.diagnostics import DiagnosticKind, report
from hookfly.hooks.params import TypeConstraint
from hookfly.hooks.scanner import CandidateOperation
from hookfly.interceptor.interceptor import unwrap_dispatcher
from hookfly.interceptor.operation import OperationKind, TargetOperation
from hookfly.resolver import canonical_name, evaluate_hints, normalize_type_name

# Attributes whose redirection would recurse through the dispatcher itself.
UNHOOKABLE = frozenset({
    "__new__",
    "__init_subclass__",
    "__class_getitem__",
    "__getattribute__",
    "__getattr__",
    "__setattr__",
    "__delattr__",
    "__del__",
})

_FORMAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def discover_operations(
    target: type, *, expand_overloads: bool = True
) -> tuple[list[TargetOperation], list[TargetOperation]]:
    """Snapshot the methods and constructors declared on *target* itself.

    Operations come out in declaration order. With *expand_overloads*, a
    function that has registered ``typing.overload`` signatures yields one
    operation per signature instead of one for the implementation.

    Returns:
        ``(methods, constructors)``
    """
    methods: list[TargetOperation] = []
    constructors: list[TargetOperation] = []
    for attr_name, raw in vars(target).items():
        if attr_name in UNHOOKABLE:
            continue
        if isinstance(raw, staticmethod):
            kind, fn = OperationKind.STATIC, raw.__func__
        elif isinstance(raw, classmethod):
            kind, fn = OperationKind.CLASS, raw.__func__
        elif inspect.isfunction(raw):
            kind = OperationKind.CONSTRUCTOR if attr_name == "__init__" else OperationKind.METHOD
            fn = raw
        else:
            continue
        if not inspect.isfunction(fn):
            continue

        fn = unwrap_dispatcher(fn)
        operations = _operations_for(target, attr_name, kind, fn, expand_overloads)
        (constructors if kind is OperationKind.CONSTRUCTOR else methods).extend(operations)
    return methods, constructors


def _operations_for(
    owner: type,
    attr_name: str,
    kind: OperationKind,
    fn: Callable[..., Any],
    expand_overloads: bool,
) -> list[TargetOperation]:
    variants = list(typing.get_overloads(fn)) if expand_overloads else []
    if not variants:
        return [_snapshot(owner, attr_name, kind, fn, fn, overload=False)]
    return [_snapshot(owner, attr_name, kind, fn, variant, overload=True) for variant in variants]


def _snapshot(
    owner: type,
    attr_name: str,
    kind: OperationKind,
    fn: Callable[..., Any],
    declaration: Callable[..., Any],
    *,
    overload: bool,
) -> TargetOperation:
    try:
        signature = inspect.signature(declaration)
    except (TypeError, ValueError):
        signature = None

    hints = evaluate_hints(declaration)
    params = list(signature.parameters.values()) if signature is not None else []
    if kind is not OperationKind.STATIC:
        params = params[1:]
    params = [p for p in params if p.kind in _FORMAL]

    return_type = None
    if kind is not OperationKind.CONSTRUCTOR and "return" in getattr(declaration, "__annotations__", {}):
        return_type = hints.get("return")
        if return_type is None:
            return_type = type(None)

    return TargetOperation(
        owner=owner,
        attr_name=attr_name,
        kind=kind,
        function=fn,
        param_types=tuple(hints.get(p.name) for p in params),
        param_names=tuple(p.name for p in params),
        return_type=return_type,
        signature=signature,
        overload=overload,
        is_abstract=bool(getattr(fn, "__isabstractmethod__", False)),
        _call_hints=hints,
    )


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------


def matches(
    operation: TargetOperation,
    names: Sequence[str],
    param_types: Sequence[TypeConstraint],
    return_filter: str,
) -> bool:
    """Pure predicate behind :func:`filter_operations`."""
    if names and not operation.is_constructor and operation.name not in names:
        return False
    if param_types:
        if len(operation.param_types) != len(param_types):
            return False
        if not all(c.accepts(actual) for c, actual in zip(param_types, operation.param_types)):
            return False
    if return_filter and not operation.is_constructor:
        if operation.return_type is None:
            return False
        if canonical_name(operation.return_type) != normalize_type_name(return_filter):
            return False
    return True


def filter_operations(
    candidate: CandidateOperation,
    operations: Sequence[TargetOperation],
    param_types: Sequence[TypeConstraint],
    *,
    hook: type | None = None,
    target: type | None = None,
) -> list[TargetOperation]:
    """Target operations *candidate* binds to, in discovery order.

    A method candidate without any criteria (no names, no parameters, no
    return filter) matches nothing. A constructor candidate without
    parameters matches the constructors that take none. An empty result is
    reported as a ``no_match`` diagnostic carrying the criteria used.
    """
    names = () if candidate.intent.is_constructor else candidate.names
    return_filter = candidate.return_type

    if candidate.intent.is_constructor and not param_types:
        matched: list[TargetOperation] = [op for op in operations if not op.param_types]
        reason = "no constructor without parameters"
    elif not names and not param_types and not return_filter:
        matched = []
        reason = "no filter criteria"
    else:
        matched = [op for op in operations if matches(op, names, param_types, return_filter)]
        reason = "no target operation satisfies the criteria"

    if not matched:
        report(
            DiagnosticKind.NO_MATCH,
            f"{candidate.describe()} matched no operation of {_label(target)}",
            hook=_label(hook),
            candidate=candidate.describe(),
            intent=candidate.intent.value,
            target=_label(target),
            names=list(names),
            param_types=[repr(c) for c in param_types],
            return_type=return_filter,
            reason=reason,
        )
    return matched


def _label(tp: type | None) -> str:
    return canonical_name(tp) if tp is not None else "?"
