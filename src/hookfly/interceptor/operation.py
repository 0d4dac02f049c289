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
"""TargetOperation — a read-only snapshot of one hookable callable."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from hookfly.resolver import canonical_name


class OperationKind(str, Enum):
    """How the operation is stored on its owner and what receives the call."""

    METHOD = "method"
    STATIC = "staticmethod"
    CLASS = "classmethod"
    CONSTRUCTOR = "constructor"


@dataclass(frozen=True, eq=False)
class TargetOperation:
    """One method or constructor discovered on a target class.

    Attributes:
        owner: The class that declares the operation.
        attr_name: Attribute name on *owner* (``__init__`` for constructors).
        kind: Storage kind, see :class:`OperationKind`.
        function: The plain function behind the attribute.
        param_types: Declared parameter types after the receiver; ``None``
            where the parameter carries no annotation.
        param_names: Parameter names matching *param_types*.
        return_type: Declared return type; ``None`` when absent (always for
            constructors). ``-> None`` is recorded as ``NoneType``.
        signature: Signature used for call matching (the overload's own
            signature when *overload* is set).
        overload: True when this operation is one ``typing.overload``
            signature of *function*.
        is_abstract: True for abstract methods.
    """

    owner: type
    attr_name: str
    kind: OperationKind
    function: Callable[..., Any]
    param_types: tuple[Any, ...] = ()
    param_names: tuple[str, ...] = ()
    return_type: Any = None
    signature: inspect.Signature | None = None
    overload: bool = False
    is_abstract: bool = False
    _call_hints: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def name(self) -> str:
        """Operation name; empty for constructors."""
        return "" if self.kind is OperationKind.CONSTRUCTOR else self.attr_name

    @property
    def is_constructor(self) -> bool:
        return self.kind is OperationKind.CONSTRUCTOR

    @property
    def has_receiver(self) -> bool:
        return self.kind is not OperationKind.STATIC

    @property
    def is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.function)

    def accepts_call(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> bool:
        """Whether a call with raw *args* (receiver included) selects this operation.

        Plain operations accept every call. Overload-derived operations
        accept a call when it binds to the overload's signature and every
        bound value is an instance of its annotated class.
        """
        if not self.overload or self.signature is None:
            return True
        try:
            bound = self.signature.bind(*args, **kwargs)
        except TypeError:
            return False
        for name, value in bound.arguments.items():
            hint = self._call_hints.get(name)
            if isinstance(hint, type) and not isinstance(value, hint):
                return False
        return True

    def describe(self) -> str:
        params = ", ".join(canonical_name(tp) if tp is not None else "?" for tp in self.param_types)
        label = f"{self.owner.__qualname__}.{self.attr_name}({params})"
        if self.return_type is not None:
            label += f" -> {canonical_name(self.return_type)}"
        return label

    def __str__(self) -> str:
        return self.describe()
