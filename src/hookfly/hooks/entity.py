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
"""HookEntity — base class of declarative hook definitions.

Subclass it with the target class as type argument and decorate methods
with intents; instantiating the subclass binds everything::

    class CartHooks(HookEntity[Cart]):
        @on_before("add")
        def before_add(self, param: HookParam, item: Item, count: int) -> None:
            ...

    CartHooks()

When the target cannot be imported, give its name instead
(``HookEntity["shop.models.Cart"]``) or override :meth:`set_target_class`.
"""

from __future__ import annotations

import typing
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

import structlog

from hookfly.diagnostics import report_exception
from hookfly.hooks.engine import Binding, BindingEngine, BindingPlan
from hookfly.hooks.types import EmptyHook, HookState, NoneHook
from hookfly.interceptor.interceptor import MethodInterceptor
from hookfly.interceptor.types import HookHandle, HookParam
from hookfly.kernel.exceptions import ConfigurationError, ResolutionError
from hookfly.resolver import TypeLoader, TypeResolver, get_resolver, simple_name

T = TypeVar("T")

logger = structlog.get_logger("hookfly.hooks.entity")


class CallMethods(ABC):
    """Catch-all capability: receive every method call of the target."""

    @abstractmethod
    def call_on_before_methods(self, param: HookParam) -> None: ...

    @abstractmethod
    def call_on_after_methods(self, param: HookParam) -> None: ...


class CallConstructors(ABC):
    """Catch-all capability: receive every constructor call of the target."""

    @abstractmethod
    def call_on_before_constructors(self, param: HookParam) -> None: ...

    @abstractmethod
    def call_on_after_constructors(self, param: HookParam) -> None: ...


class HookEntity(Generic[T]):
    """Declarative hook definition bound to one target class.

    Construction runs the whole binding protocol synchronously:
    resolve the target, plan, activate, install catch-all hooks, then call
    :meth:`on_init`. Any failure is reported and leaves the entity in the
    ``FAILED`` state; it never propagates to the caller.

    Args:
        loader: Loader used to resolve the target and parameter overrides.
        engine: Binding engine; defaults to one using the process-wide
            interceptor and resolver.
    """

    def __init__(
        self,
        loader: TypeLoader | None = None,
        *,
        engine: BindingEngine | None = None,
    ) -> None:
        self._loader = loader
        self._engine = engine if engine is not None else BindingEngine()
        self._state = HookState.UNINITIALIZED
        self._target: type | None = None
        self._plan: BindingPlan | None = None
        self._bindings: list[Binding] = []
        self._catch_all: list[HookHandle] = []

        try:
            self._target = self.set_target_class()
            self._state = HookState.TARGET_RESOLVED
            if self._target is NoneHook:
                self._state = HookState.SKIPPED
                return

            if self._target is not EmptyHook:
                if self._target is Any or self._target is object:
                    raise ConfigurationError(
                        f"{type(self).__qualname__}: override set_target_class() to specify the hook target class",
                        code="HOOK_NO_TARGET",
                    )
                self._plan = self._engine.plan(type(self), self._target, loader=self._loader)
                self._state = HookState.SCANNED
                self._bindings = self._engine.activate(self, self._plan)
                self._state = HookState.BOUND
                self._catch_all = self._engine.install_catch_all(
                    self._target,
                    methods=(self.call_on_before_methods, self.call_on_after_methods)
                    if isinstance(self, CallMethods)
                    else None,
                    constructors=(self.call_on_before_constructors, self.call_on_after_constructors)
                    if isinstance(self, CallConstructors)
                    else None,
                )

            self.on_init()
            self._state = HookState.READY
            logger.debug(
                "hook_entity_ready",
                hook=type(self).__qualname__,
                target=getattr(self._target, "__qualname__", repr(self._target)),
                bindings=len(self._bindings),
                catch_all=len(self._catch_all),
            )
        except Exception as exc:
            self._state = HookState.FAILED
            report_exception(exc, hook=type(self).__qualname__, state=HookState.FAILED.value)

    # ------------------------------------------------------------------
    # Extension points
    # ------------------------------------------------------------------

    def on_init(self) -> None:
        """Entry point run after binding; override for imperative setup."""

    def set_target_class(self) -> type:
        """Return the class to hook.

        Defaults to the type argument of ``HookEntity[...]``. A string
        argument is resolved through the entity's loader. Override when the
        target must be looked up at runtime, typically with :meth:`find_class`.
        """
        return self.declared_target(self.resolver, self._loader)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def find_class(self, class_name: str, loader: TypeLoader | None = None) -> type:
        """Resolve *class_name*, returning :class:`NoneHook` when it is not found."""
        try:
            return self.resolver.resolve(class_name, loader if loader is not None else self._loader)
        except ResolutionError as exc:
            report_exception(exc, hook=type(self).__qualname__)
            return NoneHook

    @staticmethod
    def simple_name(name: str) -> str:
        """Descriptor to dotted name: ``Lshop/models/Cart;`` -> ``shop.models.Cart``."""
        return simple_name(name)

    def unhook_all(self) -> int:
        """Uninstall every binding and catch-all hook; return how many were removed."""
        removed = sum(1 for binding in self._bindings if binding.uninstall())
        interceptor = self.interceptor
        removed += sum(1 for handle in self._catch_all if interceptor.uninstall(handle))
        return removed

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> HookState:
        return self._state

    @property
    def target_class(self) -> type | None:
        return self._target

    @property
    def plan(self) -> BindingPlan | None:
        return self._plan

    @property
    def bindings(self) -> list[Binding]:
        return list(self._bindings)

    @property
    def catch_all_handles(self) -> list[HookHandle]:
        return list(self._catch_all)

    @property
    def loader(self) -> TypeLoader | None:
        return self._loader

    @property
    def interceptor(self) -> MethodInterceptor:
        return self._engine.interceptor

    @property
    def resolver(self) -> TypeResolver:
        return self._engine.resolver

    @classmethod
    def declared_target(cls, resolver: TypeResolver | None = None, loader: TypeLoader | None = None) -> Any:
        """The type argument given to ``HookEntity[...]``, resolved; ``Any`` when there is none."""
        argument = cls._generic_argument()
        if isinstance(argument, typing.ForwardRef):
            argument = argument.__forward_arg__
        if isinstance(argument, str):
            return (resolver if resolver is not None else get_resolver()).resolve(argument, loader)
        if isinstance(argument, type):
            return argument
        return Any

    @classmethod
    def _generic_argument(cls) -> Any:
        for klass in cls.__mro__:
            for base in getattr(klass, "__orig_bases__", ()):
                origin = typing.get_origin(base)
                if isinstance(origin, type) and issubclass(origin, HookEntity):
                    args = typing.get_args(base)
                    if args and not isinstance(args[0], TypeVar):
                        return args[0]
        return Any
