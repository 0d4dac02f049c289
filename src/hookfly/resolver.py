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
"""Type resolution — name to type lookup through a chain of loaders.

A :class:`TypeLoader` plays the role of a class loader: it knows how to turn
a dotted name into a type. Loaders form a parent chain; the
:class:`TypeResolver` walks the chain of the loader it is handed, then
falls back to its own default :class:`ImportLoader`.
"""

from __future__ import annotations

import builtins
import importlib
import threading
import types
import typing
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from hookfly.kernel.exceptions import TypeResolutionError


def simple_name(name: str) -> str:
    """Convert a binary descriptor to a dotted name.

    >>> simple_name("Lcom/sample/User;")
    'com.sample.User'
    >>> simple_name("com/sample/User")
    'com.sample.User'
    >>> simple_name("builtins.int")
    'builtins.int'
    """
    name = name.strip()
    if name.startswith("L") and name.endswith(";"):
        name = name[1:-1]
    if "/" in name:
        name = name.replace("/", ".")
    return name


def canonical_name(tp: Any) -> str:
    """Return the canonical dotted name of *tp*.

    Builtins are unqualified (``int``), ``None`` and ``NoneType`` are
    ``"None"``, other classes are ``module.qualname``. Strings and forward
    references are unresolved annotations and come back as written.
    """
    if tp is None or tp is type(None):
        return "None"
    if isinstance(tp, str):
        return simple_name(tp)
    if isinstance(tp, typing.ForwardRef):
        return tp.__forward_arg__
    if isinstance(tp, type) and not isinstance(tp, types.GenericAlias):
        if tp.__module__ == "builtins":
            return tp.__qualname__
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp).replace("typing.", "")


def normalize_type_name(name: str) -> str:
    """Normalize a user-written type name for comparison with :func:`canonical_name`."""
    return simple_name(name).removeprefix("builtins.")


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------


class TypeLoader(ABC):
    """Finds types by dotted name, delegating to *parent* on a miss."""

    def __init__(self, parent: TypeLoader | None = None) -> None:
        self.parent = parent

    @abstractmethod
    def find(self, name: str) -> type | None:
        """Return the type called *name* known to this loader alone, or ``None``."""

    def chain(self) -> Iterator[TypeLoader]:
        loader: TypeLoader | None = self
        while loader is not None:
            yield loader
            loader = loader.parent

    def load(self, name: str) -> type:
        """Walk this loader and its parents; raise when nobody knows *name*."""
        for loader in self.chain():
            found = loader.find(name)
            if found is not None:
                return found
        raise TypeResolutionError(f"Type '{name}' not found", code="TYPE_NOT_FOUND", context={"type_name": name})


class ImportLoader(TypeLoader):
    """Resolves names by importing modules.

    Unqualified names are looked up among builtins first, then under each
    of *search_modules* in order.
    """

    def __init__(self, search_modules: Iterable[str] = (), parent: TypeLoader | None = None) -> None:
        super().__init__(parent)
        self.search_modules = tuple(search_modules)

    def find(self, name: str) -> type | None:
        candidates: list[str] = []
        if "." in name:
            candidates.append(name)
        else:
            builtin = getattr(builtins, name, None)
            if isinstance(builtin, type):
                return builtin
        candidates.extend(f"{module}.{name}" for module in self.search_modules)

        for candidate in candidates:
            found = _import_dotted(candidate)
            if found is not None:
                return found
        return None


class NamespaceLoader(TypeLoader):
    """Resolves names from an explicit mapping.

    *known* is either a ``name -> type`` mapping or an iterable of types,
    which are registered under both their canonical name and their bare
    qualname.
    """

    def __init__(self, known: Mapping[str, type] | Iterable[type], parent: TypeLoader | None = None) -> None:
        super().__init__(parent)
        if isinstance(known, Mapping):
            self._types = {simple_name(k): v for k, v in known.items()}
        else:
            self._types = {}
            for tp in known:
                self._types[canonical_name(tp)] = tp
                self._types.setdefault(tp.__qualname__, tp)

    def find(self, name: str) -> type | None:
        return self._types.get(name)

    def register(self, name: str, tp: type) -> None:
        self._types[simple_name(name)] = tp


def _import_dotted(path: str) -> type | None:
    """Import the longest importable module prefix of *path* and walk the rest."""
    parts = path.split(".")
    for split in range(len(parts), 0, -1):
        module_name = ".".join(parts[:split])
        try:
            obj: Any = importlib.import_module(module_name)
        except ImportError:
            continue
        for attr in parts[split:]:
            obj = getattr(obj, attr, None)
            if obj is None:
                return None
        return obj if isinstance(obj, type) else None
    return None


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class TypeResolver:
    """Caching name to type resolver.

    Successful lookups are cached per ``(loader, name)``; the cache is
    shared by every hook definition in the process and guarded by a lock.
    """

    def __init__(self, default_loader: TypeLoader | None = None) -> None:
        self._default_loader = default_loader if default_loader is not None else ImportLoader()
        self._cache: dict[tuple[TypeLoader | None, str], type] = {}
        self._lock = threading.Lock()

    @property
    def default_loader(self) -> TypeLoader:
        return self._default_loader

    def resolve(self, qualified_name: str, loader: TypeLoader | None = None) -> type:
        """Resolve *qualified_name* through *loader*'s chain, then the default loader.

        Raises:
            TypeResolutionError: when no loader knows the name.
        """
        name = simple_name(qualified_name)
        if not name:
            raise TypeResolutionError("Empty type name", code="TYPE_NOT_FOUND", context={"type_name": qualified_name})

        key = (loader, name)
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        for candidate in self._chain(loader):
            try:
                found = candidate.find(name)
            except Exception as exc:
                raise TypeResolutionError(
                    f"Loader {type(candidate).__name__} failed resolving '{name}': {exc}",
                    code="TYPE_LOADER_FAILED",
                    context={"type_name": name},
                ) from exc
            if found is not None:
                with self._lock:
                    self._cache[key] = found
                return found

        raise TypeResolutionError(f"Type '{name}' not found", code="TYPE_NOT_FOUND", context={"type_name": name})

    def find(self, qualified_name: str, loader: TypeLoader | None = None) -> type | None:
        """Like :meth:`resolve` but returns ``None`` instead of raising."""
        try:
            return self.resolve(qualified_name, loader)
        except TypeResolutionError:
            return None

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def _chain(self, loader: TypeLoader | None) -> Iterator[TypeLoader]:
        seen: list[TypeLoader] = []
        if loader is not None:
            for candidate in loader.chain():
                seen.append(candidate)
                yield candidate
        if not any(candidate is self._default_loader for candidate in seen):
            yield self._default_loader


_resolver = TypeResolver()


def get_resolver() -> TypeResolver:
    return _resolver


def set_resolver(resolver: TypeResolver) -> TypeResolver:
    """Replace the process-wide resolver, returning the previous one."""
    global _resolver
    previous, _resolver = _resolver, resolver
    return previous


def evaluate_hints(fn: Any, *, include_extras: bool = False) -> dict[str, Any]:
    """Type hints of *fn*.

    When the annotations as a whole do not evaluate (a forward reference to
    a type that is not importable here, say), each annotation is evaluated
    on its own and the ones that still fail are kept as their source string.
    """
    try:
        return typing.get_type_hints(fn, include_extras=include_extras)
    except Exception:
        raw = dict(getattr(fn, "__annotations__", None) or {})

    namespace = getattr(fn, "__globals__", None) or {}
    return {
        name: _evaluate(name, annotation, namespace, include_extras) if isinstance(annotation, str) else annotation
        for name, annotation in raw.items()
    }


def _evaluate(name: str, source: str, namespace: dict[str, Any], include_extras: bool) -> Any:
    """Evaluate one annotation through ``typing.get_type_hints`` on a bare holder function."""

    def holder() -> None: ...

    holder.__annotations__ = {name: source}
    try:
        return typing.get_type_hints(holder, globalns=namespace, include_extras=include_extras)[name]
    except Exception:
        return source
