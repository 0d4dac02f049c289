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
"""hookfly settings: packaged defaults, YAML/TOML files, profiles and env overrides.

Keys are dotted paths (``hookfly.resolver.search_modules``). A lookup
consults, highest first:

1. ``HOOKFLY_*`` environment variables (see :func:`env_key`);
2. the loaded data (file, then profile overlays, merged over defaults);
3. the caller's default.
"""

from __future__ import annotations

import dataclasses
import importlib.resources
import os
import re
import tomllib
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, TypeVar, get_origin, get_type_hints

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

T = TypeVar("T")

PREFIX_ATTR = "__hookfly_config_prefix__"
DEFAULTS_RESOURCE = "hookfly-defaults.yaml"
DEFAULTS_SOURCE = f"{DEFAULTS_RESOURCE} (framework defaults)"

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")
_MAX_PLACEHOLDER_DEPTH = 10
_MISSING = object()


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Bind a dataclass or pydantic model to the config section at *prefix*.

    Usage::

        @config_properties(prefix="hookfly.resolver")
        class ResolverProperties(BaseModel):
            search_modules: list[str] = []
    """

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, PREFIX_ATTR, prefix)
        return cls

    return decorator


def env_key(key: str) -> str:
    """Environment variable overriding *key*: ``hookfly.resolver.search-modules`` -> ``HOOKFLY_RESOLVER_SEARCH_MODULES``."""
    stem = key.removeprefix("hookfly.")
    return "HOOKFLY_" + re.sub(r"[.\-]", "_", stem).upper()


def _walk(data: Mapping[str, Any], dotted: str) -> Any:
    node: Any = data
    for part in dotted.split("."):
        if not isinstance(node, Mapping) or node.get(part) is None:
            return _MISSING
        node = node[part]
    return node


def _merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        merged[key] = _merge(current, value) if isinstance(current, dict) and isinstance(value, dict) else value
    return merged


def _read(path: Path) -> dict[str, Any]:
    if path.suffix == ".toml":
        with path.open("rb") as fh:
            return tomllib.load(fh)
    with path.open() as fh:
        return yaml.safe_load(fh) or {}


def _packaged_defaults() -> dict[str, Any]:
    resource = importlib.resources.files("hookfly.resources").joinpath(DEFAULTS_RESOURCE)
    return yaml.safe_load(resource.read_text()) or {}


def _env_overrides(prefix: str, fields: Mapping[str, Any]) -> dict[str, Any]:
    """``HOOKFLY_*`` values for the *fields* (name to annotation) of the section at *prefix*.

    Sequence-typed fields take a comma-separated list.
    """
    found: dict[str, Any] = {}
    for name, annotation in fields.items():
        raw = os.environ.get(env_key(f"{prefix}.{name}"))
        if raw is None:
            continue
        if get_origin(annotation) in (list, tuple, set, frozenset):
            found[name] = [item.strip() for item in raw.split(",") if item.strip()]
        else:
            found[name] = raw
    return found


def _coerce(value: Any, expected: Any) -> Any:
    if not isinstance(value, str):
        return value
    if expected is bool:
        return value.strip().lower() in ("true", "1", "yes", "on")
    if expected in (int, float):
        return expected(value)
    return value


class Config:
    """Dotted-key view over merged configuration data."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._loaded_sources: list[str] = []

    @classmethod
    def defaults(cls) -> Config:
        """Only the packaged ``hookfly-defaults.yaml``."""
        return cls._with_sources(_packaged_defaults(), [DEFAULTS_SOURCE])

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        active_profiles: list[str] | None = None,
        load_defaults: bool = True,
    ) -> Config:
        """Load *path* (YAML, or TOML by suffix) over the packaged defaults.

        Each active profile overlays ``<stem>-<profile><suffix>`` from the
        same directory, in the order given; missing files are skipped, and
        so are the profiles when *path* itself does not exist.
        """
        path = Path(path)
        data = _packaged_defaults() if load_defaults else {}
        sources = [DEFAULTS_SOURCE] if load_defaults else []

        if path.exists():
            layers = [(path, str(path))]
            for profile in active_profiles or []:
                overlay = path.with_name(f"{path.stem}-{profile}{path.suffix}")
                layers.append((overlay, f"{overlay} (profile: {profile})"))
            for layer, label in layers:
                if layer.exists():
                    data = _merge(data, _read(layer))
                    sources.append(label)

        return cls._with_sources(data, sources)

    @classmethod
    def _with_sources(cls, data: dict[str, Any], sources: list[str]) -> Config:
        config = cls(data)
        config._loaded_sources = sources
        return config

    @property
    def loaded_sources(self) -> list[str]:
        """Files merged into this config, lowest precedence first."""
        return list(self._loaded_sources)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Value at *key*; ``${...}`` placeholders in strings are expanded.

        ``${NAME}`` reads an environment variable or another config key,
        ``${NAME:fallback}`` falls back to the literal after the colon.
        """
        override = os.environ.get(env_key(key))
        if override is not None:
            return override

        value = _walk(self._data, key)
        if value is _MISSING:
            return default
        if isinstance(value, str) and "${" in value:
            return self._expand(value, 0)
        return value

    def get_section(self, prefix: str) -> dict[str, Any]:
        """Mapping stored at *prefix*, or an empty dict."""
        section = _walk(self._data, prefix)
        return section if isinstance(section, dict) else {}

    def _expand(self, text: str, depth: int) -> str:
        if depth > _MAX_PLACEHOLDER_DEPTH:
            raise ValueError(f"Placeholder recursion too deep in '{text}'; check for circular references")

        def substitute(match: re.Match[str]) -> str:
            name, has_fallback, fallback = match.group(1).partition(":")
            from_env = os.environ.get(name)
            if from_env is not None:
                return from_env
            found = _walk(self._data, name)
            if found is not _MISSING:
                rendered = str(found)
                return self._expand(rendered, depth + 1) if "${" in rendered else rendered
            if has_fallback:
                return fallback
            raise ValueError(f"Cannot resolve placeholder '${{{match.group(1)}}}': not in environment or config")

        return _PLACEHOLDER.sub(substitute, text)

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    def bind(self, target: type[T]) -> T:
        """Instantiate a ``@config_properties`` class from its section.

        ``HOOKFLY_*`` variables named after the section's fields override the
        loaded values. Pydantic models are validated (a failure is re-raised
        as ``ValueError``); dataclass fields declared ``int``, ``float`` or
        ``bool`` accept their string spellings.
        """
        prefix = getattr(target, PREFIX_ATTR, None)
        if prefix is None:
            raise ValueError(f"{target.__name__} is not decorated with @config_properties")

        if issubclass(target, BaseModel):
            fields = {name: info.annotation for name, info in target.model_fields.items()}
        else:
            hints = get_type_hints(target)
            fields = {field.name: hints.get(field.name) for field in dataclasses.fields(target)}  # type: ignore[arg-type]
        section = {**self.get_section(prefix), **_env_overrides(prefix, fields)}

        if issubclass(target, BaseModel):
            try:
                return target.model_validate(section)
            except ValidationError as exc:
                raise ValueError(f"Invalid '{prefix}' settings for {target.__name__}:\n{exc}") from exc

        values = {name: _coerce(section[name], expected) for name, expected in fields.items() if name in section}
        return target(**values)
