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
"""LoggingPort — the hexagonal port for hookfly logging."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from hookfly.core.config import Config


@runtime_checkable
class LoggingPort(Protocol):
    """What :func:`hookfly.configure` needs from a logging backend."""

    def configure(self, config: Config) -> None: ...
    def get_logger(self, name: str) -> Any: ...
    def set_level(self, name: str, level: str) -> None: ...


@dataclass(frozen=True)
class LoggingSettings:
    """The ``hookfly.logging`` section.

    ``level.root`` applies to the root logger (or the ``hookfly`` logger,
    for adapters that leave the root alone); every other key under
    ``level`` names a logger.
    """

    root_level: str = "INFO"
    format: str = "console"
    module_levels: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: Config) -> LoggingSettings:
        levels = {name: str(level).upper() for name, level in config.get_section("hookfly.logging.level").items()}
        root = levels.pop("root", "INFO")
        return cls(
            root_level=str(config.get("hookfly.logging.level.root", root)).upper(),
            format=str(config.get("hookfly.logging.format", "console")).lower(),
            module_levels=levels,
        )


def level_number(level: str) -> int:
    """``"warning"`` -> ``logging.WARNING``; unknown names map to ``INFO``."""
    number = logging.getLevelName(level.upper())
    return number if isinstance(number, int) else logging.INFO
