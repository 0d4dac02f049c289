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
"""StructlogAdapter — default LoggingPort implementation using structlog."""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

from hookfly.core.config import Config
from hookfly.logging.port import LoggingSettings, level_number


def flatten_hook_context(_logger: Any, _method: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Lift a diagnostic's ``context`` mapping into top-level event keys.

    Keys already present on the event win over context keys.
    """
    context = event_dict.pop("context", None)
    if isinstance(context, dict):
        for key, value in context.items():
            event_dict.setdefault(key, value)
    return event_dict


def build_processors(fmt: str) -> list[structlog.types.Processor]:
    """Processor chain for *fmt*: ``json`` renders JSON lines, anything else the dev console."""
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer(default=repr) if fmt == "json" else structlog.dev.ConsoleRenderer()
    )
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        flatten_hook_context,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


class StructlogAdapter:
    """Routes structlog through stdlib logging, rendered to stdout.

    ``configure`` takes over the root logger (``basicConfig(force=True)``);
    use :class:`~hookfly.logging.StdlibLoggingAdapter` when the host
    application owns logging.
    """

    def __init__(self) -> None:
        self.settings = LoggingSettings()

    def configure(self, config: Config) -> None:
        self.settings = LoggingSettings.from_config(config)

        # Loggers stay uncached so a later configure() reaches module-level loggers.
        structlog.configure(
            processors=build_processors(self.settings.format),
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )
        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=level_number(self.settings.root_level),
            force=True,
        )
        for name, level in self.settings.module_levels.items():
            self.set_level(name, level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        logging.getLogger(name).setLevel(level_number(level))
