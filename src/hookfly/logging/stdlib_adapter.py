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
"""StdlibLoggingAdapter — hookfly events through the host's stdlib handlers."""

from __future__ import annotations

import logging
from typing import Any

from hookfly.core.config import Config
from hookfly.logging.port import LoggingSettings, level_number


def render_event(event: str, fields: dict[str, Any]) -> str:
    """``"no match", {"hook": "H"}`` -> ``"no match | hook=H"``.

    A ``context`` mapping is flattened after the explicit fields, which win
    on key clashes.
    """
    context = fields.pop("context", None)
    if isinstance(context, dict):
        fields = {**fields, **{key: value for key, value in context.items() if key not in fields}}
    if not fields:
        return event
    return f"{event} | " + " ".join(f"{key}={value}" for key, value in fields.items())


class KeyValueLogger:
    """Accepts structlog-style calls (``logger.info(event, **fields)``) on a stdlib logger."""

    __slots__ = ("_logger",)

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def log(self, level: int, event: str, **fields: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        exc_info = fields.pop("exc_info", None)
        self._logger.log(level, render_event(event, fields), exc_info=exc_info)

    def debug(self, event: str, **fields: Any) -> None:
        self.log(logging.DEBUG, event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        self.log(logging.INFO, event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self.log(logging.WARNING, event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self.log(logging.ERROR, event, **fields)

    def critical(self, event: str, **fields: Any) -> None:
        self.log(logging.CRITICAL, event, **fields)


class StdlibLoggingAdapter:
    """LoggingPort that never touches handlers; it only applies levels.

    ``level.root`` is applied to the ``hookfly`` logger rather than the
    root logger.
    """

    def __init__(self) -> None:
        self.settings = LoggingSettings()

    def configure(self, config: Config) -> None:
        self.settings = LoggingSettings.from_config(config)
        self.set_level("hookfly", self.settings.root_level)
        for name, level in self.settings.module_levels.items():
            self.set_level(name, level)

    def get_logger(self, name: str) -> Any:
        return KeyValueLogger(logging.getLogger(name))

    def set_level(self, name: str, level: str) -> None:
        logging.getLogger(name).setLevel(level_number(level))
