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
"""Tests for configure(): logging port, diagnostics sink and resolver setup."""

from __future__ import annotations

from typing import Any

from hookfly.core.bootstrap import configure
from hookfly.core.config import Config
from hookfly.diagnostics import DiagnosticKind, LoggingSink, get_sink, report
from hookfly.resolver import ImportLoader, TypeResolver, get_resolver


class RecordingLogger:
    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def debug(self, event: str, **kwargs: Any) -> None:
        self.records.append(("debug", event))

    def info(self, event: str, **kwargs: Any) -> None:
        self.records.append(("info", event))

    def warning(self, event: str, **kwargs: Any) -> None:
        self.records.append(("warning", event))

    def error(self, event: str, **kwargs: Any) -> None:
        self.records.append(("error", event))


class FakeLoggingPort:
    def __init__(self) -> None:
        self.configured_with: Config | None = None
        self.logger = RecordingLogger()
        self.requested: list[str] = []

    def configure(self, config: Config) -> None:
        self.configured_with = config

    def get_logger(self, name: str) -> Any:
        self.requested.append(name)
        return self.logger

    def set_level(self, name: str, level: str) -> None:
        pass


class TestConfigure:
    def test_defaults_are_used_without_config(self):
        port = FakeLoggingPort()

        config = configure(logging_port=port)

        assert port.configured_with is config
        assert config.get("hookfly.logging.format") == "console"

    def test_installs_a_logging_sink(self):
        port = FakeLoggingPort()

        configure(Config({}), port)

        assert isinstance(get_sink(), LoggingSink)
        assert port.requested == ["hookfly.diagnostics"]

    def test_configured_levels_apply_to_reports(self):
        port = FakeLoggingPort()
        configure(Config({"hookfly": {"diagnostics": {"no_match_level": "info", "resolution_level": "warning"}}}), port)

        report(DiagnosticKind.NO_MATCH, "nothing matched")
        report(DiagnosticKind.RESOLUTION, "widened")
        report(DiagnosticKind.CALLBACK, "hook raised")

        assert port.logger.records == [
            ("info", "nothing matched"),
            ("warning", "widened"),
            ("error", "hook raised"),
        ]

    def test_installs_a_resolver_with_search_modules(self, resolver: TypeResolver):
        configure(Config({"hookfly": {"resolver": {"search_modules": ["decimal"]}}}), FakeLoggingPort())

        installed = get_resolver()
        assert installed is not resolver
        assert isinstance(installed.default_loader, ImportLoader)
        assert installed.default_loader.search_modules == ("decimal",)
        assert installed.resolve("Decimal").__name__ == "Decimal"
