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
"""Tests for the diagnostics sink and reporting helpers."""

from __future__ import annotations

from typing import Any

import pytest

from hookfly.diagnostics import (
    CapturingSink,
    Diagnostic,
    DiagnosticKind,
    DiagnosticsSink,
    LoggingSink,
    capture_diagnostics,
    get_sink,
    install_sink,
    kind_of,
    report,
    report_exception,
    reset_sink,
)
from hookfly.kernel.exceptions import (
    ConfigurationError,
    InterceptorError,
    NoMatchWarning,
    TypeResolutionError,
    UserCallbackError,
)


class RecordingLogger:
    def __init__(self) -> None:
        self.records: list[tuple[str, str, dict[str, Any]]] = []

    def _record(self, level: str, event: str, **kwargs: Any) -> None:
        self.records.append((level, event, kwargs))

    def debug(self, event: str, **kwargs: Any) -> None:
        self._record("debug", event, **kwargs)

    def info(self, event: str, **kwargs: Any) -> None:
        self._record("info", event, **kwargs)

    def warning(self, event: str, **kwargs: Any) -> None:
        self._record("warning", event, **kwargs)

    def error(self, event: str, **kwargs: Any) -> None:
        self._record("error", event, **kwargs)


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


class TestReport:
    def test_report_reaches_the_installed_sink(self, diagnostics: CapturingSink) -> None:
        diagnostic = report(DiagnosticKind.NO_MATCH, "nothing matched", hook="CartHooks")

        assert diagnostics.diagnostics == [diagnostic]
        assert diagnostic.context == {"hook": "CartHooks"}
        assert diagnostic.error is None

    @pytest.mark.parametrize(
        ("error", "kind"),
        [
            (ConfigurationError("bad"), DiagnosticKind.CONFIGURATION),
            (TypeResolutionError("missing"), DiagnosticKind.RESOLUTION),
            (NoMatchWarning("none"), DiagnosticKind.NO_MATCH),
            (UserCallbackError("hook"), DiagnosticKind.CALLBACK),
            (InterceptorError("patch"), DiagnosticKind.FAILURE),
            (RuntimeError("other"), DiagnosticKind.FAILURE),
        ],
    )
    def test_kind_of(self, error: BaseException, kind: DiagnosticKind) -> None:
        assert kind_of(error) is kind

    def test_report_exception_merges_error_context(self, diagnostics: CapturingSink) -> None:
        error = ConfigurationError("bad signature", code="HOOK_SIGNATURE", context={"method": "a", "line": 3})

        diagnostic = report_exception(error, method="b")

        assert diagnostic.kind is DiagnosticKind.CONFIGURATION
        assert diagnostic.message == "bad signature"
        assert diagnostic.context == {"method": "b", "line": 3}
        assert diagnostic.error is error

    def test_report_exception_without_context(self, diagnostics: CapturingSink) -> None:
        diagnostic = report_exception(ValueError("plain"))
        assert diagnostic.kind is DiagnosticKind.FAILURE
        assert diagnostic.context == {}


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------


class TestCapturingSink:
    def test_of_kind_and_clear(self) -> None:
        sink = CapturingSink()
        sink.emit(Diagnostic(DiagnosticKind.NO_MATCH, "a"))
        sink.emit(Diagnostic(DiagnosticKind.CALLBACK, "b"))

        assert len(sink) == 2
        assert [d.message for d in sink.of_kind(DiagnosticKind.CALLBACK)] == ["b"]
        assert [d.message for d in sink] == ["a", "b"]

        sink.clear()
        assert len(sink) == 0

    def test_satisfies_the_sink_protocol(self) -> None:
        assert isinstance(CapturingSink(), DiagnosticsSink)
        assert isinstance(LoggingSink(RecordingLogger()), DiagnosticsSink)


class TestLoggingSink:
    def test_default_levels(self) -> None:
        logger = RecordingLogger()
        sink = LoggingSink(logger)

        for kind in DiagnosticKind:
            sink.emit(Diagnostic(kind, kind.value))

        assert [(level, event) for level, event, _ in logger.records] == [
            ("error", "configuration"),
            ("debug", "resolution"),
            ("warning", "no_match"),
            ("error", "callback"),
            ("error", "failure"),
        ]

    def test_level_overrides(self) -> None:
        logger = RecordingLogger()
        LoggingSink(logger, {"no_match": "info"}).emit(Diagnostic(DiagnosticKind.NO_MATCH, "quiet"))
        assert logger.records[0][0] == "info"

    def test_unknown_level_falls_back_to_error(self) -> None:
        logger = RecordingLogger()
        LoggingSink(logger, {"no_match": "critical"}).emit(Diagnostic(DiagnosticKind.NO_MATCH, "loud"))
        assert logger.records[0][0] == "error"

    def test_context_and_error_are_passed_through(self) -> None:
        logger = RecordingLogger()
        error = RuntimeError("boom")
        LoggingSink(logger).emit(Diagnostic(DiagnosticKind.CALLBACK, "failed", {"hook": "H"}, error))

        _, _, kwargs = logger.records[0]
        assert kwargs == {"kind": "callback", "context": {"hook": "H"}, "exc_info": error}


class TestSinkInstallation:
    def test_install_returns_the_previous_sink(self, diagnostics: CapturingSink) -> None:
        replacement = CapturingSink()
        assert install_sink(replacement) is diagnostics
        assert get_sink() is replacement

    def test_reset_sink_restores_logging(self) -> None:
        reset_sink()
        assert isinstance(get_sink(), LoggingSink)

    def test_capture_diagnostics_is_scoped(self, diagnostics: CapturingSink) -> None:
        with capture_diagnostics() as inner:
            report(DiagnosticKind.RESOLUTION, "inside")
        report(DiagnosticKind.RESOLUTION, "outside")

        assert [d.message for d in inner] == ["inside"]
        assert [d.message for d in diagnostics] == ["outside"]
        assert get_sink() is diagnostics
