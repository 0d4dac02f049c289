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
"""Process-wide diagnostics sink.

Every problem the binding engine, the resolver or the interceptor meets is
reported here instead of being raised, so a faulty hook definition never
takes down the host. The default :class:`LoggingSink` writes through
structlog; tests install a :class:`CapturingSink` and assert on what was
emitted::

    with capture_diagnostics() as sink:
        MyHook()
    assert sink.of_kind(DiagnosticKind.NO_MATCH)
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

import structlog

from hookfly.kernel.exceptions import (
    ConfigurationError,
    NoMatchWarning,
    ResolutionError,
    UserCallbackError,
)


class DiagnosticKind(str, Enum):
    """Category of a reported diagnostic."""

    CONFIGURATION = "configuration"
    RESOLUTION = "resolution"
    NO_MATCH = "no_match"
    CALLBACK = "callback"
    FAILURE = "failure"


_KIND_BY_ERROR: tuple[tuple[type[BaseException], DiagnosticKind], ...] = (
    (ConfigurationError, DiagnosticKind.CONFIGURATION),
    (ResolutionError, DiagnosticKind.RESOLUTION),
    (NoMatchWarning, DiagnosticKind.NO_MATCH),
    (UserCallbackError, DiagnosticKind.CALLBACK),
)

_DEFAULT_LEVELS: dict[str, str] = {
    DiagnosticKind.CONFIGURATION.value: "error",
    DiagnosticKind.RESOLUTION.value: "debug",
    DiagnosticKind.NO_MATCH.value: "warning",
    DiagnosticKind.CALLBACK.value: "error",
    DiagnosticKind.FAILURE.value: "error",
}


@dataclass(frozen=True)
class Diagnostic:
    """One reported problem.

    Attributes:
        kind: The diagnostic category.
        message: Human-readable description.
        context: Structured details (hook, candidate, target, criteria...).
        error: The exception behind the diagnostic, when there is one.
    """

    kind: DiagnosticKind
    message: str
    context: dict[str, Any] = field(default_factory=dict)
    error: BaseException | None = None


@runtime_checkable
class DiagnosticsSink(Protocol):
    """Destination for diagnostics."""

    def emit(self, diagnostic: Diagnostic) -> None: ...


class LoggingSink:
    """Writes diagnostics to a structlog-style logger, one level per kind."""

    def __init__(self, logger: Any | None = None, levels: dict[str, str] | None = None) -> None:
        self._logger = logger if logger is not None else structlog.get_logger("hookfly.diagnostics")
        self._levels = {**_DEFAULT_LEVELS, **(levels or {})}

    def emit(self, diagnostic: Diagnostic) -> None:
        level = self._levels.get(diagnostic.kind.value, "error")
        log = getattr(self._logger, level, self._logger.error)
        log(
            diagnostic.message,
            kind=diagnostic.kind.value,
            context=dict(diagnostic.context),
            exc_info=diagnostic.error,
        )


class CapturingSink:
    """Collects diagnostics in memory. Safe to share between threads."""

    def __init__(self) -> None:
        self._diagnostics: list[Diagnostic] = []
        self._lock = threading.Lock()

    def emit(self, diagnostic: Diagnostic) -> None:
        with self._lock:
            self._diagnostics.append(diagnostic)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        with self._lock:
            return list(self._diagnostics)

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.kind is kind]

    def clear(self) -> None:
        with self._lock:
            self._diagnostics.clear()

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)


_sink_lock = threading.Lock()
_sink: DiagnosticsSink = LoggingSink()


def get_sink() -> DiagnosticsSink:
    return _sink


def install_sink(sink: DiagnosticsSink) -> DiagnosticsSink:
    """Make *sink* the process-wide sink and return the previous one."""
    global _sink
    with _sink_lock:
        previous, _sink = _sink, sink
    return previous


def reset_sink() -> None:
    """Restore the default logging sink."""
    install_sink(LoggingSink())


def kind_of(error: BaseException) -> DiagnosticKind:
    for error_type, kind in _KIND_BY_ERROR:
        if isinstance(error, error_type):
            return kind
    return DiagnosticKind.FAILURE


def report(kind: DiagnosticKind, message: str, *, error: BaseException | None = None, **context: Any) -> Diagnostic:
    """Build a :class:`Diagnostic` and emit it to the process-wide sink."""
    diagnostic = Diagnostic(kind=kind, message=message, context=context, error=error)
    _sink.emit(diagnostic)
    return diagnostic


def report_exception(error: BaseException, **context: Any) -> Diagnostic:
    """Report *error*, deriving the kind from its type.

    Context carried on a :class:`~hookfly.kernel.exceptions.HookflyException`
    is merged under the explicit *context*.
    """
    merged = {**getattr(error, "context", {}), **context}
    return report(kind_of(error), str(error), error=error, **merged)


@contextmanager
def capture_diagnostics() -> Iterator[CapturingSink]:
    """Install a :class:`CapturingSink` for the duration of the block."""
    sink = CapturingSink()
    previous = install_sink(sink)
    try:
        yield sink
    finally:
        install_sink(previous)
