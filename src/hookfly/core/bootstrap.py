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
"""Process-wide setup: logging, diagnostics sink and type resolver from config."""

from __future__ import annotations

from hookfly.core.config import Config
from hookfly.core.properties import DiagnosticsProperties, ResolverProperties
from hookfly.diagnostics import LoggingSink, install_sink
from hookfly.logging.port import LoggingPort
from hookfly.logging.structlog_adapter import StructlogAdapter
from hookfly.resolver import ImportLoader, TypeResolver, set_resolver


def configure(config: Config | None = None, logging_port: LoggingPort | None = None) -> Config:
    """Apply *config* (packaged defaults when omitted) to the process.

    * configures logging through *logging_port* (structlog by default);
    * installs a :class:`LoggingSink` with the configured level per kind;
    * installs a fresh :class:`TypeResolver` searching ``resolver.search_modules``.
    """
    config = config if config is not None else Config.defaults()
    port = logging_port if logging_port is not None else StructlogAdapter()
    port.configure(config)

    diagnostics = config.bind(DiagnosticsProperties)
    install_sink(LoggingSink(port.get_logger("hookfly.diagnostics"), diagnostics.levels()))

    resolver = config.bind(ResolverProperties)
    set_resolver(TypeResolver(ImportLoader(resolver.search_modules)))
    return config
