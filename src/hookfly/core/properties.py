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
"""Typed configuration sections bound from ``hookfly.*`` keys."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from hookfly.core.config import config_properties

Level = Literal["debug", "info", "warning", "error", "critical"]


@config_properties(prefix="hookfly.resolver")
class ResolverProperties(BaseModel):
    """Type resolver settings.

    Attributes:
        search_modules: Module prefixes tried, in order, for unqualified
            type names that are neither builtins nor importable as given.
    """

    search_modules: list[str] = Field(default_factory=list)


@config_properties(prefix="hookfly.diagnostics")
class DiagnosticsProperties(BaseModel):
    """Log level used by the logging sink for each diagnostic kind."""

    configuration_level: Level = "error"
    resolution_level: Level = "debug"
    no_match_level: Level = "warning"
    callback_level: Level = "error"

    def levels(self) -> dict[str, str]:
        return {
            "configuration": self.configuration_level,
            "resolution": self.resolution_level,
            "no_match": self.no_match_level,
            "callback": self.callback_level,
        }
