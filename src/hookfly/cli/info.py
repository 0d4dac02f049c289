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
"""'hookfly info' — Display version and environment information."""

from __future__ import annotations

import platform
import sys

import click
from rich.table import Table

from hookfly.cli.console import console, print_header
from hookfly.core.config import Config


@click.command()
def info_command() -> None:
    """Display hookfly version, environment and effective defaults."""
    print_header("info")

    env_table = Table(title="Environment", show_header=False, border_style="dim")
    env_table.add_column("Key", style="info")
    env_table.add_column("Value")
    env_table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    env_table.add_row("Platform", platform.platform())
    console.print(env_table)

    config = Config.defaults()
    defaults_table = Table(title="\nDefaults", border_style="dim")
    defaults_table.add_column("Key", style="info")
    defaults_table.add_column("Value")
    for key in (
        "hookfly.logging.format",
        "hookfly.logging.level.root",
        "hookfly.resolver.search_modules",
        "hookfly.diagnostics.no_match_level",
    ):
        defaults_table.add_row(key, str(config.get(key)))
    console.print(defaults_table)
    console.print()
