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
"""'hookfly plan' — dry-run the binding plan of a hook definition."""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any

import click
from rich.table import Table

from hookfly.cli.console import KIND_STYLES, console, print_header
from hookfly.core.config import Config
from hookfly.core.properties import ResolverProperties
from hookfly.diagnostics import capture_diagnostics
from hookfly.hooks.engine import BindingEngine, BindingPlan
from hookfly.hooks.entity import HookEntity
from hookfly.kernel.exceptions import ResolutionError
from hookfly.resolver import ImportLoader, TypeResolver


def _load_hook(path: str) -> type[HookEntity]:
    module_name, sep, attr = path.partition(":")
    if not sep or not attr:
        raise click.BadParameter("expected MODULE:CLASS", param_hint="HOOK")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise click.BadParameter(f"cannot import {module_name}: {exc}", param_hint="HOOK") from exc
    hook = getattr(module, attr, None)
    if not isinstance(hook, type) or not issubclass(hook, HookEntity):
        raise click.BadParameter(f"{path} is not a HookEntity subclass", param_hint="HOOK")
    return hook


def _bindings_table(plan: BindingPlan) -> Table:
    table = Table(title="Bindings", border_style="dim")
    table.add_column("Intent", style="info")
    table.add_column("Hook method")
    table.add_column("Target operation")
    table.add_column("One-shot", justify="center")
    for binding in plan.bindings:
        table.add_row(
            binding.intent.value,
            binding.candidate.describe(),
            binding.operation.describe(),
            "yes" if binding.one_shot else "",
        )
    return table


@click.command()
@click.argument("hook_path", metavar="HOOK")
@click.option("--target", "target_name", default=None, help="Target class, for hooks that choose it at runtime.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="hookfly YAML or TOML configuration file.",
)
def plan_command(hook_path: str, target_name: str | None, config_path: Path | None) -> None:
    """Show what HOOK (MODULE:CLASS) would bind, without installing anything."""
    config = Config.from_file(config_path) if config_path is not None else Config.defaults()
    resolver = TypeResolver(ImportLoader(config.bind(ResolverProperties).search_modules))
    hook = _load_hook(hook_path)

    with capture_diagnostics() as sink:
        try:
            target: Any = resolver.resolve(target_name) if target_name else hook.declared_target(resolver)
        except ResolutionError as exc:
            raise click.ClickException(str(exc)) from exc
        if not isinstance(target, type):
            raise click.UsageError(f"{hook.__qualname__} picks its target at runtime; pass --target")
        plan = BindingEngine(resolver=resolver).plan(hook, target)

    print_header(f"{hook.__qualname__} -> {target.__module__}.{target.__qualname__}")
    console.print(_bindings_table(plan))

    for key in plan.excluded:
        console.print(f"  [dim]•[/dim] {key.identity} skipped for {key.intent.value}: replace wins")

    if len(sink):
        console.print("\n  [info]Diagnostics:[/info]")
        for diagnostic in sink:
            style = KIND_STYLES.get(diagnostic.kind.value, "info")
            console.print(f"    [{style}]{diagnostic.kind.value}[/{style}] {diagnostic.message}")
    console.print()
