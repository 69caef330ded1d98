"""notebudget CLI entry point.

The callback loads configuration once per invocation and stores an
`AppState` on the Typer context; commands read the shared manager from it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from time import perf_counter
from typing import Any

import click
import typer
from rich import box
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from typer.main import get_command

from . import __version__
from .core.cache import PromptCache
from .core.config import AppConfig, ConfigLoadResult, load_config
from .core.console import console, setup_logging
from .core.registry import discover_commands
from .core.window import ContextWindowManager

app = typer.Typer(help="notebudget: token budgeting and chunking for LLM note prompts.")
logger = logging.getLogger(__name__)

COMMANDS_PATH = Path(__file__).resolve().parent / "commands"


@dataclass
class AppState:
    config: AppConfig
    config_meta: ConfigLoadResult
    logger: logging.Logger
    manager: ContextWindowManager


def _build_manager(config: AppConfig) -> ContextWindowManager:
    return ContextWindowManager(config.budget, cache=PromptCache(config.budget.cache_size))


def _safe_mode_panel(meta: ConfigLoadResult) -> Panel:
    return Panel(
        "[bold red]Configuration Error - Safe Mode Active[/bold red]\n\n"
        f"Failed to load {escape(str(meta.path))}:\n{escape(meta.error or '')}\n\n"
        "[yellow]Using default settings.[/yellow]",
        border_style="red",
    )


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to a notebudget config file (TOML or JSON)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    loaded, meta = load_config(config_path=config)
    state_logger = setup_logging(level=loaded.user.log_level, verbose=verbose)
    ctx.obj = AppState(
        config=loaded,
        config_meta=meta,
        logger=state_logger,
        manager=_build_manager(loaded),
    )

    if meta.error:
        console.print(_safe_mode_panel(meta))
        return
    state_logger.debug("Loaded configuration from %s (env overrides: %s)", meta.path, sorted(meta.env_overrides))


@app.command("com")
def command_catalog() -> None:
    """List the available notebudget commands."""
    group = get_command(app)
    commands = group.commands if isinstance(group, click.Group) else {}

    table = Table(title="notebudget commands", box=box.SIMPLE_HEAVY, expand=True)
    table.add_column("Command", style="cyan", no_wrap=True)
    table.add_column("Summary")
    for name in sorted(commands):
        help_text = (commands[name].help or "").strip()
        table.add_row(name, help_text.splitlines()[0] if help_text else "-")
    console.print(table)


def _config_rows(config: AppConfig) -> Iterator[tuple[str, str]]:
    dumped: dict[str, dict[str, Any]] = config.model_dump(mode="json")
    for group, values in dumped.items():
        for key, value in values.items():
            yield f"{group}.{key}", str(value)


@app.command("config")
def show_config(ctx: typer.Context) -> None:
    """Show the active configuration and where it came from."""
    state: AppState = ctx.obj
    meta = state.config_meta

    table = Table(title="Config", box=box.SIMPLE, expand=True)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value")
    for key, value in _config_rows(state.config):
        table.add_row(key, escape(value))
    console.print(table)

    source = [f"Path: {escape(str(meta.path))}"]
    source.append("File loaded: yes" if meta.file_loaded else "File loaded: no (using defaults + env)")
    if meta.env_overrides:
        source.append("Env overrides: " + ", ".join(sorted(meta.env_overrides)))
    console.print(Panel("\n".join(source), title="Config source", box=box.SIMPLE))


@app.command("version")
def show_version() -> None:
    """Print the notebudget version."""
    console.print(__version__)


def _register_commands() -> None:
    start = perf_counter()
    specs = discover_commands(COMMANDS_PATH)
    for spec in specs:
        app.command(spec.name)(spec.handler)
    logger.debug("Registered %d commands in %.3f seconds", len(specs), perf_counter() - start)


_register_commands()


def cli() -> None:
    app()


if __name__ == "__main__":
    cli()
