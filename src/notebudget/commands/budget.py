"""Content budgeting commands.

Thin CLI wrappers over `ContextWindowManager`:
    - limits: model limits table
    - tokens: heuristic token estimate
    - window: adjusted context window for a content type
    - chunk: split content into ordered chunks
    - prioritize: primary/secondary sentence breakdown
    - optimize: shrink an over-long prompt
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich import box
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from notebudget.core.console import console
from notebudget.core.models import ContentType, PromptLanguage
from notebudget.core.templates import fill_placeholders
from notebudget.core.window import ContextWindowManager

PREVIEW_CHARS = 60


def _read_source(source: Path | None) -> str:
    """Read text from a file, or from stdin when no path (or `-`) is given."""
    if source is None or str(source) == "-":
        return typer.get_text_stream("stdin").read()
    try:
        return source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        console.print(f"[red]Cannot read {escape(str(source))}: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1)


def _manager(ctx: typer.Context) -> ContextWindowManager:
    return ctx.obj.manager


def _preview(text: str) -> str:
    flat = " ".join(text.split())
    return flat if len(flat) <= PREVIEW_CHARS else flat[: PREVIEW_CHARS - 3] + "..."


def _parse_assignments(assignments: list[str] | None) -> dict[str, str]:
    values: dict[str, str] = {}
    for item in assignments or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE, got {item!r}", param_hint="--set")
        values[key] = value
    return values


def limits(ctx: typer.Context) -> None:
    """Show the configured model limits."""
    manager = _manager(ctx)
    default_model = ctx.obj.config.user.default_model

    table = Table(title="Model limits", box=box.SIMPLE_HEAVY, expand=True)
    table.add_column("Model", style="cyan", no_wrap=True)
    table.add_column("Max tokens", justify="right")
    table.add_column("Max characters", justify="right")
    table.add_column("Recommended", justify="right", style="green")

    for name, entry in sorted(manager.get_model_limits().items()):
        label = f"{name} *" if name == default_model else name
        table.add_row(label, str(entry.max_tokens), str(entry.max_characters), str(entry.recommended))

    console.print(table)


def tokens(
    ctx: typer.Context,
    source: Path | None = typer.Argument(None, help="File to measure (default: stdin)."),
    language: PromptLanguage | None = typer.Option(
        None, "--language", "-l", help="Apply a per-language multiplier (de, en, multi)."
    ),
) -> None:
    """Estimate the token count of a text (heuristic, not a tokenizer)."""
    manager = _manager(ctx)
    text = _read_source(source)

    estimate = manager.calculate_token_count(text)
    console.print(f"Characters: {len(text)}")
    console.print(f"Estimated tokens: [bold]{estimate}[/bold]")
    if language is not None:
        adjusted = manager.estimator.estimate_tokens_for_language(text, language)
        console.print(f"Estimated tokens ({language.display_name}): [bold]{adjusted}[/bold]")


def window(
    ctx: typer.Context,
    content_type: ContentType = typer.Option(
        ContentType.DEFAULT, "--type", "-t", help="Content type of the note."
    ),
    language: PromptLanguage = typer.Option(
        PromptLanguage.MULTILINGUAL, "--language", "-l", help="Prompt language."
    ),
    model: str | None = typer.Option(
        None, "--model", "-m", help="Model whose limits are the base (default from config)."
    ),
) -> None:
    """Show the context window adjusted for a content type."""
    manager = _manager(ctx)
    model_name = model or ctx.obj.config.user.default_model
    size = manager.get_optimal_window_size(content_type, language, model=model_name)

    table = Table(title=f"Window for {content_type.value} ({model_name})", box=box.SIMPLE)
    table.add_column("Limit", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("max_tokens", str(size.max_tokens))
    table.add_row("max_characters", str(size.max_characters))
    table.add_row("recommended", str(size.recommended))
    console.print(table)


def chunk(
    ctx: typer.Context,
    source: Path | None = typer.Argument(None, help="File to split (default: stdin)."),
    max_chunk_size: int | None = typer.Option(
        None, "--max-chunk-size", "-s", help="Token budget per chunk (default from config)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Emit chunks as JSON."),
) -> None:
    """Split content into ordered chunks that fit a token budget."""
    manager = _manager(ctx)
    size = max_chunk_size if max_chunk_size is not None else ctx.obj.config.user.default_chunk_size
    divisor = manager.config.chunk_size_divisor
    if size < divisor:
        raise typer.BadParameter(f"must be at least {divisor}", param_hint="--max-chunk-size")

    text = _read_source(source)
    chunks = manager.split_content_into_chunks(text, size)

    if as_json:
        console.out(json.dumps([c.to_dict() for c in chunks], indent=2, ensure_ascii=False), highlight=False)
        return

    table = Table(title=f"{len(chunks)} chunk(s), max {size} tokens", box=box.SIMPLE_HEAVY, expand=True)
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Type")
    table.add_column("Priority")
    table.add_column("Tokens", justify="right")
    table.add_column("Preview", style="dim")
    for item in chunks:
        table.add_row(
            item.id,
            item.chunk_type.value,
            item.priority.value,
            str(item.token_count),
            _preview(item.content),
        )
    console.print(table)


def prioritize(
    ctx: typer.Context,
    source: Path | None = typer.Argument(None, help="File to analyze (default: stdin)."),
    prompt: str = typer.Option("", "--prompt", "-p", help="Prompt the content is prepared for."),
) -> None:
    """Split content into primary and secondary sentences."""
    manager = _manager(ctx)
    result = manager.prioritize_content(_read_source(source), prompt)

    console.print(Panel(escape(result.primary_content) or "-", title="Primary", border_style="green"))
    if result.secondary_content:
        secondary = "\n".join(f"- {escape(sentence)}" for sentence in result.secondary_content)
        console.print(Panel(secondary, title="Secondary", border_style="yellow"))
    console.print(f"Priority ratio: {result.priority:.2f}")


def optimize(
    ctx: typer.Context,
    source: Path | None = typer.Argument(None, help="Prompt file (default: stdin)."),
    content_length: int = typer.Option(
        0, "--content-length", "-n", min=0, help="Length in characters of the content the prompt wraps."
    ),
    assignments: list[str] | None = typer.Option(
        None, "--set", help="Fill a {key} placeholder before optimizing (KEY=VALUE, repeatable)."
    ),
) -> None:
    """Shrink a prompt that exceeds the recommended window."""
    manager = _manager(ctx)
    prompt = fill_placeholders(_read_source(source), _parse_assignments(assignments))
    optimized = manager.optimize_prompt(prompt, content_length)
    console.out(optimized, highlight=False)
