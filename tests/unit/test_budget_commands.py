"""Tests for the budgeting CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from notebudget.main import app


def _paragraphs(count: int, chars: int = 200) -> str:
    return "\n\n".join(("abcd " * chars)[: chars - 1] + "e" for _ in range(count))


def test_limits_lists_models(runner: CliRunner) -> None:
    result = runner.invoke(app, ["limits"])

    assert result.exit_code == 0
    assert "gpt-4" in result.stdout
    assert "claude-3" in result.stdout
    assert "default *" in result.stdout


def test_tokens_from_stdin(runner: CliRunner) -> None:
    result = runner.invoke(app, ["tokens"], input="a" * 39)

    assert result.exit_code == 0
    assert "Characters: 39" in result.stdout
    assert "Estimated tokens: 10" in result.stdout


def test_tokens_with_language(runner: CliRunner, tmp_path: Path) -> None:
    source = tmp_path / "note.txt"
    source.write_text("a" * 39, encoding="utf-8")

    result = runner.invoke(app, ["tokens", str(source), "--language", "de"])

    assert result.exit_code == 0
    assert "Estimated tokens (Deutsch): 11" in result.stdout


def test_tokens_missing_file_fails(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(app, ["tokens", str(tmp_path / "missing.txt")])

    assert result.exit_code == 1
    assert "Cannot read" in result.stdout


def test_window_for_code(runner: CliRunner) -> None:
    result = runner.invoke(app, ["window", "--type", "code"])

    assert result.exit_code == 0
    assert "6000" in result.stdout
    assert "24000" in result.stdout
    assert "3900" in result.stdout


def test_window_with_model(runner: CliRunner) -> None:
    result = runner.invoke(app, ["window", "--type", "email", "--model", "gpt-4"])

    assert result.exit_code == 0
    assert "6553" in result.stdout  # 8192 * 0.8
    assert "25600" in result.stdout  # 32000 * 0.8


def test_chunk_json_output(runner: CliRunner, tmp_path: Path) -> None:
    source = tmp_path / "long.txt"
    source.write_text(_paragraphs(6), encoding="utf-8")

    result = runner.invoke(app, ["chunk", str(source), "--max-chunk-size", "120", "--json"])

    assert result.exit_code == 0
    chunks = json.loads(result.stdout)
    assert [c["id"] for c in chunks] == ["chunk_1", "chunk_2", "chunk_3"]
    assert [c["priority"] for c in chunks] == ["high", "medium", "medium"]
    assert {c["chunk_type"] for c in chunks} == {"partial"}


def test_chunk_table_output(runner: CliRunner) -> None:
    result = runner.invoke(app, ["chunk", "-s", "100"], input="short note")

    assert result.exit_code == 0
    assert "chunk_1" in result.stdout
    assert "complete" in result.stdout


def test_chunk_rejects_tiny_budget(runner: CliRunner) -> None:
    result = runner.invoke(app, ["chunk", "-s", "3"], input="text")

    assert result.exit_code == 2


def test_prioritize_reports_ratio(runner: CliRunner) -> None:
    lead = "Erste Zusammenfassung der Besprechung mit allen wichtigen Entscheidungen von heute"
    content = f"{lead}. Zweiter Punkt. Dritter Punkt. Vierter Punkt."

    result = runner.invoke(app, ["prioritize", "--prompt", "Fasse zusammen"], input=content)

    assert result.exit_code == 0
    assert "Primary" in result.stdout
    assert "Vierter Punkt" in result.stdout
    assert "Priority ratio: 0.25" in result.stdout


def test_optimize_short_prompt_passes_through(runner: CliRunner) -> None:
    result = runner.invoke(app, ["optimize", "-n", "5000"], input="Summarize:  {content}")

    assert result.exit_code == 0
    assert result.stdout == "Summarize:  {content}\n"


def test_optimize_fills_placeholders(runner: CliRunner) -> None:
    result = runner.invoke(app, ["optimize", "--set", "content=my note"], input="Summarize: {content}")

    assert result.exit_code == 0
    assert result.stdout == "Summarize: my note\n"


def test_optimize_long_prompt(runner: CliRunner) -> None:
    prompt = "Summarize {content}\n\n" + "lorem ipsum dolor " * 700 + "done"

    result = runner.invoke(app, ["optimize", "--content-length", "4000"], input=prompt)

    assert result.exit_code == 0
    assert "[Content: 4000 characters - will be processed in chunks]" in result.stdout
    assert "**Processing note**" in result.stdout


def test_optimize_rejects_malformed_assignment(runner: CliRunner) -> None:
    result = runner.invoke(app, ["optimize", "--set", "novalue"], input="x")

    assert result.exit_code == 2


def test_config_file_changes_behaviour(runner: CliRunner, isolate_config: Path) -> None:
    isolate_config.write_text("[budget]\nchars_per_token = 1.0\n", encoding="utf-8")

    result = runner.invoke(app, ["tokens"], input="a" * 39)

    assert result.exit_code == 0
    assert "Estimated tokens: 39" in result.stdout
