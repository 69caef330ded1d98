from __future__ import annotations

import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console
from typer.testing import CliRunner

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from notebudget.core.config import BudgetConfig  # noqa: E402
from notebudget.core.window import ContextWindowManager  # noqa: E402


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def isolate_config(tmp_path: Path, monkeypatch: Any) -> Path:
    """Point config to a temp path so tests don't touch user state."""
    cfg_path = tmp_path / "config.toml"
    monkeypatch.setenv("NOTEBUDGET_CONFIG", str(cfg_path))
    for key in list(os.environ):
        if key.startswith("NB_"):
            monkeypatch.delenv(key, raising=False)
    return cfg_path


@pytest.fixture(autouse=True)
def capture_console(monkeypatch: Any) -> Console:
    """Use an in-memory Rich console during tests."""
    test_console = Console(record=True, width=200)
    import notebudget.commands.budget as budget_cmd
    import notebudget.core.console as core_console
    import notebudget.main as nb_main

    monkeypatch.setattr(core_console, "console", test_console)
    monkeypatch.setattr(nb_main, "console", test_console)
    monkeypatch.setattr(budget_cmd, "console", test_console)
    return test_console


@pytest.fixture
def manager() -> ContextWindowManager:
    return ContextWindowManager(BudgetConfig())


@pytest.fixture
def make_paragraph() -> Callable[[int, str], str]:
    """Build punctuation-free paragraphs of an exact character length."""

    def _make(chars: int, letter: str = "a") -> str:
        word = letter * 4 + " "
        text = (word * (chars // len(word) + 1))[:chars]
        if text.endswith(" "):
            text = text[:-1] + letter
        return text

    return _make
