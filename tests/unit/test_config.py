from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from notebudget.core.config import AppConfig, BudgetConfig, load_config
from notebudget.core.errors import ModelLimitsError
from notebudget.core.models import ModelLimits, PromptLanguage


def test_default_limits_table() -> None:
    limits = BudgetConfig().model_limits

    assert limits["default"] == ModelLimits(max_tokens=4000, max_characters=16000, recommended=3000)
    assert limits["gpt-3.5-turbo"].recommended == 3000
    assert set(limits) == {"gpt-4", "gpt-3.5-turbo", "claude-3", "gemini-pro", "default"}


def test_model_limits_reject_recommended_above_max() -> None:
    with pytest.raises(ModelLimitsError) as excinfo:
        ModelLimits(max_tokens=100, max_characters=400, recommended=200)

    assert isinstance(excinfo.value, ValueError)
    assert excinfo.value.context == {"recommended": 200, "max_tokens": 100}


@pytest.mark.parametrize(
    ("max_tokens", "max_characters", "recommended"),
    [(0, 100, 0), (100, 0, 50), (100, 400, -1)],
)
def test_model_limits_reject_non_positive_values(max_tokens: int, max_characters: int, recommended: int) -> None:
    with pytest.raises(ModelLimitsError):
        ModelLimits(max_tokens=max_tokens, max_characters=max_characters, recommended=recommended)


def test_budget_config_requires_default_entry() -> None:
    with pytest.raises(ValidationError, match="default"):
        BudgetConfig(model_limits={"gpt-4": ModelLimits(8192, 32000, 6000)})


def test_budget_config_accepts_mapping_entries() -> None:
    config = BudgetConfig(
        model_limits={"default": {"max_tokens": 1000, "max_characters": 4000, "recommended": 800}}
    )

    assert config.model_limits["default"] == ModelLimits(1000, 4000, 800)


def test_keywords_are_lowercased() -> None:
    assert BudgetConfig(keywords=["Wichtig", "", "TODO"]).keywords == ["wichtig", "todo"]


def test_non_positive_ratio_rejected() -> None:
    with pytest.raises(ValidationError):
        BudgetConfig(chars_per_token=0)


def test_load_config_without_file_uses_defaults(isolate_config: Path) -> None:
    config, meta = load_config()

    assert meta.path == isolate_config
    assert meta.file_loaded is False
    assert meta.error is None
    assert config.budget.chars_per_token == 3.9
    assert config.user.default_model == "default"


def test_load_config_from_toml(tmp_path: Path) -> None:
    path = tmp_path / "notebudget.toml"
    path.write_text(
        """
[budget]
chars_per_token = 4.0
prompt_language = "de"

[budget.model_limits.default]
max_tokens = 1000
max_characters = 4000
recommended = 800

[user]
default_chunk_size = 500
""",
        encoding="utf-8",
    )

    config, meta = load_config(config_path=path)

    assert meta.error is None
    assert meta.file_loaded is True
    assert config.budget.chars_per_token == 4.0
    assert config.budget.prompt_language is PromptLanguage.GERMAN
    assert config.budget.model_limits == {"default": ModelLimits(1000, 4000, 800)}
    assert config.user.default_chunk_size == 500


def test_load_config_from_json(tmp_path: Path) -> None:
    path = tmp_path / "notebudget.json"
    path.write_text(json.dumps({"budget": {"max_secondary_items": 3}}), encoding="utf-8")

    config, meta = load_config(config_path=path)

    assert meta.error is None
    assert config.budget.max_secondary_items == 3


def test_invalid_limits_fall_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "bad.toml"
    path.write_text(
        "[budget.model_limits.default]\nmax_tokens = 100\nmax_characters = 400\nrecommended = 500\n",
        encoding="utf-8",
    )

    config, meta = load_config(config_path=path)

    assert meta.error is not None
    assert "recommended" in meta.error
    assert config.budget.model_limits["default"].max_tokens == 4000


def test_syntax_error_reported(tmp_path: Path) -> None:
    path = tmp_path / "broken.toml"
    path.write_text("[budget\nchars_per_token = ", encoding="utf-8")

    config, meta = load_config(config_path=path)

    assert meta.error is not None
    assert "Syntax error" in meta.error
    assert isinstance(config, AppConfig)


def test_env_overrides_are_detected() -> None:
    config, meta = load_config(env={"NB_BUDGET__CHUNK_SIZE_DIVISOR": "8", "NB_USER__LOG_LEVEL": "DEBUG"})

    assert config.budget.chunk_size_divisor == 8
    assert config.user.log_level == "DEBUG"
    assert meta.env_overrides == {"budget.chunk_size_divisor", "user.log_level"}


def test_env_var_selects_config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "other.toml"
    path.write_text("[user]\ndefault_model = \"gpt-4\"\n", encoding="utf-8")
    monkeypatch.setenv("NOTEBUDGET_CONFIG", str(path))

    config, meta = load_config()

    assert meta.path == path
    assert config.user.default_model == "gpt-4"
