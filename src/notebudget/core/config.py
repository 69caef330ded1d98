"""Application configuration management.

Handles loading and validating configuration from multiple sources:
    - TOML/JSON config files
    - Environment variables (NB_* prefix)
    - Default values

Key components:
    - AppConfig: Main configuration model
    - BudgetConfig: Model limits and budgeting heuristics
    - load_config(): Safe config loading with fallback
    - ConfigLoadResult: Metadata about config source
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from contextlib import nullcontext
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from unittest.mock import patch

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from notebudget.core.errors import ConfigError, ModelLimitsError
from notebudget.core.models import ModelLimits, PromptLanguage

CONFIG_ENV_VAR = "NOTEBUDGET_CONFIG"
DEFAULT_MODEL_KEY = "default"


def default_model_limits() -> dict[str, ModelLimits]:
    return {
        "gpt-4": ModelLimits(max_tokens=8192, max_characters=32000, recommended=6000),
        "gpt-3.5-turbo": ModelLimits(max_tokens=4096, max_characters=16000, recommended=3000),
        "claude-3": ModelLimits(max_tokens=100_000, max_characters=400_000, recommended=80_000),
        "gemini-pro": ModelLimits(max_tokens=32_000, max_characters=128_000, recommended=24_000),
        DEFAULT_MODEL_KEY: ModelLimits(max_tokens=4000, max_characters=16000, recommended=3000),
    }


# -----------------------------------------------------------------------------
# Sub-configuration Models
# -----------------------------------------------------------------------------


class BudgetConfig(BaseModel):
    """Model limits and the heuristics used to budget content."""

    model_config = ConfigDict(protected_namespaces=())

    model_limits: dict[str, ModelLimits] = Field(
        default_factory=default_model_limits,
        description="Per-model context limits; the 'default' entry is the fallback.",
    )
    chars_per_token: float = Field(
        default=3.9, gt=0, description="Characters per token used by the estimator."
    )
    chunk_size_divisor: int = Field(
        default=4,
        gt=0,
        description="Divisor turning max_chunk_size into a per-chunk token target.",
    )
    keywords: list[str] = Field(
        default_factory=lambda: [
            "wichtig",
            "entscheidend",
            "summary",
            "zusammenfassung",
            "erste",
            "letzte",
        ],
        description="Keywords that raise a sentence's priority (case-insensitive).",
    )
    split_on_all_punctuation: bool = Field(
        default=True,
        description="Split sentences on every Unicode punctuation character.",
    )
    sentence_delimiters: str = Field(
        default=".!?;:",
        description="Delimiters used when split_on_all_punctuation is false.",
    )
    primary_threshold: float = Field(
        default=0.7, ge=0.0, le=1.0, description="Scores above this are primary content."
    )
    max_secondary_items: int = Field(
        default=5, ge=0, description="How many secondary fragments to keep."
    )
    example_compress_threshold: int = Field(
        default=200, ge=0, description="Example blocks longer than this get compressed."
    )
    example_truncate_chars: int = Field(
        default=100, ge=0, description="Characters kept when a short example is truncated."
    )
    large_content_threshold: int = Field(
        default=1000,
        ge=0,
        description="Content lengths above this replace the content placeholder with a note.",
    )
    content_placeholder: str = Field(
        default="{content}", min_length=1, description="Literal placeholder for note content."
    )
    prompt_language: PromptLanguage = Field(
        default=PromptLanguage.ENGLISH,
        description="Language of markers and instructions added to optimized prompts.",
    )
    cache_size: int = Field(
        default=128, ge=0, description="Entries kept by the prompt cache (0 disables it)."
    )

    @field_validator("model_limits", mode="after")
    @classmethod
    def require_default_entry(cls, v: dict[str, ModelLimits]) -> dict[str, ModelLimits]:
        if DEFAULT_MODEL_KEY not in v:
            raise ValueError(f"model_limits must define a '{DEFAULT_MODEL_KEY}' entry")
        return v

    @field_validator("keywords", mode="after")
    @classmethod
    def normalize_keywords(cls, v: list[str]) -> list[str]:
        return [keyword.lower() for keyword in v if keyword]


class UserConfig(BaseModel):
    """User preferences for the CLI."""

    log_level: str = Field(default="INFO", description="Log level for notebudget output.")
    default_model: str = Field(
        default=DEFAULT_MODEL_KEY, description="Model whose limits the CLI reports by default."
    )
    default_chunk_size: int = Field(
        default=2000, ge=4, description="Default max chunk size (tokens) for `chunk`."
    )


@dataclass
class ConfigLoadResult:
    path: Path
    file_loaded: bool
    env_overrides: set[str]
    error: str | None = None


class AppConfig(BaseSettings):
    """Application-wide configuration with nested sub-configs."""

    model_config = SettingsConfigDict(
        env_prefix="NB_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    budget: BudgetConfig = Field(default_factory=BudgetConfig)
    user: UserConfig = Field(default_factory=UserConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
    ]:
        # Ensure environment variables override config file entries.
        return (env_settings, init_settings, dotenv_settings, file_secret_settings)


def _resolve_config_path(config_path: Path | None, env_vars: Mapping[str, str]) -> Path:
    candidate = config_path or env_vars.get(CONFIG_ENV_VAR) or (Path.home() / ".notebudget.toml")
    return Path(candidate).expanduser()


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}

    raw = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    parser = json.loads if suffix == ".json" else tomllib.loads

    try:
        data = parser(raw)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Syntax error in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config root in {path} must be a mapping.")

    return data


def _config_groups() -> dict[str, type[BaseModel]]:
    groups: dict[str, type[BaseModel]] = {}
    for name, field in AppConfig.model_fields.items():
        annotation = field.annotation
        if isinstance(annotation, type) and issubclass(annotation, BaseModel):
            groups[name] = annotation
    return groups


def _detect_env_overrides(env_vars: Mapping[str, str]) -> set[str]:
    """Return `group.field` names set through NB_<GROUP>__<FIELD> variables."""
    prefix = AppConfig.model_config.get("env_prefix", "")
    delimiter = AppConfig.model_config.get("env_nested_delimiter", "__")
    present = {key.upper() for key in env_vars}
    return {
        f"{group}.{field}"
        for group, model_cls in _config_groups().items()
        for field in model_cls.model_fields
        if f"{prefix}{group}{delimiter}{field}".upper() in present
    }


def _load_file_data(path: Path) -> tuple[dict[str, Any], bool, str | None]:
    try:
        return _read_config_file(path), path.exists(), None
    except ConfigError as exc:
        return {}, False, str(exc)


def load_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> tuple[AppConfig, ConfigLoadResult]:
    """Load configuration, falling back to defaults (Safe Mode) on errors.

    Precedence is environment variables, then the config file, then defaults.
    `env` adds variables on top of `os.environ` for this call only. Invalid
    files never raise; the problem is reported through `ConfigLoadResult.error`.
    """
    env_vars: Mapping[str, str] = os.environ if env is None else {**os.environ, **env}
    resolved_path = _resolve_config_path(config_path, env_vars)
    file_data, file_loaded, error = _load_file_data(resolved_path)

    environment = patch.dict(os.environ, dict(env), clear=False) if env else nullcontext()
    try:
        with environment:
            config = AppConfig(**file_data)
    except (ValidationError, ModelLimitsError) as exc:
        error = str(exc)
        config = AppConfig()

    return config, ConfigLoadResult(
        path=resolved_path,
        file_loaded=file_loaded,
        env_overrides=_detect_env_overrides(env_vars),
        error=error,
    )



__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_MODEL_KEY",
    "AppConfig",
    "BudgetConfig",
    "ConfigLoadResult",
    "UserConfig",
    "default_model_limits",
    "load_config",
]
