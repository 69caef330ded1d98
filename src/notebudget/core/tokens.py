"""Heuristic token estimation.

This module provides:
- TokenEstimator: character-ratio token estimates, optionally language-aware
- estimate_tokens(): module-level shortcut using the default ratio

Estimates are a sizing heuristic only. Callers that need billing-accurate
counts must run the model's own tokenizer.

[invariant:typing] All types are explicit; mypy --strict compliant.
"""

from __future__ import annotations

from typing import Final

from notebudget.core.models import PromptLanguage

# Empirical characters per token for mixed German/English text.
DEFAULT_CHARS_PER_TOKEN: Final[float] = 3.9

# German compounds tokenize less efficiently than English.
LANGUAGE_MULTIPLIERS: Final[dict[PromptLanguage, float]] = {
    PromptLanguage.GERMAN: 1.1,
    PromptLanguage.ENGLISH: 1.0,
    PromptLanguage.MULTILINGUAL: 1.05,
}


class TokenEstimator:
    """Token estimator backed by a fixed characters-per-token ratio."""

    def __init__(self, chars_per_token: float = DEFAULT_CHARS_PER_TOKEN) -> None:
        if chars_per_token <= 0:
            raise ValueError("chars_per_token must be positive")
        self.chars_per_token = chars_per_token

    def estimate_tokens(self, text: str) -> int:
        """Estimate tokens for `text`, truncating toward zero."""
        if not text:
            return 0
        return int(len(text) / self.chars_per_token)

    def estimate_tokens_for_language(self, text: str, language: PromptLanguage) -> int:
        """Estimate tokens with a per-language multiplier on top of the base estimate."""
        base_tokens = self.estimate_tokens(text)
        return int(base_tokens * LANGUAGE_MULTIPLIERS[language])

    def tokens_to_characters(self, tokens: int) -> int:
        """Coarse conversion from tokens back to characters."""
        if tokens <= 0:
            return 0
        return int(tokens * self.chars_per_token)


_DEFAULT_ESTIMATOR = TokenEstimator()


def estimate_tokens(text: str, language: PromptLanguage | None = None) -> int:
    if language is None:
        return _DEFAULT_ESTIMATOR.estimate_tokens(text)
    return _DEFAULT_ESTIMATOR.estimate_tokens_for_language(text, language)


__all__ = [
    "DEFAULT_CHARS_PER_TOKEN",
    "LANGUAGE_MULTIPLIERS",
    "TokenEstimator",
    "estimate_tokens",
]
