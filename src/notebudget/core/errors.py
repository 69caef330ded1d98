"""Error hierarchy for notebudget.

The budgeting contracts themselves do not fail on well-formed input; these
exceptions cover configuration problems detected at setup time.
"""

from __future__ import annotations

from typing import Any


class NoteBudgetError(Exception):
    """Base exception for all notebudget errors."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message


class ConfigError(NoteBudgetError, RuntimeError):
    """Raised when configuration cannot be loaded or parsed."""


class ModelLimitsError(NoteBudgetError, ValueError):
    """Raised when a model limits entry violates its invariants."""


__all__ = ["ConfigError", "ModelLimitsError", "NoteBudgetError"]
