"""Value types shared by the budgeting components.

[invariant:typing] All types are explicit; mypy --strict compliant.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from notebudget.core.errors import ModelLimitsError


class ContentType(str, Enum):
    """Kind of note content; biases the context window multipliers."""

    CODE = "code"
    ARTICLE = "article"
    EMAIL = "email"
    MEETING = "meeting"
    NOTE = "note"
    TASK = "task"
    IDEA = "idea"
    QUESTION = "question"
    RESEARCH = "research"
    PERSONAL = "personal"
    DEFAULT = "default"


class PromptLanguage(str, Enum):
    GERMAN = "de"
    ENGLISH = "en"
    MULTILINGUAL = "multi"

    @property
    def display_name(self) -> str:
        return {
            PromptLanguage.GERMAN: "Deutsch",
            PromptLanguage.ENGLISH: "English",
            PromptLanguage.MULTILINGUAL: "Multilingual",
        }[self]


class ChunkPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ChunkType(str, Enum):
    COMPLETE = "complete"  # whole input fit in one chunk
    PARTIAL = "partial"  # one of several split pieces
    SUMMARY = "summary"  # reserved for compressed representations


@dataclass(frozen=True)
class ModelLimits:
    """Context limits for a named model.

    `recommended` is the soft target below which no splitting occurs and may
    never exceed the hard `max_tokens` ceiling.
    """

    max_tokens: int
    max_characters: int
    recommended: int

    def __post_init__(self) -> None:
        if self.max_tokens <= 0:
            raise ModelLimitsError("max_tokens must be positive", context={"max_tokens": self.max_tokens})
        if self.max_characters <= 0:
            raise ModelLimitsError(
                "max_characters must be positive", context={"max_characters": self.max_characters}
            )
        if self.recommended < 0:
            raise ModelLimitsError("recommended must be non-negative", context={"recommended": self.recommended})
        if self.recommended > self.max_tokens:
            raise ModelLimitsError(
                "recommended cannot exceed max_tokens",
                context={"recommended": self.recommended, "max_tokens": self.max_tokens},
            )


@dataclass(frozen=True)
class WindowSize:
    """ModelLimits scaled for one content type. Recomputed per call."""

    max_tokens: int
    max_characters: int
    recommended: int


@dataclass(frozen=True)
class ContentChunk:
    id: str
    content: str
    token_count: int
    priority: ChunkPriority
    chunk_type: ChunkType

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "token_count": self.token_count,
            "priority": self.priority.value,
            "chunk_type": self.chunk_type.value,
        }


@dataclass(frozen=True)
class PrioritizedContent:
    """Sentence-level decomposition of a text into primary and secondary parts.

    Attributes:
        primary_content: High-scoring fragments joined by single spaces.
        secondary_content: Trailing lower-scoring fragments, document order.
        context: Free-text label describing the decomposition.
        priority: Share of fragments that landed in the primary bucket.
    """

    primary_content: str
    secondary_content: tuple[str, ...] = field(default_factory=tuple)
    context: str = ""
    priority: float = 0.0


__all__ = [
    "ChunkPriority",
    "ChunkType",
    "ContentChunk",
    "ContentType",
    "ModelLimits",
    "PrioritizedContent",
    "PromptLanguage",
    "WindowSize",
]
