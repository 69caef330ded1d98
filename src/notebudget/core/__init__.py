"""Core budgeting logic: token estimation, prioritization and window management."""

from __future__ import annotations

from notebudget.core.models import (
    ChunkPriority,
    ChunkType,
    ContentChunk,
    ContentType,
    ModelLimits,
    PrioritizedContent,
    PromptLanguage,
    WindowSize,
)
from notebudget.core.prioritizer import ContentPrioritizer
from notebudget.core.tokens import TokenEstimator
from notebudget.core.window import ContextWindowManager

__all__ = [
    "ChunkPriority",
    "ChunkType",
    "ContentChunk",
    "ContentPrioritizer",
    "ContentType",
    "ContextWindowManager",
    "ModelLimits",
    "PrioritizedContent",
    "PromptLanguage",
    "TokenEstimator",
    "WindowSize",
]
