"""Sentence-level content prioritization.

Scores sentence-like fragments by position, length and keyword matches and
partitions them into a primary and a secondary bucket. Segmentation is a
punctuation heuristic; abbreviations and decimal numbers split too.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable, Sequence
from functools import lru_cache

from notebudget.core.console import get_logger
from notebudget.core.models import PrioritizedContent

logger = get_logger(__name__)

POSITION_BONUS = 0.4
LENGTH_BONUS = 0.2
KEYWORD_BONUS = 0.3
MIN_INFORMATIVE_LENGTH = 50
MAX_INFORMATIVE_LENGTH = 200

DEFAULT_KEYWORDS: tuple[str, ...] = (
    "wichtig",
    "entscheidend",
    "summary",
    "zusammenfassung",
    "erste",
    "letzte",
)
PRIORITIZATION_CONTEXT = "Content for prompt optimization"


def _is_punctuation(char: str) -> bool:
    return unicodedata.category(char).startswith("P")


@lru_cache(maxsize=8)
def _splitter(delimiters: str) -> re.Pattern[str]:
    return re.compile(f"[{re.escape(delimiters)}]")


def _split_on_punctuation(content: str) -> list[str]:
    fragments: list[str] = []
    start = 0
    for index, char in enumerate(content):
        if _is_punctuation(char):
            fragments.append(content[start:index])
            start = index + 1
    fragments.append(content[start:])
    return fragments


def split_sentences(content: str, delimiters: str | None = None) -> list[str]:
    """Split content into stripped, non-empty fragments.

    With `delimiters=None` every Unicode punctuation character is a boundary.
    """
    if not content:
        return []
    if delimiters is None:
        raw = _split_on_punctuation(content)
    else:
        raw = _splitter(delimiters).split(content)
    return [fragment.strip() for fragment in raw if fragment.strip()]



class ContentPrioritizer:
    """Partition text into primary and secondary fragments for prompt building."""

    def __init__(
        self,
        keywords: Iterable[str] = DEFAULT_KEYWORDS,
        *,
        delimiters: str | None = None,
        primary_threshold: float = 0.7,
        max_secondary_items: int = 5,
    ) -> None:
        self.keywords = tuple(keyword.lower() for keyword in keywords)
        self.delimiters = delimiters
        self.primary_threshold = primary_threshold
        self.max_secondary_items = max_secondary_items

    def score(self, sentence: str, position: int, total_count: int) -> float:
        """Score a fragment in [0, 1].

        Args:
            sentence: Fragment text.
            position: Zero-based index of the fragment.
            total_count: Number of fragments in the document.
        """
        priority = 0.0

        if position < total_count // 4:
            priority += POSITION_BONUS

        if MIN_INFORMATIVE_LENGTH < len(sentence) < MAX_INFORMATIVE_LENGTH:
            priority += LENGTH_BONUS

        lowered = sentence.lower()
        if any(keyword in lowered for keyword in self.keywords):
            priority += KEYWORD_BONUS

        return min(priority, 1.0)

    def prioritize(self, content: str, prompt: str = "") -> PrioritizedContent:
        # The prompt is accepted for call-site symmetry; scoring ignores it.
        sentences = split_sentences(content, self.delimiters)
        if not sentences:
            return PrioritizedContent(primary_content="", context=PRIORITIZATION_CONTEXT)

        primary: list[str] = []
        secondary: list[str] = []
        total = len(sentences)
        for index, sentence in enumerate(sentences):
            if self.score(sentence, index, total) > self.primary_threshold:
                primary.append(sentence)
            else:
                secondary.append(sentence)

        logger.debug("Prioritized %d fragments: %d primary, %d secondary", total, len(primary), len(secondary))

        return PrioritizedContent(
            primary_content=" ".join(primary),
            secondary_content=_tail(secondary, self.max_secondary_items),
            context=PRIORITIZATION_CONTEXT,
            priority=len(primary) / total,
        )


def _tail(items: Sequence[str], count: int) -> tuple[str, ...]:
    if count <= 0:
        return ()
    return tuple(items[-count:])


__all__ = [
    "DEFAULT_KEYWORDS",
    "KEYWORD_BONUS",
    "LENGTH_BONUS",
    "POSITION_BONUS",
    "ContentPrioritizer",
    "split_sentences",
]
