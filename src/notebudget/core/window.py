"""Context window budgeting.

This module provides:
- ContextWindowManager: window sizing per content type, prompt optimization
  and greedy paragraph packing into chunks
- CONTENT_TYPE_MULTIPLIERS: scaling applied to the base model limits

Every operation is a pure function of its arguments and the configuration
passed at construction time, so one manager can be shared across threads.
"""

from __future__ import annotations

import math
import re
from typing import Final

from notebudget.core.cache import PromptCache, make_cache_key
from notebudget.core.config import DEFAULT_MODEL_KEY, BudgetConfig
from notebudget.core.console import get_logger
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
from notebudget.core.prioritizer import ContentPrioritizer, split_sentences
from notebudget.core.templates import render_localized
from notebudget.core.tokens import TokenEstimator

logger = get_logger(__name__)

PARAGRAPH_SEPARATOR: Final[str] = "\n\n"

# (max_tokens, max_characters, recommended)
CONTENT_TYPE_MULTIPLIERS: Final[dict[ContentType, tuple[float, float, float]]] = {
    ContentType.CODE: (1.5, 1.5, 1.3),
    ContentType.ARTICLE: (1.2, 1.2, 1.0),
    ContentType.EMAIL: (0.8, 0.8, 0.7),
    ContentType.MEETING: (1.0, 1.0, 1.0),
}
_NEUTRAL_MULTIPLIERS: Final[tuple[float, float, float]] = (1.0, 1.0, 1.0)

_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_EXCESS_SPACES = re.compile(r" {2,}")
_EXAMPLE_BLOCK = re.compile(r"(?:Example|Beispiel):?[\s\S]*?(?=\n\n|\n##|\n\*\*|\Z)")

_COMPRESSED_MARKERS: Final[dict[PromptLanguage, str]] = {
    PromptLanguage.GERMAN: "[komprimiert]",
    PromptLanguage.ENGLISH: "[compressed]",
    PromptLanguage.MULTILINGUAL: "[compressed]",
}
_TRUNCATED_MARKERS: Final[dict[PromptLanguage, str]] = {
    PromptLanguage.GERMAN: "[gekürzt]",
    PromptLanguage.ENGLISH: "[truncated]",
    PromptLanguage.MULTILINGUAL: "[truncated]",
}


class ContextWindowManager:
    """Budget prompts and content against a model's context window.

    Args:
        config: Model limits and heuristics; defaults to the built-in table.
        cache: Optional cache memoizing `optimize_prompt` results.
    """

    def __init__(self, config: BudgetConfig | None = None, *, cache: PromptCache | None = None) -> None:
        self.config = config or BudgetConfig()
        self.cache = cache
        self.estimator = TokenEstimator(self.config.chars_per_token)
        self.prioritizer = ContentPrioritizer(
            self.config.keywords,
            delimiters=None if self.config.split_on_all_punctuation else self.config.sentence_delimiters,
            primary_threshold=self.config.primary_threshold,
            max_secondary_items=self.config.max_secondary_items,
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def calculate_token_count(self, text: str) -> int:
        return self.estimator.estimate_tokens(text)

    def get_model_limits(self) -> dict[str, ModelLimits]:
        return dict(self.config.model_limits)

    def limits_for(self, model: str | None = None) -> ModelLimits:
        """Return limits for `model`, falling back to the default entry."""
        limits = self.config.model_limits
        if model and model in limits:
            return limits[model]
        if model and model != DEFAULT_MODEL_KEY:
            logger.debug("No limits registered for %s; using %s", model, DEFAULT_MODEL_KEY)
        return limits[DEFAULT_MODEL_KEY]

    def prioritize_content(self, content: str, prompt: str = "") -> PrioritizedContent:
        return self.prioritizer.prioritize(content, prompt)

    # ------------------------------------------------------------------
    # Window sizing
    # ------------------------------------------------------------------

    def get_optimal_window_size(
        self,
        content_type: ContentType = ContentType.DEFAULT,
        language: PromptLanguage = PromptLanguage.MULTILINGUAL,
        *,
        model: str | None = None,
    ) -> WindowSize:
        """Scale the base model limits for a content type.

        `language` does not change the result; it is accepted so callers can
        pass the same arguments they use for token estimation.
        """
        base = self.limits_for(model)
        tokens_x, chars_x, recommended_x = CONTENT_TYPE_MULTIPLIERS.get(content_type, _NEUTRAL_MULTIPLIERS)
        return WindowSize(
            max_tokens=int(base.max_tokens * tokens_x),
            max_characters=int(base.max_characters * chars_x),
            recommended=int(base.recommended * recommended_x),
        )

    # ------------------------------------------------------------------
    # Prompt optimization
    # ------------------------------------------------------------------

    def optimize_prompt(self, prompt: str, content_length: int = 0) -> str:
        """Shrink a prompt that exceeds the recommended article window.

        Prompts within budget are returned unchanged. Otherwise formatting is
        normalized, long examples are compressed, the content placeholder is
        replaced for large content, and chunk-processing instructions are
        appended if the prompt is still over budget.
        """
        threshold = self.get_optimal_window_size(ContentType.ARTICLE).recommended
        prompt_tokens = self.calculate_token_count(prompt)
        if prompt_tokens <= threshold:
            return prompt

        cache_key: str | None = None
        if self.cache is not None:
            cache_key = make_cache_key(
                ContentType.ARTICLE.value, prompt, content_length, self.config.prompt_language.value
            )
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug("Prompt cache hit for %s", cache_key)
                return cached

        logger.debug("Optimizing prompt: %d tokens exceeds %d", prompt_tokens, threshold)
        optimized = self._optimize_formatting(prompt)
        optimized = self._compress_examples(optimized)
        optimized = self._replace_large_content(optimized, content_length)

        if self.calculate_token_count(optimized) > threshold:
            optimized = self._add_chunking_instructions(optimized)

        if self.cache is not None and cache_key is not None:
            self.cache.put(cache_key, optimized)
        return optimized

    def _optimize_formatting(self, prompt: str) -> str:
        collapsed = _EXCESS_NEWLINES.sub(PARAGRAPH_SEPARATOR, prompt)
        return _EXCESS_SPACES.sub(" ", collapsed)

    def _compress_examples(self, prompt: str) -> str:
        threshold = self.config.example_compress_threshold

        def _replace(match: re.Match[str]) -> str:
            example = match.group(0)
            if len(example) <= threshold:
                return example
            return self._compress_example_text(example)

        return _EXAMPLE_BLOCK.sub(_replace, prompt)

    def _compress_example_text(self, example: str) -> str:
        """Keep the first and last sentence of an example, or truncate short ones."""
        language = self.config.prompt_language
        sentences = split_sentences(example, self.prioritizer.delimiters)
        if len(sentences) > 3:
            return f"{sentences[0]}...{_COMPRESSED_MARKERS[language]}...{sentences[-1]}"
        return example[: self.config.example_truncate_chars] + f"...{_TRUNCATED_MARKERS[language]}..."

    def _replace_large_content(self, prompt: str, content_length: int) -> str:
        if content_length <= self.config.large_content_threshold:
            return prompt
        note = render_localized(
            "content_note",
            self.config.prompt_language,
            {"content_length": content_length},
        )
        return prompt.replace(self.config.content_placeholder, note)

    def _add_chunking_instructions(self, prompt: str) -> str:
        return prompt + render_localized("chunking_instructions", self.config.prompt_language)

    # ------------------------------------------------------------------
    # Chunking
    # ------------------------------------------------------------------

    def split_content_into_chunks(self, content: str, max_chunk_size: int) -> list[ContentChunk]:
        """Split content into ordered chunks of at most `max_chunk_size` tokens.

        Content that fits yields a single `complete` chunk holding the input
        unmodified. Larger content is packed greedily paragraph by paragraph;
        joining the chunk contents with a blank line reproduces the input.
        A paragraph that alone exceeds the budget becomes its own oversized
        chunk rather than being split.

        Raises:
            ValueError: If `max_chunk_size` is smaller than the chunk size divisor.
        """
        divisor = self.config.chunk_size_divisor
        if max_chunk_size < divisor:
            raise ValueError(f"max_chunk_size must be at least {divisor}, got {max_chunk_size}")

        total_tokens = self.calculate_token_count(content)
        max_tokens_per_chunk = max_chunk_size // divisor
        estimated_chunks = math.ceil(total_tokens / max_tokens_per_chunk)

        if estimated_chunks <= 1:
            return [
                ContentChunk(
                    id="chunk_1",
                    content=content,
                    token_count=total_tokens,
                    priority=ChunkPriority.HIGH,
                    chunk_type=ChunkType.COMPLETE,
                )
            ]

        chunks = self._pack_paragraphs(content, max_chunk_size)
        logger.debug(
            "Split %d tokens into %d chunks (estimated %d, max %d per chunk)",
            total_tokens,
            len(chunks),
            estimated_chunks,
            max_chunk_size,
        )
        return chunks

    def _pack_paragraphs(self, content: str, max_chunk_size: int) -> list[ContentChunk]:
        chunks: list[ContentChunk] = []
        buffer: list[str] = []
        buffer_tokens = 0

        for paragraph in content.split(PARAGRAPH_SEPARATOR):
            paragraph_tokens = self.calculate_token_count(paragraph)
            if paragraph_tokens > max_chunk_size:
                logger.warning(
                    "Paragraph of %d tokens exceeds max chunk size %d; emitting it unsplit",
                    paragraph_tokens,
                    max_chunk_size,
                )

            # An empty paragraph never opens a chunk, so every new buffer starts with text.
            overflows = buffer_tokens + paragraph_tokens > max_chunk_size
            if overflows and paragraph != "" and _has_text(buffer):
                chunks.append(self._make_chunk(buffer, len(chunks) + 1))
                buffer = [paragraph]
                buffer_tokens = paragraph_tokens
            else:
                buffer.append(paragraph)
                buffer_tokens += paragraph_tokens

        if buffer:
            chunks.append(self._make_chunk(buffer, len(chunks) + 1))
        return chunks

    def _make_chunk(self, paragraphs: list[str], index: int) -> ContentChunk:
        text = PARAGRAPH_SEPARATOR.join(paragraphs)
        return ContentChunk(
            id=f"chunk_{index}",
            content=text,
            token_count=self.calculate_token_count(text),
            priority=ChunkPriority.HIGH if index == 1 else ChunkPriority.MEDIUM,
            chunk_type=ChunkType.PARTIAL,
        )


def _has_text(paragraphs: list[str]) -> bool:
    # A lone empty paragraph joins to "" and is not content yet.
    return len(paragraphs) > 1 or (len(paragraphs) == 1 and paragraphs[0] != "")


__all__ = [
    "CONTENT_TYPE_MULTIPLIERS",
    "PARAGRAPH_SEPARATOR",
    "ContextWindowManager",
]
