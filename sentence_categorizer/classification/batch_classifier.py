"""
Batch classification for the sentence categorizer.

Sentences are sent to the model in contiguous batches, one request at a time,
and every sentence comes back with exactly one label from the closed
vocabulary. Labels the model omits or invents are replaced by the fallback
category; only a failed request aborts the run.
"""

import logging
import time
from typing import AsyncIterator, List, Optional, Sequence, Tuple

from litellm import token_counter

from ..exceptions import (
    ClassificationError,
    MalformedResponseError,
    RemoteAPIError,
    ValidationError,
)
from ..llm.chat_client import ChatClient
from ..llm.prompts import build_classification_prompt
from ..llm.response_parser import ParseFailure, try_parse_label_array
from ..models import Batch, BatchOutcome, Category, LabelMismatch, Sentence
from ..progress import ProgressReporter, batch_percent
from .pacing import CancellationToken, DelayPolicy, FixedDelay, pause
from .vocabulary import CategoryVocabulary

logger = logging.getLogger(__name__)

# Tokenizer used for prompt budgeting; litellm falls back to its default
# encoding for model names it does not know.
TOKEN_COUNT_MODEL = "gpt-3.5-turbo"


def create_batches(sentences: Sequence[Sentence], batch_size: int) -> List[Batch]:
    """Partition sentences into ``ceil(n / batch_size)`` contiguous batches."""
    if batch_size <= 0:
        raise ValidationError(
            "batch_size must be positive", field="batch_size", value=batch_size
        )

    total_batches = (len(sentences) + batch_size - 1) // batch_size
    batches = []
    for index, start in enumerate(range(0, len(sentences), batch_size)):
        batches.append(
            Batch(
                index=index,
                total_batches=total_batches,
                start=start,
                sentences=tuple(sentences[start : start + batch_size]),
            )
        )

    logger.debug(f"Created {len(batches)} batches from {len(sentences)} sentences")
    return batches


def reconcile_labels(
    batch: Batch,
    raw_labels: Sequence[str],
    vocabulary: CategoryVocabulary,
) -> Tuple[List[Category], List[LabelMismatch]]:
    """
    Align parsed labels with the sentences of a batch.

    Position ``i`` of ``raw_labels`` labels sentence ``i`` of the batch. A
    position that is missing, empty or out of vocabulary gets the fallback
    category. Extra labels are ignored. Never raises.
    """
    labels: List[Category] = []
    mismatches: List[LabelMismatch] = []

    for offset in range(len(batch)):
        sentence_index = batch.start + offset
        raw_label = raw_labels[offset] if offset < len(raw_labels) else None

        if raw_label is None:
            reason = "missing label"
            category = None
        elif not raw_label.strip():
            reason = "empty label"
            category = None
        else:
            category = vocabulary.resolve(raw_label)
            reason = f"unknown category {raw_label!r}"

        if category is None:
            category = vocabulary.fallback_category
            mismatches.append(
                LabelMismatch(
                    sentence_index=sentence_index,
                    batch_index=batch.index,
                    reason=reason,
                    raw_label=raw_label,
                )
            )

        labels.append(category)

    if len(raw_labels) > len(batch):
        logger.warning(
            f"Batch {batch.index + 1}: ignoring {len(raw_labels) - len(batch)} extra labels"
        )
    if mismatches:
        logger.warning(
            f"Batch {batch.index + 1}: {len(mismatches)}/{len(batch)} sentences "
            f"assigned to '{vocabulary.fallback_category}'"
        )

    return labels, mismatches


class BatchClassifier:
    """
    Sequential batch classifier.

    Features:
    - Contiguous batches of configurable size
    - One request in flight at a time, with a pluggable inter-batch delay
    - Per-sentence fallback for missing or unknown labels
    - Prompt budget check against the model context window
    - Cooperative cancellation between batches
    """

    def __init__(
        self,
        chat_client: ChatClient,
        batch_size: int = 10,
        fallback_category: str = "Uncategorized",
        delay_policy: Optional[DelayPolicy] = None,
        context_window: int = 128_000,
    ) -> None:
        """
        Initialize batch classifier.

        Args:
            chat_client: Client used for classification requests
            batch_size: Number of sentences per request
            fallback_category: Label for sentences without a valid label
            delay_policy: Pause between batches (default: fixed 1 second)
            context_window: Model context window in tokens
        """
        if batch_size <= 0:
            raise ValidationError(
                "batch_size must be positive", field="batch_size", value=batch_size
            )
        if context_window <= 0:
            raise ValidationError(
                "context_window must be positive",
                field="context_window",
                value=context_window,
            )

        self.chat_client = chat_client
        self.batch_size = batch_size
        self.fallback_category = fallback_category
        self.delay_policy = delay_policy or FixedDelay(1.0)
        self.context_window = context_window

    def count_tokens(self, prompt: str) -> int:
        """Count prompt tokens, estimating from words when the tokenizer fails."""
        try:
            return int(
                token_counter(
                    model=TOKEN_COUNT_MODEL,
                    messages=[{"role": "user", "content": prompt}],
                )
            )
        except Exception as e:
            estimated_tokens = max(1, int(len(prompt.split()) * 1.33))
            logger.warning(
                f"Token counting failed, using word count estimation: "
                f"{estimated_tokens} tokens. Error: {e}"
            )
            return estimated_tokens

    def _validate_prompt_length(self, prompt: str) -> None:
        """
        Validate that the prompt does not exceed half of the context window.
        """
        max_tokens = self.context_window // 2
        token_count = self.count_tokens(prompt)
        if token_count > max_tokens:
            raise ValidationError(
                f"Prompt token count ({token_count}) exceeds half of the context window ({max_tokens})",
                field="prompt",
                value=token_count,
            )

    async def classify_batch(
        self, batch: Batch, vocabulary: CategoryVocabulary
    ) -> BatchOutcome:
        """
        Classify one batch with a single request.

        Raises:
            ClassificationError: If the request fails or its reply has no array
        """
        prompt = build_classification_prompt(
            sentences=batch.sentences,
            categories=vocabulary.categories,
            fallback_category=vocabulary.fallback_category,
        )
        self._validate_prompt_length(prompt)

        start_time = time.time()
        try:
            raw_response = await self.chat_client.chat(prompt)
        except RemoteAPIError as e:
            logger.error(f"Batch {batch.index + 1}/{batch.total_batches} failed: {e}")
            raise ClassificationError(
                f"Request failed: {e}",
                batch_index=batch.index,
                total_batches=batch.total_batches,
            ) from e
        latency_ms = int((time.time() - start_time) * 1000)

        parsed = try_parse_label_array(raw_response, expected_count=len(batch))
        if isinstance(parsed, ParseFailure):
            error: MalformedResponseError = parsed.to_error()
            logger.error(f"Batch {batch.index + 1}/{batch.total_batches}: {error}")
            raise ClassificationError(
                "Failed to parse categorization from AI response",
                batch_index=batch.index,
                total_batches=batch.total_batches,
            ) from error

        labels, mismatches = reconcile_labels(batch, parsed.labels, vocabulary)
        logger.info(
            f"Batch {batch.index + 1}/{batch.total_batches}: "
            f"{len(batch) - len(mismatches)}/{len(batch)} labelled, {latency_ms}ms"
        )
        return BatchOutcome(
            batch=batch, labels=labels, mismatches=mismatches, latency_ms=latency_ms
        )

    async def classify_batches(
        self,
        sentences: Sequence[Sentence],
        categories: Sequence[Category],
        batch_size: Optional[int] = None,
        progress: Optional[ProgressReporter] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> AsyncIterator[BatchOutcome]:
        """
        Classify batches in order, yielding each outcome as it completes.

        The cancellation token is checked before every batch and the delay
        policy runs between batches.
        """
        vocabulary = CategoryVocabulary(categories, self.fallback_category)
        if not vocabulary.categories:
            raise ValidationError("Cannot classify without categories", field="categories")

        batches = create_batches(sentences, batch_size or self.batch_size)

        for batch in batches:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled(batches_completed=batch.index)

            if progress is not None:
                progress.update(
                    batch_percent(batch.index, batch.total_batches),
                    f"Step 2/3: Categorizing batch {batch.index + 1}/{batch.total_batches}...",
                )

            yield await self.classify_batch(batch, vocabulary)

            if batch.index + 1 < batch.total_batches:
                await pause(self.delay_policy, batch.index + 1)

    async def classify_all(
        self,
        sentences: Sequence[Sentence],
        categories: Sequence[Category],
        batch_size: Optional[int] = None,
        progress: Optional[ProgressReporter] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[Category]:
        """
        Label every sentence.

        Returns:
            One category per sentence, aligned with ``sentences``
        """
        labels: List[Category] = []
        async for outcome in self.classify_batches(
            sentences, categories, batch_size, progress, cancel_token
        ):
            labels.extend(outcome.labels)
        return labels
