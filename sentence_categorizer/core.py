"""
Core SentenceCategorizer class providing the main public API.

A run segments the document, discovers a category vocabulary from a prefix
sample, classifies every sentence in sequential batches and aggregates the
labels into a category -> sentences mapping. All state of a run lives in its
own ``RunContext``, so concurrent runs never share anything.
"""

import asyncio
import logging
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .aggregation.result_aggregator import ResultAggregator
from .classification.batch_classifier import BatchClassifier
from .classification.category_discoverer import CategoryDiscoverer
from .classification.pacing import CancellationToken, DelayPolicy, FixedDelay
from .config import CategorizerConfig
from .exceptions import EmptyDocumentError, RunCancelledError, ValidationError
from .llm.chat_client import ChatClient
from .models import CategorizedResult, Category, LabelMismatch, Sentence
from .progress import (
    COMPLETE,
    DISCOVERY_DONE,
    RUN_START,
    SEGMENTED,
    ProgressReporter,
    ProgressSink,
)
from .text_processing.segmenter import SentenceSegmenter

logger = logging.getLogger(__name__)


class RunStatus(Enum):
    """Lifecycle of a single categorization run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class RunContext:
    """State owned by exactly one run."""

    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: RunStatus = RunStatus.PENDING

    # Pipeline state
    sentences: List[Sentence] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    labels: List[Category] = field(default_factory=list)
    mismatches: List[LabelMismatch] = field(default_factory=list)
    total_batches: int = 0
    batches_completed: int = 0

    # Output, only set once the run completes
    result: Optional[CategorizedResult] = None

    # Error information
    error_message: Optional[str] = None

    # Timing
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def processed_count(self) -> int:
        return len(self.labels)

    @property
    def processing_time_ms(self) -> int:
        if self.started_at is None or self.finished_at is None:
            return 0
        return int((self.finished_at - self.started_at).total_seconds() * 1000)

    def summary(self) -> dict:
        return {
            "run_id": self.run_id,
            "status": self.status.value,
            "total_sentences": len(self.sentences),
            "total_categories": len(self.categories),
            "processed_sentences": self.processed_count,
            "batches_completed": self.batches_completed,
            "total_batches": self.total_batches,
            "fallback_assignments": len(self.mismatches),
            "processing_time_ms": self.processing_time_ms,
            "error_message": self.error_message,
        }


class SentenceCategorizer:
    """
    Main class turning a document's text into categorized sentences.

    Features:
    - Regex sentence segmentation with a minimum length threshold
    - Model-driven category vocabulary discovery on a prefix sample
    - Sequential batch classification with per-sentence fallback
    - Configurable inter-batch delay and cooperative cancellation
    - Progress events for every pipeline stage
    """

    def __init__(
        self,
        config: Optional[CategorizerConfig] = None,
        chat_client: Optional[ChatClient] = None,
        progress_sink: Optional[ProgressSink] = None,
        delay_policy: Optional[DelayPolicy] = None,
    ) -> None:
        """
        Initialize the categorizer.

        Args:
            config: Configuration (default: read from SENTCAT_* environment variables)
            chat_client: Client for the chat-completion endpoint (default: built from config)
            progress_sink: Default receiver of progress events
            delay_policy: Inter-batch delay (default: fixed ``config.batch_delay_seconds``)
        """
        self.config = config or CategorizerConfig.from_env()
        self.chat_client = chat_client or ChatClient.from_config(self.config)
        self.progress_sink = progress_sink

        self.segmenter = SentenceSegmenter(min_length=self.config.min_sentence_length)
        self.discoverer = CategoryDiscoverer(
            self.chat_client,
            min_categories=self.config.min_categories,
            max_categories=self.config.max_categories,
            fallback_category=self.config.fallback_category,
        )
        self.classifier = BatchClassifier(
            self.chat_client,
            batch_size=self.config.batch_size,
            fallback_category=self.config.fallback_category,
            delay_policy=delay_policy or FixedDelay(self.config.batch_delay_seconds),
            context_window=self.config.context_window,
        )

        logger.info(
            f"SentenceCategorizer initialized with model {self.config.model_name}, "
            f"batch size {self.config.batch_size}"
        )

    async def run(
        self,
        text: str,
        cancel_token: Optional[CancellationToken] = None,
        progress_sink: Optional[ProgressSink] = None,
        context: Optional[RunContext] = None,
    ) -> RunContext:
        """
        Categorize a document and return the completed run context.

        Args:
            text: Raw document text
            cancel_token: Checked before discovery and before every batch
            progress_sink: Receiver of progress events for this run only
            context: Fresh context to fill in, letting the caller inspect a failed run

        Returns:
            Completed run context; ``context.result`` holds the mapping

        Raises:
            EmptyDocumentError: If segmentation finds no sentences
            CategoryDiscoveryError: If no vocabulary can be derived
            ClassificationError: If any batch request fails
            RemoteAPIError: If the discovery request fails
            RunCancelledError: If the token is cancelled mid-run
        """
        context = context or RunContext()
        if context.status is not RunStatus.PENDING:
            raise ValidationError(
                "A run context can only be used once",
                field="context",
                value=context.status.value,
            )
        context.status = RunStatus.RUNNING
        context.started_at = datetime.now()
        progress = ProgressReporter(progress_sink or self.progress_sink)

        try:
            progress.update(RUN_START, "Starting categorization...")

            context.sentences = self.segmenter.segment(text)
            if not context.sentences:
                raise EmptyDocumentError("No sentences found in document")

            progress.update(
                SEGMENTED, f"Found {len(context.sentences)} sentences. Analyzing..."
            )

            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            context.categories = await self.discoverer.discover(
                context.sentences, self.config.discovery_sample_size, progress
            )
            progress.update(
                DISCOVERY_DONE,
                f"Identified {len(context.categories)} categories: "
                f"{', '.join(context.categories)}",
            )

            aggregator = ResultAggregator(
                context.categories, self.config.fallback_category
            )
            context.total_batches = math.ceil(
                len(context.sentences) / self.config.batch_size
            )

            async for outcome in self.classifier.classify_batches(
                context.sentences,
                context.categories,
                progress=progress,
                cancel_token=cancel_token,
            ):
                aggregator.add_outcome(outcome)
                context.labels.extend(outcome.labels)
                context.mismatches.extend(outcome.mismatches)
                context.batches_completed += 1

            result = aggregator.finalize()
            context.result = result
            context.status = RunStatus.COMPLETED
            progress.update(
                COMPLETE,
                f"Complete! Categorized {result.total_sentences} sentences "
                f"into {len(result)} categories.",
            )
            return context

        except RunCancelledError as e:
            context.status = RunStatus.CANCELLED
            context.error_message = str(e)
            progress.fail(str(e))
            raise
        except Exception as e:
            context.status = RunStatus.FAILED
            context.error_message = str(e)
            progress.fail(str(e))
            logger.error(f"Run {context.run_id} failed: {e}")
            raise
        finally:
            context.finished_at = datetime.now()
            logger.info(f"Run {context.run_id} finished: {context.summary()}")

    async def categorize(
        self,
        text: str,
        cancel_token: Optional[CancellationToken] = None,
        progress_sink: Optional[ProgressSink] = None,
    ) -> CategorizedResult:
        """Categorize a document and return only the category -> sentences mapping."""
        context = await self.run(text, cancel_token, progress_sink)
        assert context.result is not None
        return context.result

    def categorize_sync(
        self,
        text: str,
        cancel_token: Optional[CancellationToken] = None,
        progress_sink: Optional[ProgressSink] = None,
    ) -> CategorizedResult:
        """Blocking wrapper around ``categorize`` for callers without an event loop."""
        return asyncio.run(self.categorize(text, cancel_token, progress_sink))


async def categorize_document(
    text: str,
    config: Optional[CategorizerConfig] = None,
    chat_client: Optional[ChatClient] = None,
    progress_sink: Optional[ProgressSink] = None,
) -> CategorizedResult:
    """
    Categorize a document with a one-off categorizer.

    Args:
        text: Raw document text
        config: Configuration (default: from environment)
        chat_client: Optional pre-built client
        progress_sink: Optional receiver of progress events

    Returns:
        Category -> sentences mapping
    """
    categorizer = SentenceCategorizer(
        config=config, chat_client=chat_client, progress_sink=progress_sink
    )
    return await categorizer.categorize(text)
