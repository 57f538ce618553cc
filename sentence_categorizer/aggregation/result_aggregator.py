"""
Result aggregation for the sentence categorizer.

Folds per-sentence labels into the final category -> sentences mapping.
Every sentence handed to the aggregator lands in exactly one bucket.
"""

import logging
from typing import Optional, Sequence

from ..models import BatchOutcome, CategorizedResult, Category, Sentence

logger = logging.getLogger(__name__)


class ResultAggregator:
    """
    Incrementally builds a ``CategorizedResult``.

    Buckets for the discovered categories and the fallback category exist
    from the start. A label outside that set still gets a bucket of its own,
    so no sentence is ever dropped for carrying an unexpected label.
    """

    def __init__(
        self, categories: Sequence[Category], fallback_category: str = "Uncategorized"
    ) -> None:
        self.fallback_category = fallback_category
        self.known_categories = set(categories)
        self.result = CategorizedResult()
        self.sentences_added = 0

        for category in categories:
            self.result.ensure_bucket(category)
        self.result.ensure_bucket(fallback_category)

    def add(self, sentence: Sentence, label: Optional[Category]) -> None:
        category = label or self.fallback_category
        if category not in self.known_categories and category != self.fallback_category:
            logger.warning(f"Creating bucket for unrecognized label {category!r}")
            self.known_categories.add(category)
        self.result.add(category, sentence)
        self.sentences_added += 1

    def add_outcome(self, outcome: BatchOutcome) -> None:
        for sentence, label in zip(outcome.batch.sentences, outcome.labels):
            self.add(sentence, label)

    def finalize(self) -> CategorizedResult:
        """Return the result, dropping the fallback bucket if nothing landed in it."""
        self.result.drop_if_empty(self.fallback_category)
        logger.info(
            f"Aggregated {self.sentences_added} sentences into {len(self.result)} categories"
        )
        return self.result


def aggregate(
    sentences: Sequence[Sentence],
    labels: Sequence[Optional[Category]],
    categories: Sequence[Category],
    fallback_category: str = "Uncategorized",
) -> CategorizedResult:
    """
    Build the category -> sentences mapping from positionally aligned labels.

    Args:
        sentences: Sentences in document order
        labels: One label per sentence; a missing label means the fallback category
        categories: The discovered vocabulary, used for bucket order
        fallback_category: Label for sentences without one

    Returns:
        Mapping whose bucket sizes sum to ``len(sentences)``
    """
    if len(labels) != len(sentences):
        logger.warning(
            f"Got {len(labels)} labels for {len(sentences)} sentences; "
            f"unlabelled sentences go to '{fallback_category}'"
        )

    aggregator = ResultAggregator(categories, fallback_category)
    for index, sentence in enumerate(sentences):
        label = labels[index] if index < len(labels) else None
        aggregator.add(sentence, label)

    return aggregator.finalize()
