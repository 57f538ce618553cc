"""
Classification module for the sentence categorizer.

This module provides category discovery, batch classification with
per-sentence fallback, and the pacing and cancellation controls used
between batches.
"""

from .batch_classifier import BatchClassifier, create_batches, reconcile_labels
from .category_discoverer import CategoryDiscoverer
from .pacing import (
    CancellationToken,
    DelayPolicy,
    ExponentialBackoff,
    FixedDelay,
    NoDelay,
)
from .vocabulary import CategoryVocabulary, dedupe_categories, normalize_label

__all__ = [
    # Discovery
    "CategoryDiscoverer",
    "CategoryVocabulary",
    "dedupe_categories",
    "normalize_label",
    # Batch classification
    "BatchClassifier",
    "create_batches",
    "reconcile_labels",
    # Pacing
    "DelayPolicy",
    "FixedDelay",
    "ExponentialBackoff",
    "NoDelay",
    "CancellationToken",
]
