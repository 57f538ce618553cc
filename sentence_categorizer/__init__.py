"""
Sentence Categorizer - LLM-driven topic categorization of document sentences.
"""

from .aggregation import ResultAggregator, aggregate, render_text_report
from .classification import (
    BatchClassifier,
    CancellationToken,
    CategoryDiscoverer,
    ExponentialBackoff,
    FixedDelay,
    NoDelay,
)
from .config import CategorizerConfig
from .core import RunContext, RunStatus, SentenceCategorizer, categorize_document
from .exceptions import (
    CategoryDiscoveryError,
    ClassificationError,
    ConfigurationError,
    EmptyDocumentError,
    MalformedResponseError,
    RemoteAPIError,
    RunCancelledError,
    SentenceCategorizerError,
    ValidationError,
)
from .llm import ChatClient, ChatSettings, parse_label_array, try_parse_label_array
from .models import Batch, BatchOutcome, CategorizedResult, LabelMismatch
from .progress import ProgressEvent, ProgressRecorder, ProgressReporter
from .text_processing import SentenceSegmenter, segment

__version__ = "0.1.0"
__all__ = [
    "SentenceCategorizer",
    "categorize_document",
    "RunContext",
    "RunStatus",
    "CategorizerConfig",
    # Pipeline stages
    "SentenceSegmenter",
    "segment",
    "ChatClient",
    "ChatSettings",
    "parse_label_array",
    "try_parse_label_array",
    "CategoryDiscoverer",
    "BatchClassifier",
    "ResultAggregator",
    "aggregate",
    "render_text_report",
    # Pacing and progress
    "CancellationToken",
    "FixedDelay",
    "ExponentialBackoff",
    "NoDelay",
    "ProgressEvent",
    "ProgressReporter",
    "ProgressRecorder",
    # Data model
    "Batch",
    "BatchOutcome",
    "CategorizedResult",
    "LabelMismatch",
    # Errors
    "SentenceCategorizerError",
    "ConfigurationError",
    "ValidationError",
    "EmptyDocumentError",
    "MalformedResponseError",
    "RemoteAPIError",
    "CategoryDiscoveryError",
    "ClassificationError",
    "RunCancelledError",
]
