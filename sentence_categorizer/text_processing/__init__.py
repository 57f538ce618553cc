"""
Text processing module for the sentence categorizer.
"""

from .segmenter import SENTENCE_PATTERN, SentenceSegmenter, segment

__all__ = [
    "SentenceSegmenter",
    "SENTENCE_PATTERN",
    "segment",
]
