"""
Regex sentence segmenter for the sentence categorizer.
"""

import re
from typing import List

from ..exceptions import ValidationError
from ..models import Sentence

# A maximal run of non-terminal characters followed by one or more terminators.
SENTENCE_PATTERN = re.compile(r"[^.!?]+[.!?]+")

DEFAULT_MIN_LENGTH = 10


class SentenceSegmenter:
    """
    Splits free text into candidate sentences.

    Each maximal run of characters other than ``.``, ``!`` and ``?`` that is
    followed by one or more of those terminators becomes one sentence. Matches
    are trimmed, and any match not strictly longer than ``min_length`` is
    discarded. Text after the last terminator is not a sentence.
    """

    def __init__(self, min_length: int = DEFAULT_MIN_LENGTH) -> None:
        """
        Initialize segmenter.

        Args:
            min_length: A trimmed sentence must be longer than this many characters
        """
        if min_length < 0:
            raise ValidationError(
                f"min_length cannot be negative, got {min_length}",
                field="min_length",
                value=min_length,
            )

        self.min_length = min_length
        self.pattern = SENTENCE_PATTERN

    def segment(self, text: str) -> List[Sentence]:
        """
        Split text into sentences.

        Args:
            text: Raw document text

        Returns:
            Sentences in document order; empty when nothing matches
        """
        if not text:
            return []

        sentences = []
        for match in self.pattern.finditer(text):
            sentence = match.group().strip()
            if len(sentence) > self.min_length:
                sentences.append(sentence)

        return sentences


def segment(text: str, min_length: int = DEFAULT_MIN_LENGTH) -> List[Sentence]:
    """Split ``text`` into sentences with a throwaway segmenter."""
    return SentenceSegmenter(min_length=min_length).segment(text)
