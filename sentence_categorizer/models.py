"""
Data models and type definitions for the sentence categorizer.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

# A Sentence is a trimmed, immutable str produced once by the segmenter;
# its index in the segmented sequence is its identity.
Sentence = str
Category = str


@dataclass(frozen=True)
class Batch:
    """A contiguous slice of the sentence sequence, classified in one request."""

    index: int
    total_batches: int
    start: int
    sentences: Tuple[Sentence, ...]

    @property
    def end(self) -> int:
        """Exclusive end index of the slice in the full sentence sequence."""
        return self.start + len(self.sentences)

    def __len__(self) -> int:
        return len(self.sentences)


@dataclass(frozen=True)
class LabelMismatch:
    """A sentence whose label had to be replaced by the fallback category."""

    sentence_index: int
    batch_index: int
    reason: str
    raw_label: Optional[str] = None


@dataclass
class BatchOutcome:
    """Reconciled labels for one batch plus the mismatches resolved on the way."""

    batch: Batch
    labels: List[Category]
    mismatches: List[LabelMismatch] = field(default_factory=list)
    latency_ms: int = 0


class CategorizedResult:
    """
    Ordered mapping from category name to the sentences assigned to it.

    Buckets keep insertion order and sentences keep the order in which they
    were appended, which is document order when produced by the pipeline.
    """

    def __init__(self, buckets: Optional[Mapping[str, Sequence[str]]] = None) -> None:
        self._buckets: Dict[Category, List[Sentence]] = {}
        for category, sentences in (buckets or {}).items():
            self._buckets[category] = list(sentences)

    def ensure_bucket(self, category: Category) -> List[Sentence]:
        """Return the bucket for ``category``, creating an empty one if needed."""
        if category not in self._buckets:
            self._buckets[category] = []
        return self._buckets[category]

    def add(self, category: Category, sentence: Sentence) -> None:
        self.ensure_bucket(category).append(sentence)

    def drop_if_empty(self, category: Category) -> None:
        if category in self._buckets and not self._buckets[category]:
            del self._buckets[category]

    @property
    def categories(self) -> List[Category]:
        return list(self._buckets)

    @property
    def total_sentences(self) -> int:
        return sum(len(sentences) for sentences in self._buckets.values())

    def counts(self) -> Dict[Category, int]:
        """Number of sentences per category, in bucket order."""
        return {category: len(sentences) for category, sentences in self._buckets.items()}

    def to_dict(self) -> Dict[str, List[str]]:
        """Convert to the canonical ``{category: [sentence, ...]}`` interchange form."""
        return {category: list(sentences) for category, sentences in self._buckets.items()}

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Sequence[str]]) -> "CategorizedResult":
        return cls(data)

    @classmethod
    def from_json(cls, text: str) -> "CategorizedResult":
        return cls(json.loads(text))

    def __getitem__(self, category: Category) -> List[Sentence]:
        return list(self._buckets[category])

    def __contains__(self, category: object) -> bool:
        return category in self._buckets

    def __iter__(self) -> Iterator[Category]:
        return iter(self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)

    def items(self) -> Iterator[Tuple[Category, List[Sentence]]]:
        for category, sentences in self._buckets.items():
            yield category, list(sentences)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CategorizedResult):
            return self.to_dict() == other.to_dict()
        if isinstance(other, Mapping):
            return self.to_dict() == {k: list(v) for k, v in other.items()}
        return NotImplemented

    def __repr__(self) -> str:
        return f"CategorizedResult({self.counts()!r})"
