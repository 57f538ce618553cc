"""
Tests for result aggregation.
"""

import logging

from sentence_categorizer.aggregation.result_aggregator import ResultAggregator, aggregate
from sentence_categorizer.models import Batch, BatchOutcome


class TestAggregate:
    """Test the aggregate function."""

    def test_basic_grouping(self, sample_sentences) -> None:
        """Test grouping with document order preserved."""
        result = aggregate(
            sample_sentences, ["Animals", "Animals", "Finance"], ["Animals", "Finance"]
        )

        assert result == {
            "Animals": ["Cats are mammals.", "Dogs bark loudly."],
            "Finance": ["The stock market rose today."],
        }

    def test_every_sentence_placed_once(self) -> None:
        """Test that bucket sizes add up to the sentence count."""
        sentences = [f"Sentence {i} is long enough." for i in range(9)]
        labels = ["A", "B", "Uncategorized"] * 3

        result = aggregate(sentences, labels, ["A", "B"])

        assert result.total_sentences == 9
        placed = [s for _, bucket in result.items() for s in bucket]
        assert sorted(placed) == sorted(sentences)

    def test_empty_discovered_bucket_kept(self) -> None:
        """Test that discovered categories appear even without sentences."""
        result = aggregate(["Cats are mammals."], ["Animals"], ["Animals", "Finance"])

        assert result.categories == ["Animals", "Finance"]
        assert result["Finance"] == []

    def test_empty_fallback_bucket_dropped(self) -> None:
        """Test that the fallback bucket only appears when used."""
        result = aggregate(["Cats are mammals."], ["Animals"], ["Animals"])

        assert "Uncategorized" not in result

    def test_fallback_bucket_kept_when_used(self) -> None:
        """Test the fallback bucket position after the discovered categories."""
        result = aggregate(
            ["Cats are mammals.", "It rained."], ["Animals", "Uncategorized"], ["Animals"]
        )

        assert result.categories == ["Animals", "Uncategorized"]
        assert result["Uncategorized"] == ["It rained."]

    def test_unknown_label_gets_own_bucket(self, caplog) -> None:
        """Test that an unexpected label is not dropped."""
        with caplog.at_level(logging.WARNING):
            result = aggregate(["Goal scored."], ["Sports"], ["Animals"])

        assert result["Sports"] == ["Goal scored."]
        assert "unrecognized label 'Sports'" in caplog.text

    def test_short_label_list(self, caplog) -> None:
        """Test that sentences without labels go to the fallback bucket."""
        with caplog.at_level(logging.WARNING):
            result = aggregate(["s one", "s two", "s three"], ["A"], ["A"])

        assert result == {"A": ["s one"], "Uncategorized": ["s two", "s three"]}
        assert "Got 1 labels for 3 sentences" in caplog.text


class TestResultAggregator:
    """Test incremental aggregation."""

    def test_add_outcome(self) -> None:
        """Test folding batch outcomes in order."""
        aggregator = ResultAggregator(["A", "B"])
        first = Batch(index=0, total_batches=2, start=0, sentences=("x1", "x2"))
        second = Batch(index=1, total_batches=2, start=2, sentences=("x3",))

        aggregator.add_outcome(BatchOutcome(batch=first, labels=["B", "A"]))
        aggregator.add_outcome(BatchOutcome(batch=second, labels=["B"]))
        result = aggregator.finalize()

        assert result == {"A": ["x2"], "B": ["x1", "x3"]}
        assert aggregator.sentences_added == 3

    def test_none_label_uses_fallback(self) -> None:
        """Test that a missing label means the fallback category."""
        aggregator = ResultAggregator(["A"], fallback_category="Other")

        aggregator.add("x1", None)

        assert aggregator.finalize() == {"A": [], "Other": ["x1"]}
