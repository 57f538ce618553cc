"""
Tests for batch classification.
"""

import logging
from unittest.mock import AsyncMock, patch

import pytest

from sentence_categorizer.classification.batch_classifier import (
    BatchClassifier,
    create_batches,
    reconcile_labels,
)
from sentence_categorizer.classification.pacing import CancellationToken, NoDelay
from sentence_categorizer.classification.vocabulary import CategoryVocabulary
from sentence_categorizer.exceptions import (
    ClassificationError,
    MalformedResponseError,
    RemoteAPIError,
    RunCancelledError,
    ValidationError,
)
from sentence_categorizer.models import Batch
from sentence_categorizer.progress import ProgressRecorder, ProgressReporter


def make_batch(sentences, index=0, total_batches=1, start=0) -> Batch:
    return Batch(
        index=index, total_batches=total_batches, start=start, sentences=tuple(sentences)
    )


class TestCreateBatches:
    """Test batch partitioning."""

    def test_uneven_split(self) -> None:
        """Test 7 sentences with batch size 3."""
        sentences = [f"s{i}" for i in range(7)]

        batches = create_batches(sentences, 3)

        assert [len(b) for b in batches] == [3, 3, 1]
        assert [b.start for b in batches] == [0, 3, 6]
        assert all(b.total_batches == 3 for b in batches)
        assert [s for b in batches for s in b.sentences] == sentences

    def test_exact_split(self) -> None:
        """Test a sentence count that divides evenly."""
        batches = create_batches(["a", "b", "c", "d"], 2)

        assert len(batches) == 2
        assert batches[-1].end == 4

    def test_empty(self) -> None:
        """Test that no sentences means no batches."""
        assert create_batches([], 10) == []

    def test_invalid_size(self) -> None:
        """Test rejection of a non-positive batch size."""
        with pytest.raises(ValidationError):
            create_batches(["a"], 0)


class TestReconcileLabels:
    """Test alignment of parsed labels with batch sentences."""

    def setup_method(self) -> None:
        self.vocabulary = CategoryVocabulary(["Animals", "Finance"], "Uncategorized")

    def test_short_reply_padded_with_fallback(self) -> None:
        """Test a batch of 5 with only 3 labels returned."""
        batch = make_batch([f"s{i}" for i in range(5)], start=10)

        labels, mismatches = reconcile_labels(
            batch, ["Animals", "Finance", "Animals"], self.vocabulary
        )

        assert labels == ["Animals", "Finance", "Animals", "Uncategorized", "Uncategorized"]
        assert [m.sentence_index for m in mismatches] == [13, 14]
        assert all(m.reason == "missing label" for m in mismatches)

    def test_unknown_and_empty_labels(self) -> None:
        """Test labels outside the vocabulary."""
        batch = make_batch(["s0", "s1", "s2"])

        labels, mismatches = reconcile_labels(batch, ["Sports", "", "Finance"], self.vocabulary)

        assert labels == ["Uncategorized", "Uncategorized", "Finance"]
        assert mismatches[0].reason == "unknown category 'Sports'"
        assert mismatches[0].raw_label == "Sports"
        assert mismatches[1].reason == "empty label"

    def test_case_insensitive_match(self) -> None:
        """Test that label spelling is normalized to the vocabulary."""
        batch = make_batch(["s0", "s1"])

        labels, mismatches = reconcile_labels(
            batch, ["  animals", "FINANCE "], self.vocabulary
        )

        assert labels == ["Animals", "Finance"]
        assert mismatches == []

    def test_fallback_label_accepted(self) -> None:
        """Test that the model may answer with the fallback label itself."""
        batch = make_batch(["s0"])

        labels, mismatches = reconcile_labels(batch, ["uncategorized"], self.vocabulary)

        assert labels == ["Uncategorized"]
        assert mismatches == []

    def test_extra_labels_ignored(self, caplog) -> None:
        """Test that surplus labels are dropped with a warning."""
        batch = make_batch(["s0", "s1"])

        with caplog.at_level(logging.WARNING):
            labels, _ = reconcile_labels(
                batch, ["Animals", "Finance", "Animals", "Finance"], self.vocabulary
            )

        assert labels == ["Animals", "Finance"]
        assert "ignoring 2 extra labels" in caplog.text


class TestBatchClassifier:
    """Test BatchClassifier functionality."""

    def test_initialization_validation(self, make_chat_client) -> None:
        """Test constructor validation."""
        with pytest.raises(ValidationError):
            BatchClassifier(make_chat_client(), batch_size=0)
        with pytest.raises(ValidationError):
            BatchClassifier(make_chat_client(), context_window=0)

    @pytest.mark.asyncio
    async def test_classify_all(self, make_chat_client) -> None:
        """Test labelling across batches, including a short reply."""
        client = make_chat_client('["Animals", "Animals"]', '["Finance"]')
        classifier = BatchClassifier(client, batch_size=2, delay_policy=NoDelay())
        recorder = ProgressRecorder()

        labels = await classifier.classify_all(
            ["Cats are mammals.", "Dogs bark loudly.", "The stock market rose today."],
            ["Animals", "Finance"],
            progress=ProgressReporter(recorder),
        )

        assert labels == ["Animals", "Animals", "Finance"]
        assert client.chat.await_count == 2
        assert recorder.percents == [10.0, 50.0]
        assert recorder.statuses[1] == "Step 2/3: Categorizing batch 2/2..."

    @pytest.mark.asyncio
    async def test_prompt_lists_vocabulary(self, make_chat_client) -> None:
        """Test the classification prompt content."""
        client = make_chat_client('["Animals", "Finance"]')
        classifier = BatchClassifier(client, batch_size=5, delay_policy=NoDelay())

        await classifier.classify_all(
            ["Cats are mammals.", "Stocks fell sharply."], ["Animals", "Finance"]
        )

        prompt = client.chat.await_args.args[0]
        assert "Animals, Finance" in prompt
        assert "1. Cats are mammals.\n2. Stocks fell sharply." in prompt
        assert "exactly 2 elements" in prompt
        assert '"Uncategorized"' in prompt

    @pytest.mark.asyncio
    async def test_request_failure(self, make_chat_client) -> None:
        """Test that a failed request aborts with the batch position."""
        client = make_chat_client('["Animals", "Animals"]', RemoteAPIError("boom", 500))
        classifier = BatchClassifier(client, batch_size=2, delay_policy=NoDelay())

        with pytest.raises(ClassificationError) as exc_info:
            await classifier.classify_all(["a1", "a2", "f1"], ["Animals", "Finance"])

        assert exc_info.value.batch_index == 1
        assert "(Batch: 2/2)" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RemoteAPIError)

    @pytest.mark.asyncio
    async def test_malformed_reply(self, make_chat_client) -> None:
        """Test that a reply with no array aborts the run."""
        client = make_chat_client("Sorry, I cannot help with that.")
        classifier = BatchClassifier(client, batch_size=2, delay_policy=NoDelay())

        with pytest.raises(ClassificationError) as exc_info:
            await classifier.classify_all(["a1", "a2"], ["Animals"])

        assert isinstance(exc_info.value.__cause__, MalformedResponseError)

    @pytest.mark.asyncio
    async def test_no_categories(self, make_chat_client) -> None:
        """Test that classification needs a vocabulary."""
        classifier = BatchClassifier(make_chat_client(), delay_policy=NoDelay())

        with pytest.raises(ValidationError):
            await classifier.classify_all(["a1"], [])

    @pytest.mark.asyncio
    async def test_cancellation_between_batches(self, make_chat_client) -> None:
        """Test that cancelling after the first batch stops before the second."""
        token = CancellationToken()
        client = make_chat_client()

        async def reply(prompt):
            token.cancel("user stopped")
            return '["Animals", "Animals"]'

        client.chat = AsyncMock(side_effect=reply)
        classifier = BatchClassifier(client, batch_size=2, delay_policy=NoDelay())

        with pytest.raises(RunCancelledError) as exc_info:
            await classifier.classify_all(
                ["a1", "a2", "a3", "a4"], ["Animals"], cancel_token=token
            )

        assert exc_info.value.batches_completed == 1
        assert client.chat.await_count == 1

    @pytest.mark.asyncio
    async def test_pause_between_batches_only(self, make_chat_client) -> None:
        """Test that the delay runs between batches and not after the last."""
        client = make_chat_client('["A"]', '["A"]', '["A"]')
        classifier = BatchClassifier(client, batch_size=1)

        with patch(
            "sentence_categorizer.classification.batch_classifier.pause",
            new_callable=AsyncMock,
        ) as mock_pause:
            await classifier.classify_all(["x1", "x2", "x3"], ["A"])

        assert mock_pause.await_count == 2
        assert [c.args[1] for c in mock_pause.await_args_list] == [1, 2]

    @pytest.mark.asyncio
    async def test_prompt_budget_exceeded(self, make_chat_client) -> None:
        """Test that an oversized prompt is rejected before sending."""
        client = make_chat_client()
        classifier = BatchClassifier(client, context_window=20, delay_policy=NoDelay())

        with pytest.raises(ValidationError, match="exceeds half of the context window"):
            await classifier.classify_all(["a fairly long sentence here."], ["A"])

        client.chat.assert_not_called()

    def test_token_counter_failure_falls_back(
        self, make_chat_client, word_count_tokens, caplog
    ) -> None:
        """Test word-count estimation when the tokenizer fails."""
        word_count_tokens.side_effect = RuntimeError("no tokenizer")
        classifier = BatchClassifier(make_chat_client())

        with caplog.at_level(logging.WARNING):
            count = classifier.count_tokens("one two three")

        assert count == 3
        assert "Token counting failed" in caplog.text
