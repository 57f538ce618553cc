"""
Tests for pacing, cancellation and the category vocabulary.
"""

from unittest.mock import AsyncMock, patch

import pytest

from sentence_categorizer.classification.pacing import (
    CancellationToken,
    ExponentialBackoff,
    FixedDelay,
    NoDelay,
    pause,
)
from sentence_categorizer.classification.vocabulary import (
    CategoryVocabulary,
    dedupe_categories,
    normalize_label,
)
from sentence_categorizer.exceptions import RunCancelledError, ValidationError


class TestDelayPolicies:
    """Test delay policies."""

    def test_no_delay(self) -> None:
        assert NoDelay().delay_for(5) == 0.0

    def test_fixed_delay(self) -> None:
        """Test the fixed delay and its validation."""
        assert FixedDelay().delay_for(1) == 1.0
        assert FixedDelay(0.25).delay_for(7) == 0.25

        with pytest.raises(ValidationError):
            FixedDelay(-1.0)

    def test_exponential_backoff(self) -> None:
        """Test growth and the cap."""
        policy = ExponentialBackoff(initial_seconds=0.5, factor=2.0, max_seconds=3.0)

        assert [policy.delay_for(n) for n in range(1, 6)] == [0.5, 1.0, 2.0, 3.0, 3.0]

    def test_exponential_backoff_validation(self) -> None:
        with pytest.raises(ValidationError):
            ExponentialBackoff(factor=0.5)
        with pytest.raises(ValidationError):
            ExponentialBackoff(initial_seconds=-1)

    @pytest.mark.asyncio
    async def test_pause_sleeps_for_policy_delay(self) -> None:
        """Test that pause sleeps only for a positive delay."""
        with patch(
            "sentence_categorizer.classification.pacing.asyncio.sleep",
            new_callable=AsyncMock,
        ) as mock_sleep:
            await pause(FixedDelay(1.5), 1)
            await pause(NoDelay(), 2)

        mock_sleep.assert_awaited_once_with(1.5)


class TestCancellationToken:
    """Test cooperative cancellation."""

    def test_not_cancelled(self) -> None:
        token = CancellationToken()

        assert not token.cancelled
        token.raise_if_cancelled()

    def test_cancelled(self) -> None:
        """Test that a cancelled token raises with its reason."""
        token = CancellationToken()
        token.cancel("user stopped")

        with pytest.raises(RunCancelledError) as exc_info:
            token.raise_if_cancelled(batches_completed=3)

        assert token.cancelled
        assert token.reason == "user stopped"
        assert exc_info.value.batches_completed == 3
        assert "user stopped" in str(exc_info.value)


class TestCategoryVocabulary:
    """Test vocabulary matching."""

    def test_normalize_label(self) -> None:
        assert normalize_label("  Animal   Welfare ") == "animal welfare"

    def test_dedupe_categories(self) -> None:
        """Test that the first spelling wins and excluded names are removed."""
        names = ["Animals", "ANIMALS", " Finance ", "", None, "Other"]

        assert dedupe_categories(names, exclude=["other"]) == ["Animals", "Finance"]

    def test_resolve(self) -> None:
        """Test canonical spelling lookup."""
        vocabulary = CategoryVocabulary(["Animals", "Finance"], "Uncategorized")

        assert vocabulary.resolve("finance") == "Finance"
        assert vocabulary.resolve("UNCATEGORIZED") == "Uncategorized"
        assert vocabulary.resolve("Sports") is None
        assert vocabulary.resolve("") is None
        assert "animals" in vocabulary
        assert len(vocabulary) == 2
        assert vocabulary.all_labels == ["Animals", "Finance", "Uncategorized"]

    def test_fallback_removed_from_categories(self) -> None:
        vocabulary = CategoryVocabulary(["Uncategorized", "Animals"], "Uncategorized")

        assert vocabulary.categories == ["Animals"]

    def test_empty_fallback_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CategoryVocabulary(["Animals"], " ")
