"""
Shared fixtures for sentence categorizer tests.
"""

from typing import List
from unittest.mock import AsyncMock, Mock, patch

import pytest

from sentence_categorizer.config import CategorizerConfig


@pytest.fixture(autouse=True)
def word_count_tokens():
    """Keep prompt budgeting off the real tokenizer."""
    with patch(
        "sentence_categorizer.classification.batch_classifier.token_counter",
        side_effect=lambda model, messages: sum(
            len(m["content"].split()) for m in messages
        ),
    ) as mock_counter:
        yield mock_counter


@pytest.fixture
def make_chat_client():
    """Build a chat client stub whose replies are returned in order."""

    def _make(*replies: object) -> Mock:
        client = Mock()
        client.chat = AsyncMock(side_effect=list(replies))
        return client

    return _make


@pytest.fixture
def test_config() -> CategorizerConfig:
    return CategorizerConfig(
        api_key="test-key",
        batch_size=2,
        batch_delay_seconds=0.0,
        min_sentence_length=10,
    )


@pytest.fixture
def sample_sentences() -> List[str]:
    return [
        "Cats are mammals.",
        "Dogs bark loudly.",
        "The stock market rose today.",
    ]
