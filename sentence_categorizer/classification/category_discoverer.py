"""
Category vocabulary discovery.

Derives the closed category vocabulary from a prefix sample of the
document's sentences with a single chat-completion request.
"""

import logging
from typing import List, Optional, Sequence

from ..exceptions import CategoryDiscoveryError, ValidationError
from ..llm.chat_client import ChatClient
from ..llm.prompts import build_discovery_prompt
from ..llm.response_parser import ParseFailure, try_parse_label_array
from ..models import Category, Sentence
from ..progress import DISCOVERY_START, ProgressReporter
from .vocabulary import dedupe_categories

logger = logging.getLogger(__name__)


class CategoryDiscoverer:
    """
    Asks the model for a category vocabulary covering a sample of sentences.

    The sample is always the first ``sample_size`` sentences so runs over the
    same document send the same prompt.
    """

    def __init__(
        self,
        chat_client: ChatClient,
        min_categories: int = 5,
        max_categories: int = 10,
        fallback_category: str = "Uncategorized",
    ) -> None:
        """
        Initialize discoverer.

        Args:
            chat_client: Client used for the discovery request
            min_categories: Lower end of the target vocabulary size stated in the prompt
            max_categories: Upper end of the target vocabulary size stated in the prompt
            fallback_category: Reserved label, removed from the discovered vocabulary
        """
        if min_categories < 1 or max_categories < min_categories:
            raise ValidationError(
                f"Invalid category range {min_categories}-{max_categories}",
                field="max_categories",
                value=max_categories,
            )

        self.chat_client = chat_client
        self.min_categories = min_categories
        self.max_categories = max_categories
        self.fallback_category = fallback_category

    async def discover(
        self,
        sentences: Sequence[Sentence],
        sample_size: int,
        progress: Optional[ProgressReporter] = None,
    ) -> List[Category]:
        """
        Derive the category vocabulary from the first ``sample_size`` sentences.

        Args:
            sentences: Full sentence sequence
            sample_size: Number of leading sentences to show the model
            progress: Optional reporter notified before the request is sent

        Returns:
            Discovered category names, de-duplicated, in the model's order

        Raises:
            CategoryDiscoveryError: If no array can be parsed or it holds no categories
            RemoteAPIError: If the request itself fails
        """
        if sample_size < 1:
            raise ValidationError(
                "sample_size must be at least 1", field="sample_size", value=sample_size
            )
        if not sentences:
            raise ValidationError("Cannot discover categories without sentences")

        sample = list(sentences[:sample_size])

        if progress is not None:
            progress.update(
                DISCOVERY_START, "Step 1/3: Identifying categories from document..."
            )

        prompt = build_discovery_prompt(
            sample_sentences=sample,
            min_categories=self.min_categories,
            max_categories=self.max_categories,
        )
        logger.debug(f"Discovery prompt:\n{prompt}")

        raw_response = await self.chat_client.chat(prompt)
        logger.debug(f"Discovery response: {raw_response!r}")

        parsed = try_parse_label_array(raw_response)
        if isinstance(parsed, ParseFailure):
            raise CategoryDiscoveryError(
                f"Failed to parse categories from AI response: {parsed.reason}",
                sample_size=len(sample),
            ) from parsed.to_error()

        categories = dedupe_categories(parsed.labels, exclude=[self.fallback_category])
        if not categories:
            raise CategoryDiscoveryError(
                "Model returned no usable categories", sample_size=len(sample)
            )

        if not self.min_categories <= len(categories) <= self.max_categories:
            logger.warning(
                f"Discovered {len(categories)} categories, outside the requested "
                f"range {self.min_categories}-{self.max_categories}"
            )

        logger.info(f"Discovered {len(categories)} categories: {', '.join(categories)}")
        return categories
