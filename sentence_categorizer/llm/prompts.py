"""Prompt builders for category discovery and batch classification."""

from typing import Sequence

from ..exceptions import ValidationError


def build_discovery_prompt(
    *,
    sample_sentences: Sequence[str],
    min_categories: int,
    max_categories: int,
) -> str:
    """Create the prompt asking the model to propose a category vocabulary."""

    if not sample_sentences:
        raise ValidationError(
            "Cannot build a discovery prompt without sample sentences",
            field="sample_sentences",
        )

    sample_text = "\n".join(sample_sentences)

    prompt = f"""Analyze these sample sentences from a document and identify {min_categories}-{max_categories} main categories that cover all topics. Return ONLY a JSON array of category names, nothing else.

Sample sentences:
{sample_text}

Return format: ["Category1", "Category2", "Category3", ...]"""

    return prompt


def build_classification_prompt(
    *,
    sentences: Sequence[str],
    categories: Sequence[str],
    fallback_category: str,
) -> str:
    """Create the prompt asking for one category per numbered sentence."""

    if not sentences:
        raise ValidationError(
            "Cannot build a classification prompt without sentences",
            field="sentences",
        )
    if not categories:
        raise ValidationError(
            "Cannot build a classification prompt without categories",
            field="categories",
        )

    numbered = "\n".join(f"{i}. {sentence}" for i, sentence in enumerate(sentences, 1))

    prompt = f"""Categorize each sentence into ONE of these categories: {", ".join(categories)}.
If a sentence does not clearly fit any of them, use "{fallback_category}".

Sentences:
{numbered}

Return ONLY a JSON array with exactly {len(sentences)} elements, where each element is the category name for the corresponding sentence number, in order. Format: ["Category", "Category", ...]"""

    return prompt
