"""Closed category vocabulary with a reserved fallback label."""

import logging
from typing import Dict, Iterable, List, Optional

from ..exceptions import ValidationError
from ..models import Category

logger = logging.getLogger(__name__)


def normalize_label(label: str) -> str:
    """Case- and whitespace-insensitive key used to match labels."""
    return " ".join(label.split()).casefold()


def dedupe_categories(names: Iterable[str], exclude: Iterable[str] = ()) -> List[Category]:
    """Strip names and drop empties, duplicates and excluded labels, keeping first spelling."""
    seen = {normalize_label(name) for name in exclude}
    categories: List[Category] = []
    for name in names:
        if not isinstance(name, str):
            continue
        cleaned = " ".join(name.split())
        key = normalize_label(cleaned)
        if not key or key in seen:
            continue
        seen.add(key)
        categories.append(cleaned)
    return categories


class CategoryVocabulary:
    """
    The closed set of discovered categories plus the fallback label.

    Once built, ``resolve`` is the only way a free-text label becomes a
    category, and it never yields anything outside this set.
    """

    def __init__(self, categories: Iterable[str], fallback_category: str) -> None:
        if not fallback_category or not fallback_category.strip():
            raise ValidationError(
                "fallback_category cannot be empty", field="fallback_category"
            )

        self.fallback_category = fallback_category.strip()
        self.categories = dedupe_categories(categories, exclude=[self.fallback_category])
        self._lookup: Dict[str, Category] = {
            normalize_label(name): name for name in self.categories
        }
        self._lookup[normalize_label(self.fallback_category)] = self.fallback_category

    @property
    def all_labels(self) -> List[Category]:
        """Discovered categories followed by the fallback label."""
        return self.categories + [self.fallback_category]

    def resolve(self, label: Optional[str]) -> Optional[Category]:
        """Canonical category for ``label``, or None when it is out of vocabulary."""
        if not label:
            return None
        return self._lookup.get(normalize_label(label))

    def __contains__(self, label: object) -> bool:
        return isinstance(label, str) and self.resolve(label) is not None

    def __len__(self) -> int:
        return len(self.categories)
