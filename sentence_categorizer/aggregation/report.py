"""Plain-text rendering of a categorized result."""

from typing import List

from ..models import CategorizedResult


def render_text_report(
    result: CategorizedResult,
    title: str = "Categorized Sentences",
    include_empty: bool = False,
) -> str:
    """Render ``<Category> (<n> sentences)`` sections followed by their sentences."""
    lines: List[str] = [title, "=" * len(title), ""]

    for category, sentences in result.items():
        if not sentences and not include_empty:
            continue
        noun = "sentence" if len(sentences) == 1 else "sentences"
        header = f"{category} ({len(sentences)} {noun})"
        lines.append(header)
        lines.append("-" * len(header))
        for sentence in sentences:
            lines.append(f"  - {sentence}")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"
