"""
Basic usage example for the sentence categorizer.

Requires SENTCAT_API_KEY (and optionally SENTCAT_BASE_URL / SENTCAT_MODEL_NAME)
to point at an OpenAI-compatible chat-completion endpoint.
"""

import asyncio

from sentence_categorizer import (
    CategorizerConfig,
    ConfigurationError,
    ProgressEvent,
    SentenceCategorizer,
    SentenceCategorizerError,
    render_text_report,
)

DOCUMENT = """
Cats are mammals that spend most of the day asleep. Dogs bark loudly when
strangers approach the house. The stock market rose today after the central
bank held interest rates. Bond yields fell for the third week in a row.
Heavy rain is expected across the region on Sunday. Parrots can live for
more than fifty years in captivity.
"""


def print_progress(event: ProgressEvent) -> None:
    marker = "❌" if event.is_error else "⏳"
    print(f"{marker} [{event.percent:5.1f}%] {event.status}")


async def main():
    """Demonstrate a complete categorization run."""

    print("🚀 Sentence Categorizer Basic Usage Example")
    print("=" * 45)

    # Example 1: Configuration from the environment
    print("\n1. Loading configuration...")
    try:
        config = CategorizerConfig.from_env(batch_size=3, min_categories=2, max_categories=4)
        print(f"✅ Model: {config.model_name} at {config.base_url}")
        print(f"   Batch size: {config.batch_size}")
    except ConfigurationError as e:
        print(f"❌ Configuration error: {e}")
        return

    # Example 2: Categorize with progress reporting
    print("\n2. Categorizing document...")
    try:
        categorizer = SentenceCategorizer(config=config, progress_sink=print_progress)
        context = await categorizer.run(DOCUMENT)
    except SentenceCategorizerError as e:
        print(f"❌ Categorization failed: {e}")
        return

    # Example 3: Inspect the run
    print("\n3. Run summary:")
    for key, value in context.summary().items():
        print(f"   {key}: {value}")

    print()
    print(render_text_report(context.result))


if __name__ == "__main__":
    asyncio.run(main())
