"""Command-line entry point: categorize the sentences of a plain-text document."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .aggregation.report import render_text_report
from .config import CategorizerConfig
from .core import SentenceCategorizer
from .exceptions import SentenceCategorizerError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sentence-categorizer",
        description="Split a document into sentences and sort them into model-discovered categories.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Unset options fall back to SENTCAT_* environment variables.",
    )
    parser.add_argument("input", help="Plain-text document to categorize ('-' for stdin)")
    parser.add_argument(
        "-o", "--output", type=Path, help="Write the result here instead of stdout"
    )
    parser.add_argument(
        "--format",
        choices=("json", "text"),
        default="json",
        help="Output as JSON interchange (default) or a plain-text report",
    )
    parser.add_argument("--api-key", help="Bearer token (default: env SENTCAT_API_KEY)")
    parser.add_argument("--base-url", help="Chat-completion API base URL")
    parser.add_argument("--model", dest="model_name", help="Model name")
    parser.add_argument("--batch-size", type=int, help="Sentences per request")
    parser.add_argument(
        "--min-length",
        dest="min_sentence_length",
        type=int,
        help="Sentences must be longer than this many characters",
    )
    parser.add_argument(
        "--sample-size",
        dest="discovery_sample_size",
        type=int,
        help="Leading sentences shown to the model for category discovery",
    )
    parser.add_argument(
        "--delay",
        dest="batch_delay_seconds",
        type=float,
        help="Seconds to pause between batches",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = CategorizerConfig.from_env(
            api_key=args.api_key,
            base_url=args.base_url,
            model_name=args.model_name,
            batch_size=args.batch_size,
            min_sentence_length=args.min_sentence_length,
            discovery_sample_size=args.discovery_sample_size,
            batch_delay_seconds=args.batch_delay_seconds,
        )
        text = _read_input(args.input)
        result = SentenceCategorizer(config=config).categorize_sync(text)
    except (SentenceCategorizerError, OSError, UnicodeDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    rendered = result.to_json() if args.format == "json" else render_text_report(result)
    if args.output:
        args.output.write_text(rendered, encoding="utf-8")
        logger.info(f"Wrote {result.total_sentences} sentences to {args.output}")
    else:
        sys.stdout.write(rendered)
        if not rendered.endswith("\n"):
            sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
