"""
Recovery of label arrays from free-text model responses.

The model is asked for a JSON array of strings but often wraps it in prose,
quotes inconsistently, or emits control characters. Recovery runs as an
ordered pipeline of named strategies:

1. extraction strategies propose candidate ``[...]`` substrings,
2. sanitizers clean each candidate,
3. decoders turn the cleaned candidate into a Python list.

The first candidate that decodes to a list wins. Each strategy is a plain
function so it can be tested and extended on its own.
"""

import ast
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, List, Optional, Tuple, Union

from ..exceptions import MalformedResponseError

logger = logging.getLogger(__name__)

# Text preceding one of these markers is discarded by the secondary pass.
ARRAY_MARKER_PATTERN = re.compile(r"\barray\s*:", re.IGNORECASE)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_LINE_BREAKS = re.compile(r"\s*[\r\n\t]+\s*")
_TRAILING_COMMA = re.compile(r",\s*\]")
_QUOTE_TRANSLATION = str.maketrans(
    {
        "“": '"',
        "”": '"',
        "„": '"',
        "‘": "'",
        "’": "'",
    }
)

# Keys checked when the model returns objects instead of bare labels.
_LABEL_KEYS = ("category", "label", "name")


@dataclass(frozen=True)
class ParseOk:
    """A recovered label array."""

    labels: List[str]
    strategy: str
    expected_count: Optional[int] = None

    ok = True

    @property
    def count_mismatch(self) -> bool:
        return self.expected_count is not None and len(self.labels) != self.expected_count


@dataclass(frozen=True)
class ParseFailure:
    """No array could be recovered; keeps the raw response for diagnosis."""

    reason: str
    raw_text: str

    ok = False

    def to_error(self) -> MalformedResponseError:
        return MalformedResponseError(
            "Could not recover a label array from the model response",
            raw_text=self.raw_text,
            reason=self.reason,
        )


ParseResult = Union[ParseOk, ParseFailure]


@dataclass(frozen=True)
class ExtractionStrategy:
    name: str
    extract: Callable[[str], Iterable[str]]


@dataclass(frozen=True)
class Sanitizer:
    name: str
    apply: Callable[[str], str]


@dataclass(frozen=True)
class Decoder:
    name: str
    decode: Callable[[str], Any]
    errors: Tuple[type, ...]


def _match_bracket(text: str, start: int, quote_aware: bool) -> int:
    """Return the index of the ``]`` closing ``text[start]``, or -1."""
    depth = 0
    in_string = False
    escaped = False

    for i in range(start, len(text)):
        char = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if quote_aware and char == '"':
            in_string = True
        elif char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return i

    return -1


def balanced_arrays(text: str) -> Iterator[str]:
    """Yield every balanced ``[...]`` substring, earliest opening bracket first.

    Brackets inside double-quoted strings are ignored; when quoting is too
    broken for that to balance, a plain depth count is used instead.
    """
    start = text.find("[")
    while start >= 0:
        end = _match_bracket(text, start, quote_aware=True)
        if end < 0:
            end = _match_bracket(text, start, quote_aware=False)
        if end >= 0:
            yield text[start : end + 1]
        start = text.find("[", start + 1)


def arrays_after_marker(text: str) -> Iterator[str]:
    """Discard everything up to the last ``array:`` marker and rescan.

    If the remainder opens an array that never closes (a truncated response),
    the remainder is closed with a ``]`` so decoding can still be attempted.
    """
    markers = list(ARRAY_MARKER_PATTERN.finditer(text))
    if not markers:
        return

    remainder = text[markers[-1].end() :]
    found = False
    for candidate in balanced_arrays(remainder):
        found = True
        yield candidate

    if not found:
        start = remainder.find("[")
        if start >= 0:
            yield remainder[start:].rstrip().rstrip(",") + "]"


def strip_control_characters(candidate: str) -> str:
    return _CONTROL_CHARS.sub("", candidate)


def collapse_newlines(candidate: str) -> str:
    return _LINE_BREAKS.sub(" ", candidate)


def remove_trailing_commas(candidate: str) -> str:
    return _TRAILING_COMMA.sub("]", candidate)


def normalize_quotes(candidate: str) -> str:
    return candidate.translate(_QUOTE_TRANSLATION)


EXTRACTION_STRATEGIES: Tuple[ExtractionStrategy, ...] = (
    ExtractionStrategy("first_balanced_array", balanced_arrays),
    ExtractionStrategy("after_array_marker", arrays_after_marker),
)

SANITIZERS: Tuple[Sanitizer, ...] = (
    Sanitizer("strip_control_characters", strip_control_characters),
    Sanitizer("collapse_newlines", collapse_newlines),
    Sanitizer("remove_trailing_commas", remove_trailing_commas),
    Sanitizer("normalize_quotes", normalize_quotes),
)

DECODERS: Tuple[Decoder, ...] = (
    Decoder("json", json.loads, (json.JSONDecodeError,)),
    # Single-quoted, Python-style lists
    Decoder(
        "literal",
        ast.literal_eval,
        (ValueError, SyntaxError, TypeError, MemoryError, RecursionError),
    ),
)


def sanitize(candidate: str, sanitizers: Iterable[Sanitizer] = SANITIZERS) -> str:
    """Run every sanitizer over the candidate, in order."""
    for sanitizer in sanitizers:
        candidate = sanitizer.apply(candidate)
    return candidate


def _coerce_label(item: Any) -> Optional[str]:
    """Label carried by one array item, or None when the item is not a label."""
    if isinstance(item, str):
        return item.strip()
    if isinstance(item, dict):
        for key in _LABEL_KEYS:
            value = item.get(key)
            if isinstance(value, str):
                return value.strip()
    return None


def _decode(candidate: str) -> Optional[List[str]]:
    """Decode a candidate into labels; arrays holding anything but labels are rejected."""
    for decoder in DECODERS:
        try:
            value = decoder.decode(candidate)
        except decoder.errors:
            continue
        if not isinstance(value, (list, tuple)):
            continue
        labels = [_coerce_label(item) for item in value]
        if any(label is None for label in labels):
            continue
        return labels
    return None


def try_parse_label_array(
    raw_text: str,
    expected_count: Optional[int] = None,
    strategies: Iterable[ExtractionStrategy] = EXTRACTION_STRATEGIES,
) -> ParseResult:
    """
    Recover an array of strings from a model response.

    Args:
        raw_text: The assistant's reply, verbatim
        expected_count: Number of labels the caller expects, if known
        strategies: Extraction strategies to try, in order of preference

    Returns:
        ``ParseOk`` with the labels, or ``ParseFailure`` with the reason
    """
    if not isinstance(raw_text, str):
        return ParseFailure(
            reason=f"expected string response, got {type(raw_text).__name__}",
            raw_text=repr(raw_text),
        )

    saw_candidate = False
    for strategy in strategies:
        for candidate in strategy.extract(raw_text):
            saw_candidate = True
            decoded = _decode(sanitize(candidate))
            if decoded is None:
                logger.debug(
                    f"Candidate from {strategy.name} did not decode to labels: {candidate!r}"
                )
                continue

            result = ParseOk(
                labels=decoded,
                strategy=strategy.name,
                expected_count=expected_count,
            )
            if result.count_mismatch:
                logger.warning(
                    f"Label count mismatch: expected {expected_count}, "
                    f"got {len(result.labels)}"
                )
            return result

    if not saw_candidate:
        return ParseFailure(reason="no bracketed array found", raw_text=raw_text)
    return ParseFailure(reason="no candidate array could be decoded", raw_text=raw_text)


def parse_label_array(raw_text: str, expected_count: Optional[int] = None) -> List[str]:
    """
    Recover an array of strings from a model response.

    A length different from ``expected_count`` is logged and returned as-is;
    reconciling it is the caller's job.

    Raises:
        MalformedResponseError: If no array can be recovered
    """
    result = try_parse_label_array(raw_text, expected_count)
    if isinstance(result, ParseFailure):
        raise result.to_error()
    return result.labels
