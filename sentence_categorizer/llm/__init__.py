"""
LLM interaction module for the sentence categorizer.

This module provides the chat-completion client, prompt builders and the
parser that recovers label arrays from free-text replies.
"""

from .chat_client import ChatClient, ChatSettings
from .prompts import build_classification_prompt, build_discovery_prompt
from .response_parser import (
    DECODERS,
    EXTRACTION_STRATEGIES,
    SANITIZERS,
    ExtractionStrategy,
    ParseFailure,
    ParseOk,
    ParseResult,
    Sanitizer,
    parse_label_array,
    try_parse_label_array,
)

__all__ = [
    # Client
    "ChatClient",
    "ChatSettings",
    # Prompts
    "build_discovery_prompt",
    "build_classification_prompt",
    # Parsing
    "parse_label_array",
    "try_parse_label_array",
    "ParseOk",
    "ParseFailure",
    "ParseResult",
    "ExtractionStrategy",
    "Sanitizer",
    "EXTRACTION_STRATEGIES",
    "SANITIZERS",
    "DECODERS",
]
