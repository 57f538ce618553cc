"""Configuration management and validation for the sentence categorizer."""

import os
from dataclasses import dataclass
from typing import Any, Dict, Tuple, Union

from .exceptions import ConfigurationError

DEFAULT_BASE_URL = "https://api.longcat.chat/openai/v1"
DEFAULT_MODEL_NAME = "LongCat-Flash-Chat"
DEFAULT_FALLBACK_CATEGORY = "Uncategorized"

MAX_BATCH_SIZE = 100

# Environment variable -> attribute name, or (attribute name, type)
ENV_MAPPINGS: Dict[str, Union[str, Tuple[str, type]]] = {
    "SENTCAT_API_KEY": "api_key",
    "SENTCAT_BASE_URL": "base_url",
    "SENTCAT_MODEL_NAME": "model_name",
    "SENTCAT_MAX_TOKENS": ("max_tokens", int),
    "SENTCAT_TEMPERATURE": ("temperature", float),
    "SENTCAT_MIN_SENTENCE_LENGTH": ("min_sentence_length", int),
    "SENTCAT_BATCH_SIZE": ("batch_size", int),
    "SENTCAT_SAMPLE_SIZE": ("discovery_sample_size", int),
    "SENTCAT_BATCH_DELAY": ("batch_delay_seconds", float),
}


@dataclass
class CategorizerConfig:
    """Configuration class with comprehensive validation."""

    # LLM settings
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    model_name: str = DEFAULT_MODEL_NAME
    max_tokens: int = 2000
    temperature: float = 0.3
    request_timeout: float = 60.0
    context_window: int = 128_000

    # Segmentation settings
    min_sentence_length: int = 10

    # Discovery settings
    discovery_sample_size: int = 100
    min_categories: int = 5
    max_categories: int = 10
    fallback_category: str = DEFAULT_FALLBACK_CATEGORY

    # Processing settings
    batch_size: int = 10
    batch_delay_seconds: float = 1.0

    def __post_init__(self) -> None:
        """Validate configuration parameters after initialization."""
        self._validate_all_parameters()

    def _validate_all_parameters(self) -> None:
        """Run all validation checks."""
        self._validate_llm_settings()
        self._validate_segmentation()
        self._validate_category_range()
        self._validate_batching()

    def _validate_llm_settings(self) -> None:
        """Validate endpoint and model settings."""
        if not self.base_url or not self.base_url.strip():
            raise ConfigurationError(
                "base_url cannot be empty",
                parameter="base_url",
                suggested_fix="Provide the chat-completion endpoint base URL",
            )

        if not self.model_name or not self.model_name.strip():
            raise ConfigurationError(
                "model_name cannot be empty",
                parameter="model_name",
                suggested_fix=f"Specify a model name (e.g., '{DEFAULT_MODEL_NAME}')",
            )

        if self.max_tokens <= 0:
            raise ConfigurationError(
                f"max_tokens ({self.max_tokens}) must be a positive integer",
                parameter="max_tokens",
            )

        if not 0.0 <= self.temperature <= 2.0:
            raise ConfigurationError(
                f"temperature ({self.temperature}) must be between 0 and 2",
                parameter="temperature",
            )

        if self.request_timeout <= 0:
            raise ConfigurationError(
                f"request_timeout ({self.request_timeout}) must be positive",
                parameter="request_timeout",
            )

        if self.context_window <= 0:
            raise ConfigurationError(
                f"context_window ({self.context_window}) must be positive",
                parameter="context_window",
            )

    def _validate_segmentation(self) -> None:
        if self.min_sentence_length < 0:
            raise ConfigurationError(
                f"min_sentence_length ({self.min_sentence_length}) cannot be negative",
                parameter="min_sentence_length",
                suggested_fix="Use a threshold such as 10 or 20 characters",
            )

    def _validate_category_range(self) -> None:
        """Validate discovery sample and vocabulary range."""
        if self.discovery_sample_size < 1:
            raise ConfigurationError(
                f"discovery_sample_size ({self.discovery_sample_size}) must be at least 1",
                parameter="discovery_sample_size",
            )

        if self.min_categories < 1:
            raise ConfigurationError(
                f"min_categories ({self.min_categories}) must be at least 1",
                parameter="min_categories",
            )

        if self.max_categories < self.min_categories:
            raise ConfigurationError(
                f"max_categories ({self.max_categories}) must be greater than or equal to "
                f"min_categories ({self.min_categories})",
                parameter="max_categories",
                suggested_fix="Ensure min_categories <= max_categories",
            )

        if not self.fallback_category or not self.fallback_category.strip():
            raise ConfigurationError(
                "fallback_category cannot be empty",
                parameter="fallback_category",
                suggested_fix=f"Use a reserved label such as '{DEFAULT_FALLBACK_CATEGORY}'",
            )

    def _validate_batching(self) -> None:
        """Validate batch size and pacing."""
        if not (0 < self.batch_size <= MAX_BATCH_SIZE):
            raise ConfigurationError(
                f"batch_size ({self.batch_size}) must be greater than 0 and less than "
                f"or equal to {MAX_BATCH_SIZE}",
                parameter="batch_size",
                suggested_fix=f"Set batch_size to a value between 1 and {MAX_BATCH_SIZE}",
            )

        if self.batch_delay_seconds < 0:
            raise ConfigurationError(
                f"batch_delay_seconds ({self.batch_delay_seconds}) cannot be negative",
                parameter="batch_delay_seconds",
            )

    @classmethod
    def from_env(cls, **overrides: Any) -> "CategorizerConfig":
        """Build a configuration from SENTCAT_* environment variables.

        Explicit keyword overrides take precedence over the environment.
        """
        values: Dict[str, Any] = {}

        for env_var, config_attr in ENV_MAPPINGS.items():
            env_value = os.getenv(env_var)
            if not env_value:
                continue
            if isinstance(config_attr, tuple):
                attr_name, attr_type = config_attr
                try:
                    values[attr_name] = attr_type(env_value)
                except ValueError:
                    raise ConfigurationError(
                        f"Invalid value for {env_var}: {env_value}",
                        parameter=attr_name,
                        suggested_fix=f"Provide a valid {attr_type.__name__} value",
                    )
            else:
                values[config_attr] = env_value

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
