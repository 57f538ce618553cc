"""
Chat-completion client for the sentence categorizer.

Sends a single user prompt to an OpenAI-compatible endpoint through a
Pydantic AI agent with plain string output, and returns the assistant's
reply text untouched. Parsing the reply is the response parser's job.
"""

import logging
import time
from typing import Optional

from openai import APIConnectionError, AsyncOpenAI
from pydantic import BaseModel, Field
from pydantic_ai import Agent
from pydantic_ai.exceptions import (
    ModelAPIError,
    ModelHTTPError,
    UnexpectedModelBehavior,
)
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.settings import ModelSettings

from ..config import DEFAULT_BASE_URL, DEFAULT_MODEL_NAME, CategorizerConfig
from ..exceptions import ConfigurationError, RemoteAPIError

logger = logging.getLogger(__name__)


class ChatSettings(BaseModel):
    """Schema for chat request configuration."""

    model_name: str = Field(description="Name of the model to use", min_length=1)
    temperature: float = Field(
        description="Temperature for generation", ge=0.0, le=2.0, default=0.3
    )
    max_tokens: int = Field(description="Maximum tokens for completion", gt=0, default=2000)
    timeout: float = Field(description="Timeout in seconds", gt=0, default=60.0)

    def to_model_settings(self, max_tokens: Optional[int] = None) -> ModelSettings:
        return ModelSettings(
            max_tokens=max_tokens or self.max_tokens,
            temperature=self.temperature,
            timeout=self.timeout,
        )


class ChatClient:
    """
    Thin async client around a chat-completion endpoint.

    Requests carry a bearer token and are never retried; an HTTP error or a
    transport failure surfaces as ``RemoteAPIError``.
    """

    def __init__(
        self,
        api_key: str = "",
        base_url: str = DEFAULT_BASE_URL,
        settings: Optional[ChatSettings] = None,
        model: Optional[Model] = None,
    ) -> None:
        """
        Initialize chat client.

        Args:
            api_key: Bearer token for the endpoint
            base_url: Base URL of the OpenAI-compatible API
            settings: Request settings (model name, temperature, max_tokens, timeout)
            model: Pre-built Pydantic AI model; skips endpoint configuration when given
        """
        self.settings = settings or ChatSettings(model_name=DEFAULT_MODEL_NAME)
        self.base_url = base_url

        if model is None:
            if not api_key or not api_key.strip():
                raise ConfigurationError(
                    "api_key cannot be empty",
                    parameter="api_key",
                    suggested_fix="Set SENTCAT_API_KEY or pass api_key explicitly",
                )
            model = self._build_model(api_key.strip())

        self.agent: Agent[None, str] = Agent(model, output_type=str)

    def _build_model(self, api_key: str) -> Model:
        client = AsyncOpenAI(
            api_key=api_key,
            base_url=self.base_url,
            timeout=self.settings.timeout,
            max_retries=0,
        )
        return OpenAIChatModel(
            self.settings.model_name,
            provider=OpenAIProvider(openai_client=client),
        )

    @classmethod
    def from_config(cls, config: CategorizerConfig) -> "ChatClient":
        settings = ChatSettings(
            model_name=config.model_name,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.request_timeout,
        )
        return cls(api_key=config.api_key, base_url=config.base_url, settings=settings)

    @property
    def model_name(self) -> str:
        return self.settings.model_name

    async def chat(self, prompt: str, max_tokens: Optional[int] = None) -> str:
        """
        Send one user message and return the assistant's reply text.

        Args:
            prompt: User message content
            max_tokens: Per-call override of the completion budget

        Returns:
            Raw reply text (possibly empty)

        Raises:
            RemoteAPIError: On a non-success status or transport failure
        """
        start_time = time.time()
        logger.debug(f"Sending prompt to {self.model_name} ({len(prompt)} chars)")

        try:
            result = await self.agent.run(
                prompt, model_settings=self.settings.to_model_settings(max_tokens)
            )
        except ModelHTTPError as e:
            logger.error(f"Chat request failed with status {e.status_code}: {e.body}")
            raise RemoteAPIError(
                f"Request to {e.model_name} failed",
                status_code=e.status_code,
                body=e.body,
            ) from e
        except ModelAPIError as e:
            logger.error(f"Cannot reach {self.base_url}: {e.message}")
            raise RemoteAPIError(f"Cannot reach {self.base_url}: {e.message}") from e
        except APIConnectionError as e:
            logger.error(f"Cannot reach {self.base_url}: {e}")
            raise RemoteAPIError(f"Cannot reach {self.base_url}: {e}") from e
        except UnexpectedModelBehavior as e:
            logger.error(f"Unexpected response from {self.model_name}: {e}")
            raise RemoteAPIError(
                f"Unexpected response from {self.model_name}: {e.message}",
                body=e.body,
            ) from e

        latency_ms = int((time.time() - start_time) * 1000)
        content = result.output or ""
        logger.debug(f"Received {len(content)} chars in {latency_ms}ms")
        return content
