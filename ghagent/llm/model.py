"""
LLM client abstraction for the agent runtime.

Supports Anthropic (Claude) and OpenAI models with retry logic
and JSON extraction from free-form responses.
"""

import json
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ghagent.config import Settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base exception for LLM-related errors."""


class ModelClass(str, Enum):
    """Model size tiers; each maps to a configured model name."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


def extract_json(text: str) -> str:
    """
    Extract JSON from an LLM response, handling markdown code blocks.

    Args:
        text: Raw response text

    Returns:
        Clean JSON string
    """
    if "```json" in text:
        start = text.find("```json") + 7
        end = text.find("```", start)
        text = text[start:end] if end != -1 else text[start:]
    elif "```" in text:
        start = text.find("```") + 3
        end = text.find("```", start)
        text = text[start:end] if end != -1 else text[start:]

    return text.strip()


def parse_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Parse the JSON object in ``text``, or return None if there is none."""
    try:
        data = json.loads(extract_json(text))
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.models = {
            ModelClass.SMALL: settings.LLM_MODEL_SMALL,
            ModelClass.MEDIUM: settings.LLM_MODEL,
            ModelClass.LARGE: settings.LLM_MODEL_LARGE,
        }

    def model_for(self, model_class: ModelClass) -> str:
        return self.models[model_class]

    @abstractmethod
    async def generate_text(
        self,
        prompt: str,
        model_class: ModelClass = ModelClass.MEDIUM,
        system_prompt: Optional[str] = None,
    ) -> str:
        """
        Generate a completion for a single user prompt.

        Args:
            prompt: Fully composed prompt
            model_class: Model tier to use
            system_prompt: Optional system instructions

        Returns:
            Raw response text

        Raises:
            LLMError: If generation fails after retries
        """


class AnthropicClient(LLMClient):
    """Anthropic (Claude) client implementation."""

    def __init__(self, settings: Settings):
        super().__init__(settings)
        from anthropic import AsyncAnthropic
        self.client = AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(LLMError),
        reraise=True,
    )
    async def generate_text(
        self,
        prompt: str,
        model_class: ModelClass = ModelClass.MEDIUM,
        system_prompt: Optional[str] = None,
    ) -> str:
        kwargs: Dict[str, Any] = {}
        if system_prompt:
            kwargs["system"] = system_prompt

        try:
            response = await self.client.messages.create(
                model=self.model_for(model_class),
                max_tokens=self.settings.LLM_MAX_TOKENS,
                temperature=self.settings.LLM_TEMPERATURE,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
        except Exception as e:
            logger.error(f"Claude API error: {e}")
            raise LLMError(f"Claude generation failed: {e}") from e

        text = response.content[0].text
        logger.debug(f"Claude response: {text[:200]}...")
        return text


class OpenAIClient(LLMClient):
    """OpenAI client implementation."""

    def __init__(self, settings: Settings):
        super().__init__(settings)
        from openai import AsyncOpenAI
        self.client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(LLMError),
        reraise=True,
    )
    async def generate_text(
        self,
        prompt: str,
        model_class: ModelClass = ModelClass.MEDIUM,
        system_prompt: Optional[str] = None,
    ) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await self.client.chat.completions.create(
                model=self.model_for(model_class),
                max_tokens=self.settings.LLM_MAX_TOKENS,
                temperature=self.settings.LLM_TEMPERATURE,
                messages=messages,
            )
        except Exception as e:
            logger.error(f"OpenAI API error: {e}")
            raise LLMError(f"OpenAI generation failed: {e}") from e

        text = response.choices[0].message.content or ""
        logger.debug(f"OpenAI response: {text[:200]}...")
        return text


def get_llm_client(settings: Settings) -> LLMClient:
    """
    Factory function to get the appropriate LLM client.

    Args:
        settings: Application settings

    Returns:
        Configured LLM client (Anthropic or OpenAI)

    Raises:
        ValueError: If provider is not supported
    """
    provider = settings.LLM_PROVIDER.lower()

    if provider == "anthropic":
        logger.info(f"Initializing Anthropic client with model {settings.LLM_MODEL}")
        return AnthropicClient(settings)
    elif provider == "openai":
        logger.info(f"Initializing OpenAI client with model {settings.LLM_MODEL}")
        return OpenAIClient(settings)
    else:
        raise ValueError(f"Unsupported LLM provider: {provider}")
