"""Anthropic Claude provider."""

import logging
import os
from typing import Any

from src.llm.base import LLMProvider

logger = logging.getLogger(__name__)

_MAX_TOKENS = 8192


class AnthropicProvider(LLMProvider):
    """Provider using the Anthropic Messages API (async client)."""

    @property
    def provider_id(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "claude-sonnet-4-20250514"

    @property
    def env_var(self) -> str:
        return "ANTHROPIC_API_KEY"

    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
        temperature: float | None = None,
    ) -> str:
        api_key = os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            msg = "ANTHROPIC_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            import anthropic
        except ImportError:
            msg = (
                "anthropic is required for the Anthropic provider. "
                "Install with: pip install 'notice-drafting-agent[anthropic]'"
            )
            raise ImportError(msg) from None

        use_model = model or self.default_model
        kwargs: dict[str, Any] = {
            "model": use_model,
            "max_tokens": _MAX_TOKENS,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system is not None:
            kwargs["system"] = system
        if temperature is not None:
            kwargs["temperature"] = temperature

        logger.info("Sending prompt to Anthropic API (%s)...", use_model)
        client = anthropic.AsyncAnthropic(api_key=api_key)
        message = await client.messages.create(**kwargs)

        return message.content[0].text  # type: ignore[union-attr,no-any-return]
