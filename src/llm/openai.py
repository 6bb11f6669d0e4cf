"""OpenAI provider."""

import logging
import os
from typing import Any

from src.llm.base import LLMProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """Provider using the OpenAI chat completions API (async client)."""

    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    @property
    def env_var(self) -> str:
        return "OPENAI_API_KEY"

    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
        temperature: float | None = None,
    ) -> str:
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            msg = "OPENAI_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            import openai
        except ImportError:
            msg = (
                "openai is required for the OpenAI provider. "
                "Install with: pip install 'notice-drafting-agent[openai]'"
            )
            raise ImportError(msg) from None

        use_model = model or self.default_model
        messages: list[dict[str, str]] = []
        if system is not None:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        kwargs: dict[str, Any] = {"model": use_model, "messages": messages}
        if temperature is not None:
            kwargs["temperature"] = temperature

        logger.info("Sending prompt to OpenAI API (%s)...", use_model)
        client = openai.AsyncOpenAI(api_key=api_key)
        response = await client.chat.completions.create(**kwargs)

        return response.choices[0].message.content or ""
