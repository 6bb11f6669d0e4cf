"""Google Gemini provider (google-genai SDK)."""

import logging
import os

from src.llm.base import LLMProvider

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """Provider using the Google Gemini API through the async google-genai client."""

    @property
    def provider_id(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return os.environ.get("GEMINI_MODEL_NAME") or "gemini-2.5-flash"

    @property
    def env_var(self) -> str:
        return "GEMINI_API_KEY"

    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
        temperature: float | None = None,
    ) -> str:
        api_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
        if not api_key:
            msg = "GEMINI_API_KEY (or GOOGLE_API_KEY) environment variable is required"
            raise ValueError(msg)

        try:
            from google import genai
            from google.genai import types as genai_types
        except ImportError:
            msg = (
                "google-genai is required for the Gemini provider. "
                "Install with: pip install google-genai"
            )
            raise ImportError(msg) from None

        use_model = model or self.default_model

        logger.info("Sending prompt to Gemini API (%s)...", use_model)
        client = genai.Client(api_key=api_key)
        response = await client.aio.models.generate_content(
            model=use_model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(
                system_instruction=system,
                temperature=temperature,
            ),
        )

        text = response.text
        if not text:
            msg = f"Gemini returned an empty response ({use_model})"
            raise ValueError(msg)
        return text
