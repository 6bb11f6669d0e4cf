"""Abstract base class for generative text providers and shared parsing."""

import json
import re
from abc import ABC, abstractmethod
from typing import Any

_FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\n?```\s*$")


def strip_code_fences(raw_text: str) -> str:
    """Remove a Markdown code fence (```json ... ```) wrapping the text, if any."""
    cleaned = _FENCE_OPEN_RE.sub("", raw_text.strip())
    return _FENCE_CLOSE_RE.sub("", cleaned).strip()


def parse_json_object(raw_text: str) -> dict[str, Any]:
    """Parse a model response into a JSON object.

    Handles markdown-wrapped JSON and plain JSON. Raises ValueError when the
    text is not a JSON object.
    """
    cleaned = strip_code_fences(raw_text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse model response as JSON: {e}"
        raise ValueError(msg) from e

    if not isinstance(data, dict):
        msg = f"Expected a JSON object, got {type(data).__name__}"
        raise ValueError(msg)
    return data


class LLMProvider(ABC):
    """Base class that every generative text provider must implement."""

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'gemini')."""

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def env_var(self) -> str | None:
        """Environment variable name for the API key, or None if not needed."""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
        temperature: float | None = None,
    ) -> str:
        """Send a prompt to the model and return its raw text response.

        Args:
            prompt: Full user prompt.
            model: Override the provider's default model. None uses default.
            system: Optional system instruction.
            temperature: Optional sampling temperature.

        Returns:
            Raw text response (expected to be JSON, possibly fenced).
        """
