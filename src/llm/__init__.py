"""Generative text provider registry with lazy loading.

Usage:
    from src.llm import get_provider, parse_json_object

    provider = get_provider("gemini")
    raw = await provider.generate(prompt)
    data = parse_json_object(raw)
"""

import importlib

from src.llm.base import LLMProvider, parse_json_object, strip_code_fences

__all__ = [
    "LLMProvider",
    "available_providers",
    "get_provider",
    "parse_json_object",
    "strip_code_fences",
]

# Lazy registry: maps provider name → (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "anthropic": ("src.llm.anthropic", "AnthropicProvider"),
    "gemini": ("src.llm.gemini", "GeminiProvider"),
    "openai": ("src.llm.openai", "OpenAIProvider"),
}


def get_provider(name: str) -> LLMProvider:
    """Instantiate and return a provider by name.

    Raises:
        ValueError: If the provider name is unknown.
    """
    if name not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unknown LLM provider '{name}'. Available: {valid}"
        raise ValueError(msg)

    module_path, class_name = _REGISTRY[name]
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls()  # type: ignore[no-any-return]


def available_providers() -> list[str]:
    """Return sorted list of registered provider names."""
    return sorted(_REGISTRY)
