"""Vision LLM provider registry with lazy loading.

Usage:
    from src.llm import get_provider, load_image

    provider = get_provider("openai")
    text = provider.describe_image(load_image("photo.jpg"), "What needs painting?")
"""

import importlib

from src.llm.base import ImageSource, LLMProvider, load_image

__all__ = ["ImageSource", "LLMProvider", "available_providers", "get_provider", "load_image"]

# Lazy registry: maps provider name → (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "anthropic": ("src.llm.anthropic", "AnthropicProvider"),
    "openai": ("src.llm.openai", "OpenAIProvider"),
    "gemini": ("src.llm.gemini", "GeminiProvider"),
    "ollama": ("src.llm.ollama", "OllamaProvider"),
}


def get_provider(name: str) -> LLMProvider:
    """Instantiate and return an LLM provider by name.

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
