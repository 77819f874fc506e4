"""Text-completion provider registry with lazy loading.

Usage:
    from package_search.llm import get_provider, parse_json_response

    provider = get_provider("openai")
    raw = provider.complete(prompt, json_mode=True, temperature=0)
    data = parse_json_response(raw)
"""

from __future__ import annotations

import importlib

from package_search.llm.base import TextCompleter, parse_json_response

__all__ = ["TextCompleter", "available_providers", "get_provider", "parse_json_response"]

# Lazy registry: maps provider name → (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "anthropic": ("package_search.llm.anthropic", "AnthropicProvider"),
    "openai": ("package_search.llm.openai", "OpenAIProvider"),
    "gemini": ("package_search.llm.gemini", "GeminiProvider"),
    "ollama": ("package_search.llm.ollama", "OllamaProvider"),
    "offline": ("package_search.llm.offline", "OfflineProvider"),
}


def get_provider(name: str) -> TextCompleter:
    """Instantiate and return a text-completion provider by name.

    Args:
        name: Provider identifier (anthropic, openai, gemini, ollama, offline).

    Returns:
        A TextCompleter instance.

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
