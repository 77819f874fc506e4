"""Abstract base class for text-completion providers and shared logic."""

import json
import re
from abc import ABC, abstractmethod
from typing import Any

SYSTEM_PROMPT = (
    "You are an assistant for an event-planning marketplace that helps "
    "planners find venues, catering, entertainment and rentals. "
    "Answer concisely and follow the requested output format exactly."
)

JSON_ONLY_SUFFIX = " Return only valid JSON, no markdown, no explanations."


def parse_json_response(raw_text: str) -> Any:
    """Parse an LLM response text into a JSON value.

    Handles markdown-wrapped JSON (```json ... ```) and plain JSON.
    """
    cleaned = re.sub(r"^```(?:json)?\s*\n?", "", raw_text.strip())
    cleaned = re.sub(r"\n?```\s*$", "", cleaned)

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse LLM response as JSON: {e}"
        raise ValueError(msg) from e


class TextCompleter(ABC):
    """Base class that every text-completion provider must implement."""

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'openai')."""

    @abstractmethod
    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
        timeout: float | None = None,
    ) -> str:
        """Send a prompt to the LLM and return raw response text.

        Args:
            prompt: User prompt.
            model: Override the provider's default model. None uses default.
            system: Override the system prompt. None falls back to SYSTEM_PROMPT.
            temperature: Sampling temperature. None uses the provider default.
            max_tokens: Upper bound on response tokens.
            json_mode: Ask the provider for a strict JSON response.
            timeout: Request timeout in seconds.

        Returns:
            Raw text response from the LLM.
        """

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def env_var(self) -> str | None:
        """Environment variable name for the API key, or None if not needed."""
