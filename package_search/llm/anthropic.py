"""Anthropic Claude LLM provider."""

import logging
import os
from typing import Any

from package_search.llm.base import JSON_ONLY_SUFFIX, SYSTEM_PROMPT, TextCompleter

logger = logging.getLogger(__name__)


class AnthropicProvider(TextCompleter):
    """Text completer using the Anthropic Claude API.

    The Messages API has no JSON response mode, so ``json_mode`` only
    tightens the system prompt.
    """

    @property
    def provider_id(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "claude-sonnet-4-20250514"

    @property
    def env_var(self) -> str:
        return "ANTHROPIC_API_KEY"

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
        api_key = os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            msg = "ANTHROPIC_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            import anthropic
        except ImportError:
            msg = (
                "anthropic is required for LLM query interpretation. "
                "Install with: pip install 'event-package-search[anthropic]'"
            )
            raise ImportError(msg) from None

        client_kwargs: dict[str, Any] = {"api_key": api_key}
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        client = anthropic.Anthropic(**client_kwargs)
        use_model = model or self.default_model
        use_system = system if system is not None else SYSTEM_PROMPT
        if json_mode:
            use_system += JSON_ONLY_SUFFIX

        kwargs: dict[str, Any] = {}
        if temperature is not None:
            kwargs["temperature"] = temperature

        logger.debug("Sending prompt to Anthropic API (%s)...", use_model)
        message = client.messages.create(
            model=use_model,
            max_tokens=max_tokens or 1024,
            system=use_system,
            messages=[{"role": "user", "content": prompt}],
            **kwargs,
        )

        return message.content[0].text  # type: ignore[union-attr]
