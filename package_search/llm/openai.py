"""OpenAI chat-completions provider."""

import logging
import os
from typing import Any

from package_search.llm.base import JSON_ONLY_SUFFIX, SYSTEM_PROMPT, TextCompleter

logger = logging.getLogger(__name__)


class OpenAIProvider(TextCompleter):
    """Text completer using the OpenAI API."""

    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    @property
    def env_var(self) -> str:
        return "OPENAI_API_KEY"

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
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            msg = "OPENAI_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            import openai
        except ImportError:
            msg = (
                "openai is required for LLM query interpretation. "
                "Install with: pip install 'event-package-search[openai]'"
            )
            raise ImportError(msg) from None

        client = openai.OpenAI(api_key=api_key, timeout=timeout)
        use_model = model or self.default_model
        use_system = system if system is not None else SYSTEM_PROMPT
        if json_mode:
            use_system += JSON_ONLY_SUFFIX

        kwargs: dict[str, Any] = {}
        if temperature is not None:
            kwargs["temperature"] = temperature
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        logger.debug("Sending prompt to OpenAI API (%s)...", use_model)
        response = client.chat.completions.create(
            model=use_model,
            messages=[
                {"role": "system", "content": use_system},
                {"role": "user", "content": prompt},
            ],
            **kwargs,
        )

        return response.choices[0].message.content or ""
