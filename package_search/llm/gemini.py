"""Google Gemini LLM provider (google-genai SDK)."""

import logging
import os

from package_search.llm.base import SYSTEM_PROMPT, TextCompleter

logger = logging.getLogger(__name__)


class GeminiProvider(TextCompleter):
    """Text completer using the Google Gemini API (google-genai SDK)."""

    @property
    def provider_id(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return "gemini-2.5-flash"

    @property
    def env_var(self) -> str:
        return "GOOGLE_API_KEY"

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
        api_key = os.environ.get("GOOGLE_API_KEY")
        if not api_key:
            msg = "GOOGLE_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            from google import genai
            from google.genai import types as genai_types
        except ImportError:
            msg = (
                "google-genai is required for LLM query interpretation. "
                "Install with: pip install 'event-package-search[gemini]'"
            )
            raise ImportError(msg) from None

        use_model = model or self.default_model
        use_system = system if system is not None else SYSTEM_PROMPT

        http_options = None
        if timeout is not None:
            http_options = genai_types.HttpOptions(timeout=int(timeout * 1000))

        logger.debug("Sending prompt to Gemini API (%s)...", use_model)
        client = genai.Client(api_key=api_key, http_options=http_options)
        response = client.models.generate_content(
            model=use_model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(
                system_instruction=use_system,
                temperature=temperature,
                max_output_tokens=max_tokens,
                response_mime_type="application/json" if json_mode else None,
            ),
        )

        return response.text or ""
