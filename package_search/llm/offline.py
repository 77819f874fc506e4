"""Offline provider: every call fails, so each interpreter step falls back."""

from package_search.llm.base import TextCompleter


class OfflineProvider(TextCompleter):
    """Text completer for running the pipeline without any LLM access."""

    @property
    def provider_id(self) -> str:
        return "offline"

    @property
    def default_model(self) -> str:
        return "none"

    @property
    def env_var(self) -> None:
        return None

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
        msg = "LLM calls are disabled (offline provider)"
        raise RuntimeError(msg)
