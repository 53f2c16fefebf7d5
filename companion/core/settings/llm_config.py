"""LLM provider configuration."""

from typing import Literal

from pydantic import BaseModel, SecretStr


class LLMConfig(BaseModel, frozen=True):
    """LLM provider settings.

    ``primary_model`` is tried first for every call; ``secondary_model`` is the
    smaller model used when the primary call fails.
    """

    provider: Literal["openai", "anthropic"]
    openai_api_key: SecretStr
    anthropic_api_key: SecretStr
    primary_model: str
    secondary_model: str
    temperature: float
    max_tokens: int
    suggestion_max_tokens: int
    timeout_seconds: float

    @property
    def api_key(self) -> SecretStr:
        """API key of the active provider."""
        if self.provider == "anthropic":
            return self.anthropic_api_key
        return self.openai_api_key
