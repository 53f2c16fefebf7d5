"""Application configuration using Pydantic Settings V2."""

from functools import cached_property
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from companion.core.settings import (
    AppConfig,
    ConversationConfig,
    DatabaseConfig,
    LLMConfig,
    RedisConfig,
    ServerConfig,
)

DEFAULT_WELCOME_MESSAGE = (
    "Hi, I'm your mental health companion. How are you feeling today? "
    "I'm here to listen and support you."
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Flat fields are loaded directly from environment variables.
    Domain properties provide grouped access (e.g. settings.llm.primary_model).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LLM Provider
    llm_provider: Literal["openai", "anthropic"] = Field(
        default="openai",
        description="LLM provider to use",
    )
    openai_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="OpenAI API key",
    )
    anthropic_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Anthropic API key",
    )
    llm_primary_model: str = Field(
        default="gpt-4o-mini",
        description="Model tried first for completions and suggestions",
    )
    llm_secondary_model: str = Field(
        default="gpt-3.5-turbo",
        description="Smaller model used when the primary call fails",
    )
    llm_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )
    llm_max_tokens: int = Field(
        default=200,
        ge=16,
        le=4096,
        description="Token budget for assistant replies",
    )
    llm_suggestion_max_tokens: int = Field(
        default=150,
        ge=16,
        le=1024,
        description="Token budget for suggestion generation",
    )
    llm_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Timeout applied to each model call",
    )

    # App
    app_name: str = Field(
        default="mental-health-companion",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Version reported by the API",
    )
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=True,
        description="Debug mode",
    )

    # Conversation
    history_window: int = Field(
        default=4,
        ge=1,
        le=20,
        description="Number of prior messages sent as completion context",
    )
    title_max_length: int = Field(
        default=50,
        ge=1,
        le=255,
        description="Maximum session title length derived from the first message",
    )
    default_session_title: str = Field(
        default="New Chat",
        description="Title of a session before its first user message",
    )
    welcome_message: str = Field(
        default=DEFAULT_WELCOME_MESSAGE,
        description="Assistant greeting seeded into new sessions (empty disables)",
    )
    suggestion_count: int = Field(
        default=5,
        ge=1,
        le=10,
        description="Maximum number of suggestion chips returned",
    )
    suggestion_max_length: int = Field(
        default=100,
        ge=10,
        le=500,
        description="Maximum length of a single suggestion",
    )
    functions_rate_limit: str = Field(
        default="30/minute",
        description="Rate limit for the model proxy endpoints",
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    port: int = Field(
        default=8004,
        ge=1,
        le=65535,
        description="Server port",
    )
    cors_origins: str = Field(
        default="",
        description="Comma-separated browser origins allowed outside development",
    )

    # Database
    database_url: SecretStr = Field(
        default=SecretStr("sqlite+aiosqlite:///./companion.db"),
        description="Async database URL (mysql+aiomysql://... or sqlite+aiosqlite://...)",
    )

    # Redis
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    redis_socket_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Socket timeout for turn-lock commands",
    )

    # --- Domain properties ---

    @cached_property
    def llm(self) -> LLMConfig:
        """LLM provider configuration."""
        return LLMConfig(
            provider=self.llm_provider,
            openai_api_key=self.openai_api_key,
            anthropic_api_key=self.anthropic_api_key,
            primary_model=self.llm_primary_model,
            secondary_model=self.llm_secondary_model,
            temperature=self.llm_temperature,
            max_tokens=self.llm_max_tokens,
            suggestion_max_tokens=self.llm_suggestion_max_tokens,
            timeout_seconds=self.llm_timeout_seconds,
        )

    @cached_property
    def app(self) -> AppConfig:
        """Application environment configuration."""
        return AppConfig(
            name=self.app_name,
            version=self.app_version,
            env=self.app_env,
            debug=self.debug,
        )

    @cached_property
    def conversation(self) -> ConversationConfig:
        """Conversation turn and suggestion configuration."""
        return ConversationConfig(
            history_window=self.history_window,
            title_max_length=self.title_max_length,
            default_title=self.default_session_title,
            welcome_message=self.welcome_message,
            suggestion_count=self.suggestion_count,
            suggestion_max_length=self.suggestion_max_length,
            functions_rate_limit=self.functions_rate_limit,
            # Two model attempts plus headroom for the store writes
            turn_lock_ttl_seconds=int(self.llm_timeout_seconds * 2) + 30,
        )

    @cached_property
    def server(self) -> ServerConfig:
        """Server configuration."""
        return ServerConfig(
            host=self.host,
            port=self.port,
            cors_origins=self.cors_origins,
        )

    @cached_property
    def database(self) -> DatabaseConfig:
        """Database connection configuration."""
        return DatabaseConfig(url=self.database_url)

    @cached_property
    def redis(self) -> RedisConfig:
        """Redis connection configuration."""
        return RedisConfig(
            url=self.redis_url,
            socket_timeout_seconds=self.redis_socket_timeout_seconds,
        )

    # --- Convenience properties (delegate to domain configs) ---

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app.is_development


# Global settings instance
settings = Settings()
