"""Domain-specific configuration models."""

from companion.core.settings.app_config import AppConfig
from companion.core.settings.conversation_config import ConversationConfig
from companion.core.settings.database_config import DatabaseConfig
from companion.core.settings.llm_config import LLMConfig
from companion.core.settings.redis_config import RedisConfig
from companion.core.settings.server_config import ServerConfig

__all__ = [
    "AppConfig",
    "ConversationConfig",
    "DatabaseConfig",
    "LLMConfig",
    "RedisConfig",
    "ServerConfig",
]
