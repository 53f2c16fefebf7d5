"""Conversation behaviour configuration."""

from pydantic import BaseModel


class ConversationConfig(BaseModel, frozen=True):
    """Conversation turn, titling and suggestion settings."""

    history_window: int
    title_max_length: int
    default_title: str
    welcome_message: str
    suggestion_count: int
    suggestion_max_length: int
    functions_rate_limit: str
    turn_lock_ttl_seconds: int

    @property
    def has_welcome_message(self) -> bool:
        """Whether new sessions are seeded with an assistant greeting."""
        return bool(self.welcome_message.strip())
