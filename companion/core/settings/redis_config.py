"""Redis connection configuration."""

from pydantic import BaseModel


class RedisConfig(BaseModel, frozen=True):
    """Redis connection settings for the turn lock store."""

    url: str
    socket_timeout_seconds: float
