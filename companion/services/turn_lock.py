"""Per-session guard allowing a single in-flight conversation turn."""

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as redis
import structlog

from companion.core.exceptions import TurnInProgressError

logger = structlog.get_logger()

TURN_LOCK_PREFIX = "turn_lock:"


class TurnLock:
    """Redis-backed mutual exclusion for conversation turns.

    The lock expires after ``ttl_seconds`` so a crashed worker cannot wedge a
    session forever.
    """

    def __init__(self, redis_client: redis.Redis, ttl_seconds: int = 90) -> None:  # type: ignore[type-arg]
        self._redis = redis_client
        self._ttl = ttl_seconds

    @staticmethod
    def key(session_id: str) -> str:
        return f"{TURN_LOCK_PREFIX}{session_id}"

    async def is_held(self, session_id: str) -> bool:
        """Check whether a turn is currently in flight for the session."""
        return await self._redis.exists(self.key(session_id)) > 0

    @asynccontextmanager
    async def hold(self, session_id: str) -> AsyncIterator[None]:
        """Hold the session's turn lock for the duration of the block.

        Raises:
            TurnInProgressError: if another turn already holds the lock.
        """
        key = self.key(session_id)
        token = uuid.uuid4().hex
        acquired = await self._redis.set(key, token, nx=True, ex=self._ttl)
        if not acquired:
            logger.info("Turn rejected, reply pending", session_id=session_id)
            raise TurnInProgressError()
        try:
            yield
        finally:
            await self._release(key, token)

    async def _release(self, key: str, token: str) -> None:
        current = await self._redis.get(key)
        if isinstance(current, bytes):
            current = current.decode()
        # Only the holder may release; an expired lock may belong to a newer turn
        if current == token:
            await self._redis.delete(key)
