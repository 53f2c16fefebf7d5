"""Unit tests for the per-session turn lock."""

import fakeredis.aioredis
import pytest

from companion.core.exceptions import TurnInProgressError
from companion.services.turn_lock import TurnLock


class TestTurnLock:
    """Tests for TurnLock.hold."""

    @pytest.mark.asyncio
    async def test_hold_and_release(self, turn_lock: TurnLock) -> None:
        async with turn_lock.hold("s1"):
            assert await turn_lock.is_held("s1") is True
        assert await turn_lock.is_held("s1") is False

    @pytest.mark.asyncio
    async def test_second_holder_rejected(self, turn_lock: TurnLock) -> None:
        async with turn_lock.hold("s1"):
            with pytest.raises(TurnInProgressError):
                async with turn_lock.hold("s1"):
                    pass
            assert await turn_lock.is_held("s1") is True

    @pytest.mark.asyncio
    async def test_sessions_independent(self, turn_lock: TurnLock) -> None:
        async with turn_lock.hold("s1"):
            async with turn_lock.hold("s2"):
                assert await turn_lock.is_held("s2") is True

    @pytest.mark.asyncio
    async def test_released_on_error(self, turn_lock: TurnLock) -> None:
        with pytest.raises(RuntimeError):
            async with turn_lock.hold("s1"):
                raise RuntimeError("boom")
        assert await turn_lock.is_held("s1") is False

    @pytest.mark.asyncio
    async def test_lock_expires(
        self, turn_lock: TurnLock, fake_redis: fakeredis.aioredis.FakeRedis
    ) -> None:
        async with turn_lock.hold("s1"):
            ttl = await fake_redis.ttl(TurnLock.key("s1"))
            assert 0 < ttl <= 90

    @pytest.mark.asyncio
    async def test_does_not_release_foreign_lock(
        self, turn_lock: TurnLock, fake_redis: fakeredis.aioredis.FakeRedis
    ) -> None:
        async with turn_lock.hold("s1"):
            # Simulate expiry followed by another worker taking the lock
            await fake_redis.set(TurnLock.key("s1"), "other-token")
        assert await fake_redis.get(TurnLock.key("s1")) == "other-token"
