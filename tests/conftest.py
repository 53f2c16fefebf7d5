"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import fakeredis.aioredis
import pytest
from httpx import ASGITransport, AsyncClient
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from companion.core.database import Base
from companion.core.rate_limit import limiter
from companion.core.settings import ConversationConfig
from companion.models.chat_message import ChatMessage  # noqa: F401
from companion.models.chat_session import ChatSession  # noqa: F401
from companion.repositories.chat_repo import ChatRepository
from companion.schemas.function_schema import CompletionResponse
from companion.services.completion_service import CompletionService
from companion.services.conversation_service import ConversationService
from companion.services.suggestion_service import SuggestionService
from companion.services.turn_lock import TurnLock

WELCOME = "Hi, I'm your mental health companion. How are you feeling today?"

# --- Test DB (SQLite in-memory) ---

test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool
)
test_session_factory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


@pytest.fixture(autouse=True)
async def setup_db() -> AsyncGenerator[None, None]:
    """Create all tables before each test, drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a test database session."""
    async with test_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# --- Test Redis (fakeredis) ---


@pytest.fixture
async def fake_redis() -> AsyncGenerator[fakeredis.aioredis.FakeRedis, None]:
    """Create a fake Redis client with an empty keyspace."""
    client = fakeredis.aioredis.FakeRedis(decode_responses=True)
    await client.flushall()
    yield client
    await client.aclose()


@pytest.fixture(autouse=True)
def patch_redis(
    fake_redis: fakeredis.aioredis.FakeRedis, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Patch the global redis_client used by get_redis()."""
    monkeypatch.setattr("companion.core.redis.redis_client", fake_redis)


@pytest.fixture(autouse=True)
def disable_rate_limit(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the shared in-memory limiter from leaking state across tests."""
    monkeypatch.setattr(limiter, "enabled", False)


# --- Mock LLM ---


def make_llm(content: str = "Test response", error: Exception | None = None) -> MagicMock:
    """Create a mock chat model that replies with ``content`` or raises ``error``."""
    mock = MagicMock(spec=BaseChatModel)
    if error is not None:
        mock.ainvoke = AsyncMock(side_effect=error)
    else:
        mock.ainvoke = AsyncMock(return_value=AIMessage(content=content))
    return mock


@pytest.fixture
def mock_llm() -> MagicMock:
    """Create a mock LLM for testing."""
    return make_llm()


@pytest.fixture
def failing_llm() -> MagicMock:
    """Create a mock LLM whose every call fails."""
    return make_llm(error=RuntimeError("upstream unavailable"))


# --- Services ---


@pytest.fixture
def conversation_config() -> ConversationConfig:
    """Conversation settings used by service tests."""
    return ConversationConfig(
        history_window=4,
        title_max_length=50,
        default_title="New Chat",
        welcome_message=WELCOME,
        suggestion_count=5,
        suggestion_max_length=100,
        functions_rate_limit="30/minute",
        turn_lock_ttl_seconds=90,
    )


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a raw async session for repository tests."""
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def chat_repo(db_session: AsyncSession) -> ChatRepository:
    """Create a ChatRepository backed by the test DB session."""
    return ChatRepository(db_session)


@pytest.fixture
def turn_lock(fake_redis: fakeredis.aioredis.FakeRedis) -> TurnLock:
    """Create a TurnLock backed by fake Redis."""
    return TurnLock(fake_redis, ttl_seconds=90)


@pytest.fixture
def mock_completion_service() -> MagicMock:
    """Create a mock CompletionService with a fixed reply."""
    mock = MagicMock(spec=CompletionService)
    mock.complete = AsyncMock(
        return_value=CompletionResponse.from_text("That sounds hard. I'm here for you.")
    )
    return mock


@pytest.fixture
def mock_suggestion_service() -> MagicMock:
    """Create a mock SuggestionService with fixed suggestions."""
    mock = MagicMock(spec=SuggestionService)
    mock.suggest = AsyncMock(return_value=["How can I relax?", "I feel tired."])
    return mock


@pytest.fixture
def conversation_service(
    chat_repo: ChatRepository,
    mock_completion_service: MagicMock,
    mock_suggestion_service: MagicMock,
    turn_lock: TurnLock,
    conversation_config: ConversationConfig,
) -> ConversationService:
    """Create a ConversationService over the test DB with mocked model services."""
    return ConversationService(
        chat_repo=chat_repo,
        completion_service=mock_completion_service,
        suggestion_service=mock_suggestion_service,
        turn_lock=turn_lock,
        config=conversation_config,
        reply_timeout_seconds=5.0,
    )


# --- App override & client fixtures ---


@pytest.fixture
async def async_client(
    mock_completion_service: MagicMock,
    mock_suggestion_service: MagicMock,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with the test DB and mocked model services."""
    from companion.core.database import get_async_session
    from companion.dependencies import (
        get_completion_service,
        get_suggestion_service,
    )
    from companion.main import app

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_completion_service] = lambda: mock_completion_service
    app.dependency_overrides[get_suggestion_service] = lambda: mock_suggestion_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
