"""Chat repository for session and message database operations."""

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from functools import wraps
from typing import Any, ParamSpec, TypeVar

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from companion.core.exceptions import StoreError
from companion.models.chat_message import ChatMessage
from companion.models.chat_session import ChatSession, utcnow

logger = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")

SESSION_PATCH_FIELDS = frozenset({"title", "archived", "updated_at"})


def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def store_operation(
    func_: Callable[P, Awaitable[R]],
) -> Callable[P, Awaitable[R]]:
    """Translate database errors raised by a repository method into StoreError."""

    @wraps(func_)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await func_(*args, **kwargs)
        except SQLAlchemyError as exc:
            logger.exception("Store operation failed", operation=func_.__name__)
            raise StoreError() from exc

    return wrapper


class ChatRepository:
    """Encapsulates chat session and message database queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # --- Sessions ---

    @store_operation
    async def list_sessions(self, archived: bool | None = None) -> list[ChatSession]:
        """List sessions, most recently updated first.

        ``archived=None`` returns every session; ``False`` is the primary list.
        """
        stmt = select(ChatSession)
        if archived is not None:
            stmt = stmt.where(ChatSession.archived.is_(archived))
        stmt = stmt.order_by(ChatSession.updated_at.desc(), ChatSession.id.desc())
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    @store_operation
    async def get_session(self, session_id: str) -> ChatSession | None:
        """Find a chat session by id."""
        result = await self._session.execute(
            select(ChatSession)
            .where(ChatSession.id == session_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @store_operation
    async def create_session(self, title: str) -> ChatSession:
        """Create a new chat session."""
        now = utcnow()
        session = ChatSession(title=title, archived=False, created_at=now, updated_at=now)
        self._session.add(session)
        await self._session.flush()
        await self._session.refresh(session)
        return session

    @store_operation
    async def update_session(self, session_id: str, patch: dict[str, Any]) -> None:
        """Apply a partial update (title, archived, updated_at) to a session."""
        unknown = set(patch) - SESSION_PATCH_FIELDS
        if unknown:
            raise ValueError(f"Unsupported session fields: {sorted(unknown)}")
        if not patch:
            return
        await self._session.execute(
            update(ChatSession).where(ChatSession.id == session_id).values(**patch)
        )

    async def touch_session(self, session_id: str) -> None:
        """Advance a session's updated_at to now."""
        await self.update_session(session_id, {"updated_at": utcnow()})

    @store_operation
    async def delete_session(self, session_id: str) -> None:
        """Hard-delete a session together with all of its messages."""
        await self._session.execute(
            delete(ChatMessage).where(ChatMessage.session_id == session_id)
        )
        await self._session.execute(
            delete(ChatSession).where(ChatSession.id == session_id)
        )

    # --- Messages ---

    @store_operation
    async def list_messages(self, session_id: str) -> list[ChatMessage]:
        """Retrieve all messages for a session in append order."""
        result = await self._session.execute(
            select(ChatMessage)
            .where(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.created_at.asc(), ChatMessage.seq.asc())
        )
        return list(result.scalars().all())

    @store_operation
    async def append_message(
        self, session_id: str, content: str, is_bot: bool
    ) -> ChatMessage:
        """Append a message to the end of a session.

        ``created_at`` never goes backwards within a session, even if the
        clock does.
        """
        last = (
            await self._session.execute(
                select(ChatMessage.seq, ChatMessage.created_at)
                .where(ChatMessage.session_id == session_id)
                .order_by(ChatMessage.seq.desc())
                .limit(1)
            )
        ).first()

        created_at = utcnow()
        seq = 1
        if last is not None:
            seq = last.seq + 1
            created_at = max(created_at, _as_utc(last.created_at))

        message = ChatMessage(
            session_id=session_id,
            seq=seq,
            content=content,
            is_bot=is_bot,
            created_at=created_at,
        )
        self._session.add(message)
        await self._session.flush()
        await self._session.refresh(message)
        return message

    @store_operation
    async def count_user_messages(self, session_id: str) -> int:
        """Count user-authored messages in a session."""
        result = await self._session.execute(
            select(func.count())
            .select_from(ChatMessage)
            .where(ChatMessage.session_id == session_id, ChatMessage.is_bot.is_(False))
        )
        return int(result.scalar_one())

    # --- Unit of work ---

    @store_operation
    async def commit(self) -> None:
        """Make pending writes durable."""
        await self._session.commit()

    async def rollback(self) -> None:
        """Discard pending writes."""
        await self._session.rollback()
