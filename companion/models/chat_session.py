"""Chat session database model."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from companion.core.database import Base


def utcnow() -> datetime:
    """Current time in UTC, used for application-assigned timestamps."""
    return datetime.now(UTC)


class ChatSession(Base):
    """Persistent conversation thread."""

    __tablename__ = "chat_sessions"
    __table_args__ = (
        Index("ix_chat_sessions_archived_updated_at", "archived", "updated_at"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
