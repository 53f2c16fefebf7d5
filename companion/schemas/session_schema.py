"""Chat session and message API schemas."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class SessionResponse(BaseModel):
    """Single chat session."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    title: str
    archived: bool
    created_at: datetime
    updated_at: datetime


class SessionListResponse(BaseModel):
    """Sessions ordered by most recent activity."""

    model_config = ConfigDict(frozen=True)

    sessions: list[SessionResponse]


class CreateSessionRequest(BaseModel):
    """Request to start a new chat session."""

    title: str | None = Field(default=None, min_length=1, max_length=255)


class UpdateSessionRequest(BaseModel):
    """Partial update of a session's title or archive flag."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    archived: bool | None = None


class MessageState(StrEnum):
    """Delivery state of a user message as seen by the client."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class MessageResponse(BaseModel):
    """Single message within a session."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    session_id: str
    content: str
    is_bot: bool
    created_at: datetime
    state: MessageState = MessageState.CONFIRMED


class SessionMessagesResponse(BaseModel):
    """All messages for a session in append order."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    messages: list[MessageResponse]


class ActiveSessionResponse(BaseModel):
    """Session the client should display after a lifecycle change."""

    model_config = ConfigDict(frozen=True)

    active_session: SessionResponse
    created: bool = False


class DeleteSessionResponse(BaseModel):
    """Result of deleting a session, including the new active selection."""

    model_config = ConfigDict(frozen=True)

    deleted_session_id: str
    active_session_id: str
    created_session: SessionResponse | None = None
