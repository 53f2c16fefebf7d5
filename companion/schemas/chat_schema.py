"""Conversation turn request and response schemas."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from companion.schemas.session_schema import MessageResponse, SessionResponse


class ChatPreferences(BaseModel):
    """User-tunable reply preferences, persisted on the client.

    Threaded into system-prompt construction for every turn.
    """

    model_config = ConfigDict(frozen=True)

    response_length: int = Field(default=150, ge=50, le=300)
    friendly_tone: bool = True
    show_timestamps: bool = True


class SendMessageRequest(BaseModel):
    """A user message submitted to a session."""

    message: str = Field(..., max_length=4000)
    preferences: ChatPreferences = Field(default_factory=ChatPreferences)


class TurnStatus(StrEnum):
    """Outcome of a conversation turn."""

    COMPLETED = "completed"
    FAILED = "failed"


class TurnResponse(BaseModel):
    """Result of one user message and the assistant reply (if any)."""

    model_config = ConfigDict(frozen=True)

    status: TurnStatus
    user_message: MessageResponse
    reply: MessageResponse | None = None
    session: SessionResponse
    notice: str | None = None
