"""Chat session, message and turn API router."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from companion.dependencies import get_conversation_service
from companion.schemas.chat_schema import SendMessageRequest, TurnResponse
from companion.schemas.function_schema import SuggestionResponse
from companion.schemas.response_schema import (
    ApiResponse,
    ErrorResponse,
    success_response,
)
from companion.schemas.session_schema import (
    ActiveSessionResponse,
    CreateSessionRequest,
    DeleteSessionResponse,
    SessionListResponse,
    SessionMessagesResponse,
    SessionResponse,
    UpdateSessionRequest,
)
from companion.services.conversation_service import ConversationService

router = APIRouter(
    prefix="/api/v1/sessions",
    tags=["sessions"],
    responses={
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)

ConversationServiceDep = Annotated[
    ConversationService, Depends(get_conversation_service)
]


@router.get("", response_model=ApiResponse[SessionListResponse])
async def list_sessions(
    service: ConversationServiceDep,
    archived: bool = Query(default=False),
) -> dict:
    """List sessions ordered by most recent activity."""
    result = await service.list_sessions(archived=archived)
    return success_response(result)


@router.post(
    "",
    response_model=ApiResponse[SessionResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_session(
    request: CreateSessionRequest,
    service: ConversationServiceDep,
) -> dict:
    """Start a new chat session."""
    result = await service.create_session(title=request.title)
    return success_response(result, status=201, message="Session created")


@router.post("/bootstrap", response_model=ApiResponse[ActiveSessionResponse])
async def bootstrap(service: ConversationServiceDep) -> dict:
    """Return the session to open at startup, creating one if none exist."""
    result = await service.bootstrap()
    return success_response(result)


@router.patch("/{session_id}", response_model=ApiResponse[SessionResponse])
async def update_session(
    session_id: str,
    request: UpdateSessionRequest,
    service: ConversationServiceDep,
) -> dict:
    """Rename and/or archive a session."""
    result = await service.update_session(session_id, request)
    return success_response(result, message="Session updated")


@router.post("/{session_id}/archive", response_model=ApiResponse[SessionResponse])
async def archive_session(session_id: str, service: ConversationServiceDep) -> dict:
    """Hide a session from the primary list."""
    result = await service.archive_session(session_id)
    return success_response(result, message="Chat archived successfully")


@router.post("/{session_id}/unarchive", response_model=ApiResponse[SessionResponse])
async def unarchive_session(session_id: str, service: ConversationServiceDep) -> dict:
    """Return an archived session to the primary list."""
    result = await service.unarchive_session(session_id)
    return success_response(result, message="Chat unarchived successfully")


@router.delete("/{session_id}", response_model=ApiResponse[DeleteSessionResponse])
async def delete_session(
    session_id: str,
    service: ConversationServiceDep,
    active_session_id: str | None = Query(default=None),
) -> dict:
    """Delete a session and its messages, returning the new active session."""
    result = await service.delete_session(session_id, active_session_id)
    return success_response(result, message="Chat deleted successfully")


@router.get(
    "/{session_id}/messages",
    response_model=ApiResponse[SessionMessagesResponse],
)
async def list_messages(session_id: str, service: ConversationServiceDep) -> dict:
    """List a session's messages in append order."""
    result = await service.get_messages(session_id)
    return success_response(result)


@router.post("/{session_id}/messages", response_model=ApiResponse[TurnResponse])
async def send_message(
    session_id: str,
    request: SendMessageRequest,
    service: ConversationServiceDep,
) -> dict:
    """Send a user message and wait for the assistant reply."""
    result = await service.send_message(
        session_id, request.message, request.preferences
    )
    return success_response(result)


@router.get(
    "/{session_id}/suggestions",
    response_model=ApiResponse[SuggestionResponse],
)
async def session_suggestions(
    session_id: str, service: ConversationServiceDep
) -> dict:
    """Suggestion chips for the session's latest messages."""
    suggestions = await service.suggest_for_session(session_id)
    return success_response(SuggestionResponse(suggestions=suggestions))
