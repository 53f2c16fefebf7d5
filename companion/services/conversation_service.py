"""Conversation controller: session lifecycle and message turns."""

import asyncio
from enum import StrEnum

import structlog

from companion.core.exceptions import (
    EmptyMessageError,
    SessionNotFoundError,
    StoreError,
)
from companion.core.settings import ConversationConfig
from companion.models.chat_message import ChatMessage
from companion.models.chat_session import ChatSession
from companion.repositories.chat_repo import ChatRepository
from companion.schemas.chat_schema import (
    ChatPreferences,
    TurnResponse,
    TurnStatus,
)
from companion.schemas.function_schema import (
    CompletionMessage,
    SuggestionContextMessage,
)
from companion.schemas.session_schema import (
    ActiveSessionResponse,
    DeleteSessionResponse,
    MessageResponse,
    SessionListResponse,
    SessionMessagesResponse,
    SessionResponse,
    UpdateSessionRequest,
)
from companion.services.completion_service import CompletionService
from companion.services.prompts import build_system_prompt
from companion.services.suggestion_service import SuggestionService
from companion.services.title_service import build_session_title
from companion.services.turn_lock import TurnLock

logger = structlog.get_logger()

FAILED_TURN_NOTICE = "Sorry, I couldn't process your message. Please try again."

# Messages of context handed to the suggestion service
SUGGESTION_CONTEXT_SIZE = 6


class TurnState(StrEnum):
    """Per-session turn states."""

    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"
    ERROR = "error"


class ConversationService:
    """Orchestrates the session store, message store and model services."""

    def __init__(
        self,
        chat_repo: ChatRepository,
        completion_service: CompletionService,
        suggestion_service: SuggestionService,
        turn_lock: TurnLock,
        config: ConversationConfig,
        reply_timeout_seconds: float = 65.0,
    ) -> None:
        self._chat_repo = chat_repo
        self._completion = completion_service
        self._suggestions = suggestion_service
        self._turn_lock = turn_lock
        self._config = config
        self._reply_timeout = reply_timeout_seconds

    # --- Sessions ---

    async def list_sessions(self, archived: bool = False) -> SessionListResponse:
        """List primary (or archived) sessions, most recent first."""
        sessions = await self._chat_repo.list_sessions(archived=archived)
        return SessionListResponse(
            sessions=[SessionResponse.model_validate(s) for s in sessions]
        )

    async def create_session(self, title: str | None = None) -> SessionResponse:
        """Create a session, seeded with the welcome message when configured."""
        session = await self._chat_repo.create_session(
            title=title or self._config.default_title
        )
        if self._config.has_welcome_message:
            await self._chat_repo.append_message(
                session.id, self._config.welcome_message, is_bot=True
            )
        await self._chat_repo.commit()
        logger.info("Session created", session_id=session.id)
        return SessionResponse.model_validate(session)

    async def bootstrap(self) -> ActiveSessionResponse:
        """Return the session to show at startup, creating one if none exist."""
        sessions = await self._chat_repo.list_sessions(archived=False)
        if sessions:
            return ActiveSessionResponse(
                active_session=SessionResponse.model_validate(sessions[0])
            )
        created = await self.create_session()
        return ActiveSessionResponse(active_session=created, created=True)

    async def update_session(
        self, session_id: str, request: UpdateSessionRequest
    ) -> SessionResponse:
        """Rename and/or archive a session."""
        await self._get_session_or_raise(session_id)
        patch = request.model_dump(exclude_none=True)
        await self._chat_repo.update_session(session_id, patch)
        await self._chat_repo.commit()
        return SessionResponse.model_validate(
            await self._get_session_or_raise(session_id)
        )

    async def rename_session(self, session_id: str, title: str) -> SessionResponse:
        return await self.update_session(session_id, UpdateSessionRequest(title=title))

    async def archive_session(self, session_id: str) -> SessionResponse:
        return await self.update_session(session_id, UpdateSessionRequest(archived=True))

    async def unarchive_session(self, session_id: str) -> SessionResponse:
        return await self.update_session(
            session_id, UpdateSessionRequest(archived=False)
        )

    async def delete_session(
        self,
        session_id: str,
        active_session_id: str | None = None,
    ) -> DeleteSessionResponse:
        """Delete a session and its messages, then resolve the active session.

        A supplied active session is kept while it still exists unarchived.
        Otherwise the most recent remaining unarchived session becomes active;
        if there is none a fresh session is created.
        """
        await self._get_session_or_raise(session_id)
        await self._chat_repo.delete_session(session_id)
        await self._chat_repo.commit()
        logger.info("Session deleted", session_id=session_id)

        if active_session_id is not None and active_session_id != session_id:
            active = await self._chat_repo.get_session(active_session_id)
            if active is not None and not active.archived:
                return DeleteSessionResponse(
                    deleted_session_id=session_id,
                    active_session_id=active.id,
                )

        remaining = await self._chat_repo.list_sessions(archived=False)
        if remaining:
            return DeleteSessionResponse(
                deleted_session_id=session_id,
                active_session_id=remaining[0].id,
            )

        created = await self.create_session()
        return DeleteSessionResponse(
            deleted_session_id=session_id,
            active_session_id=created.id,
            created_session=created,
        )

    # --- Messages ---

    async def get_messages(self, session_id: str) -> SessionMessagesResponse:
        """Retrieve all messages of a session in append order."""
        await self._get_session_or_raise(session_id)
        messages = await self._chat_repo.list_messages(session_id)
        return SessionMessagesResponse(
            session_id=session_id,
            messages=[MessageResponse.model_validate(m) for m in messages],
        )

    async def send_message(
        self,
        session_id: str,
        content: str,
        preferences: ChatPreferences | None = None,
    ) -> TurnResponse:
        """Run one conversation turn.

        The user message is committed before the model is called. A failed
        model call leaves that message without a reply and reports a
        ``failed`` turn; the user re-sends to retry.

        Raises:
            EmptyMessageError: if the message is blank.
            SessionNotFoundError: if the session does not exist.
            TurnInProgressError: if a reply is already pending for the session.
            StoreError: if the user message could not be saved.
        """
        if not content.strip():
            raise EmptyMessageError()
        preferences = preferences or ChatPreferences()
        await self._get_session_or_raise(session_id)

        async with self._turn_lock.hold(session_id):
            self._log_state(session_id, TurnState.AWAITING_REPLY)
            prior = await self._chat_repo.list_messages(session_id)
            user_message = MessageResponse.model_validate(
                await self._persist_user_message(session_id, content)
            )
            context = self._build_context(prior, content, preferences)

            try:
                completion = await asyncio.wait_for(
                    self._completion.complete(context), timeout=self._reply_timeout
                )
                reply = await self._chat_repo.append_message(
                    session_id, completion.content, is_bot=True
                )
                await self._chat_repo.touch_session(session_id)
                await self._chat_repo.commit()
            except StoreError as exc:
                await self._chat_repo.rollback()
                return await self._failed_turn(session_id, user_message, exc.message)
            except Exception:
                logger.exception("Completion failed", session_id=session_id)
                await self._chat_repo.rollback()
                return await self._failed_turn(session_id, user_message, FAILED_TURN_NOTICE)

            self._log_state(session_id, TurnState.IDLE)
            session = await self._get_session_or_raise(session_id)
            return TurnResponse(
                status=TurnStatus.COMPLETED,
                user_message=user_message,
                reply=MessageResponse.model_validate(reply),
                session=SessionResponse.model_validate(session),
            )

    async def suggest_for_session(self, session_id: str) -> list[str]:
        """Suggestion chips for a session's latest messages.

        Never raises: a store failure falls back to context-free suggestions.
        """
        try:
            messages = await self._chat_repo.list_messages(session_id)
        except StoreError:
            messages = []
        context = [
            SuggestionContextMessage(content=m.content, is_bot=m.is_bot)
            for m in messages[-SUGGESTION_CONTEXT_SIZE:]
        ]
        return await self._suggestions.suggest(context)

    # --- Helpers ---

    async def _get_session_or_raise(self, session_id: str) -> ChatSession:
        session = await self._chat_repo.get_session(session_id)
        if session is None:
            raise SessionNotFoundError()
        return session

    async def _persist_user_message(
        self,
        session_id: str,
        content: str,
    ) -> ChatMessage:
        """Save the user message, retitling the session on its first one."""
        is_first = await self._chat_repo.count_user_messages(session_id) == 0
        message = await self._chat_repo.append_message(session_id, content, is_bot=False)
        if is_first:
            title = build_session_title(content, self._config.title_max_length)
            await self._chat_repo.update_session(session_id, {"title": title})
            logger.info("Session retitled", session_id=session_id, title=title)
        await self._chat_repo.touch_session(session_id)
        await self._chat_repo.commit()
        return message

    def _build_context(
        self,
        prior: list[ChatMessage],
        content: str,
        preferences: ChatPreferences,
    ) -> list[CompletionMessage]:
        """System prompt, the last N prior messages oldest first, then the new one."""
        window = prior[-self._config.history_window :]
        return [
            CompletionMessage(role="system", content=build_system_prompt(preferences)),
            *(CompletionMessage(role=m.role, content=m.content) for m in window),
            CompletionMessage(role="user", content=content),
        ]

    async def _failed_turn(
        self,
        session_id: str,
        user_message: MessageResponse,
        notice: str,
    ) -> TurnResponse:
        self._log_state(session_id, TurnState.ERROR)
        session = await self._get_session_or_raise(session_id)
        self._log_state(session_id, TurnState.IDLE)
        return TurnResponse(
            status=TurnStatus.FAILED,
            user_message=user_message,
            session=SessionResponse.model_validate(session),
            notice=notice,
        )

    @staticmethod
    def _log_state(session_id: str, state: TurnState) -> None:
        logger.info("Turn state changed", session_id=session_id, state=state.value)
