"""Global dependencies for the application."""

from functools import lru_cache

from fastapi import Depends
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI
from sqlalchemy.ext.asyncio import AsyncSession

from companion.core.config import settings
from companion.core.database import get_async_session
from companion.core.redis import get_redis
from companion.repositories.chat_repo import ChatRepository
from companion.services.completion_service import CompletionService
from companion.services.conversation_service import ConversationService
from companion.services.suggestion_service import SuggestionService
from companion.services.turn_lock import TurnLock


@lru_cache
def get_llm(model: str, max_tokens: int) -> BaseChatModel:
    """Get a chat model for the configured provider.

    Client-side retries are disabled; the services fall back to the secondary
    model instead.
    """
    llm_config = settings.llm
    match llm_config.provider:
        case "openai":
            return ChatOpenAI(
                model=model,
                api_key=llm_config.openai_api_key,
                temperature=llm_config.temperature,
                max_tokens=max_tokens,  # type: ignore[call-arg]
                timeout=llm_config.timeout_seconds,
                max_retries=0,
            )
        case "anthropic":
            return ChatAnthropic(  # type: ignore[call-arg]
                model_name=model,
                api_key=llm_config.anthropic_api_key,
                temperature=llm_config.temperature,
                max_tokens=max_tokens,
                timeout=llm_config.timeout_seconds,
                max_retries=0,
            )
        case _:
            raise ValueError(f"Unsupported LLM provider: {llm_config.provider}")


def get_completion_service() -> CompletionService:
    """Get CompletionService with primary and secondary reply models."""
    llm_config = settings.llm
    return CompletionService(
        primary_llm=get_llm(llm_config.primary_model, llm_config.max_tokens),
        secondary_llm=get_llm(llm_config.secondary_model, llm_config.max_tokens),
        timeout_seconds=llm_config.timeout_seconds,
    )


def get_suggestion_service() -> SuggestionService:
    """Get SuggestionService with primary and secondary suggestion models."""
    llm_config = settings.llm
    return SuggestionService(
        primary_llm=get_llm(llm_config.primary_model, llm_config.suggestion_max_tokens),
        secondary_llm=get_llm(
            llm_config.secondary_model, llm_config.suggestion_max_tokens
        ),
        count=settings.conversation.suggestion_count,
        max_length=settings.conversation.suggestion_max_length,
        timeout_seconds=llm_config.timeout_seconds,
    )


def get_turn_lock() -> TurnLock:
    """Get TurnLock backed by the active Redis client."""
    return TurnLock(get_redis(), ttl_seconds=settings.conversation.turn_lock_ttl_seconds)


def get_chat_repository(
    session: AsyncSession = Depends(get_async_session),
) -> ChatRepository:
    """Get ChatRepository bound to the current session."""
    return ChatRepository(session)


def get_conversation_service(
    chat_repo: ChatRepository = Depends(get_chat_repository),
    completion_service: CompletionService = Depends(get_completion_service),
    suggestion_service: SuggestionService = Depends(get_suggestion_service),
    turn_lock: TurnLock = Depends(get_turn_lock),
) -> ConversationService:
    """Get ConversationService wired to the store, models and turn lock."""
    return ConversationService(
        chat_repo=chat_repo,
        completion_service=completion_service,
        suggestion_service=suggestion_service,
        turn_lock=turn_lock,
        config=settings.conversation,
        reply_timeout_seconds=settings.llm.timeout_seconds * 2 + 5,
    )
