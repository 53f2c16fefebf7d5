"""Model proxy functions: chat completion and prompt suggestions.

Both endpoints answer HTTP 200 in every case, including malformed request
bodies; failures are encoded as fallback content rather than status codes.
"""

import json
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from companion.core.config import settings
from companion.core.rate_limit import limiter
from companion.dependencies import get_completion_service, get_suggestion_service
from companion.schemas.function_schema import (
    CompletionRequest,
    CompletionResponse,
    SuggestionRequest,
    SuggestionResponse,
)
from companion.services.completion_service import FALLBACK_REPLY, CompletionService
from companion.services.suggestion_fallbacks import fallback_suggestions
from companion.services.suggestion_service import SuggestionService

logger = structlog.get_logger()

router = APIRouter(prefix="/functions/v1", tags=["functions"])

CompletionServiceDep = Annotated[CompletionService, Depends(get_completion_service)]
SuggestionServiceDep = Annotated[SuggestionService, Depends(get_suggestion_service)]


async def _read_json(request: Request) -> object:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


@router.post("/chat", response_model=CompletionResponse)
@limiter.limit(settings.conversation.functions_rate_limit)
async def chat_completion(
    request: Request,
    service: CompletionServiceDep,
) -> CompletionResponse:
    """Return the assistant reply in the upstream chat-completion envelope."""
    try:
        body = CompletionRequest.model_validate(await _read_json(request))
    except ValidationError as exc:
        logger.warning("Invalid completion request", errors=exc.error_count())
        return CompletionResponse.from_text(FALLBACK_REPLY)
    return await service.complete(body.messages)


@router.post("/generate-prompts", response_model=SuggestionResponse)
@limiter.limit(settings.conversation.functions_rate_limit)
async def generate_prompts(
    request: Request,
    service: SuggestionServiceDep,
) -> SuggestionResponse:
    """Return quick-reply suggestions for the supplied conversation."""
    try:
        body = SuggestionRequest.model_validate(await _read_json(request))
    except ValidationError as exc:
        logger.warning("Invalid suggestion request", errors=exc.error_count())
        _, suggestions = fallback_suggestions("")
        return SuggestionResponse(suggestions=suggestions)
    suggestions = await service.suggest(body.messages, body.current_state)
    return SuggestionResponse(suggestions=suggestions)
