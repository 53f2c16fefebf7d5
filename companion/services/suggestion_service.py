"""Quick-reply suggestion generation with layered fallbacks."""

import asyncio
import re

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from companion.core.exceptions import ParseError, UpstreamModelError
from companion.schemas.function_schema import SuggestionContextMessage
from companion.services.prompts import (
    FOLLOW_UP_SUGGESTION_REQUEST,
    INITIAL_SUGGESTION_REQUEST,
    SUGGESTION_SYSTEM_PROMPT,
)
from companion.services.suggestion_fallbacks import fallback_suggestions

logger = structlog.get_logger()

# Boundaries between suggestions: newlines, bullets, and "1." / "2)" numbering
# at the start of a line or after whitespace. Hyphens only count when leading.
_SUGGESTION_BOUNDARY = re.compile(r"\r?\n|[•‣◦]|(?:(?<=\s)|^)\d+[.)]\s", re.MULTILINE)
# Leading list markers: "1.", "2)", "-", "*", "•"
_LIST_MARKER = re.compile(r"^\s*(?:\d+\s*[.)]|[-*•‣◦])\s*")
_WRAPPING_QUOTES = "\"'“”‘’"


def parse_suggestions(text: str, limit: int = 5, max_length: int = 100) -> list[str]:
    """Split model output into clean, unique suggestions.

    Handles one suggestion per line as well as numbered or bulleted lists run
    together on a single line.

    Raises:
        ParseError: if no usable line remains.
    """
    suggestions: list[str] = []
    seen: set[str] = set()
    for raw in _SUGGESTION_BOUNDARY.split(text):
        line = _LIST_MARKER.sub("", raw).strip().strip(_WRAPPING_QUOTES).strip()
        if not line or len(line) > max_length:
            continue
        key = line.casefold()
        if key in seen:
            continue
        seen.add(key)
        suggestions.append(line)
        if len(suggestions) == limit:
            break

    if not suggestions:
        raise ParseError("Model output contained no usable suggestions")
    return suggestions


class SuggestionService:
    """Produces first-person quick replies from recent conversation context.

    Fallback order: primary model, secondary model, then a static list for
    the keyword-detected topic. :meth:`suggest` never raises.
    """

    def __init__(
        self,
        primary_llm: BaseChatModel,
        secondary_llm: BaseChatModel,
        count: int = 5,
        max_length: int = 100,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._primary_llm = primary_llm
        self._secondary_llm = secondary_llm
        self._count = count
        self._max_length = max_length
        self._timeout = timeout_seconds

    async def suggest(
        self,
        messages: list[SuggestionContextMessage],
        current_state: str | None = None,
    ) -> list[str]:
        """Return up to ``count`` suggestions for the given conversation."""
        prompt = self._build_prompt(messages, current_state)

        for label, llm in (("primary", self._primary_llm), ("secondary", self._secondary_llm)):
            try:
                text = await self._invoke(llm, prompt)
                suggestions = parse_suggestions(
                    text, limit=self._count, max_length=self._max_length
                )
            except (UpstreamModelError, ParseError) as exc:
                logger.warning(
                    "Suggestion model failed", model=label, code=exc.code, error=exc.message
                )
                continue
            return suggestions

        topic, suggestions = fallback_suggestions(
            " ".join(msg.content for msg in messages)
        )
        logger.info("Using fallback suggestions", topic=topic)
        return suggestions[: self._count]

    def _build_prompt(
        self,
        messages: list[SuggestionContextMessage],
        current_state: str | None,
    ) -> list[BaseMessage]:
        """Build the suggestion prompt, with or without conversation context."""
        prompt: list[BaseMessage] = [SystemMessage(content=SUGGESTION_SYSTEM_PROMPT)]
        if current_state == "initial" or not messages:
            prompt.append(
                HumanMessage(content=INITIAL_SUGGESTION_REQUEST.format(count=self._count))
            )
            return prompt

        for msg in messages:
            if msg.is_bot:
                prompt.append(AIMessage(content=msg.content))
            else:
                prompt.append(HumanMessage(content=msg.content))
        prompt.append(
            HumanMessage(content=FOLLOW_UP_SUGGESTION_REQUEST.format(count=self._count))
        )
        return prompt

    async def _invoke(self, llm: BaseChatModel, prompt: list[BaseMessage]) -> str:
        try:
            response = await asyncio.wait_for(llm.ainvoke(prompt), timeout=self._timeout)
        except TimeoutError as exc:
            raise UpstreamModelError("Language model request timed out") from exc
        except Exception as exc:
            raise UpstreamModelError(str(exc) or type(exc).__name__) from exc
        return str(response.content)
