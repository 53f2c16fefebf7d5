"""Chat completion with secondary-model and canned-reply fallbacks."""

import asyncio

import structlog
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, SystemMessage

from companion.core.exceptions import UpstreamModelError
from companion.schemas.function_schema import CompletionMessage, CompletionResponse
from companion.services.prompts import DEFAULT_SYSTEM_PROMPT, to_langchain_messages

logger = structlog.get_logger()

FALLBACK_REPLY = (
    "I'm here to support you. 💭 While I'm having a technical issue at the moment, "
    "I'd still like to help. Your feelings are valid, and many people go through "
    "similar experiences. Could you share more about what's on your mind?"
)


class CompletionService:
    """Forwards a conversation to the language model and returns its reply.

    The primary model is tried first; on any failure the same messages are
    sent to the secondary model. If both fail a fixed supportive reply is
    returned, so :meth:`complete` never raises.
    """

    def __init__(
        self,
        primary_llm: BaseChatModel,
        secondary_llm: BaseChatModel,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._primary_llm = primary_llm
        self._secondary_llm = secondary_llm
        self._timeout = timeout_seconds

    async def complete(self, messages: list[CompletionMessage]) -> CompletionResponse:
        """Return the assistant reply for a role-tagged message list."""
        prompt = self._with_system_prompt(to_langchain_messages(messages))

        for label, llm in (("primary", self._primary_llm), ("secondary", self._secondary_llm)):
            try:
                content = await self._invoke(llm, prompt)
            except UpstreamModelError as exc:
                logger.warning("Completion model failed", model=label, error=exc.message)
                continue
            logger.info("Completion received", model=label, length=len(content))
            return CompletionResponse.from_text(content)

        logger.error("All completion models failed, returning fallback reply")
        return CompletionResponse.from_text(FALLBACK_REPLY)

    async def _invoke(self, llm: BaseChatModel, prompt: list[BaseMessage]) -> str:
        """Call one model under the timeout, normalising failures."""
        try:
            response = await asyncio.wait_for(llm.ainvoke(prompt), timeout=self._timeout)
        except TimeoutError as exc:
            raise UpstreamModelError("Language model request timed out") from exc
        except Exception as exc:
            raise UpstreamModelError(str(exc) or type(exc).__name__) from exc

        content = str(response.content).strip()
        if not content:
            raise UpstreamModelError("Language model returned an empty reply")
        return content

    @staticmethod
    def _with_system_prompt(messages: list[BaseMessage]) -> list[BaseMessage]:
        """Prepend the default persona prompt unless the caller supplied one."""
        if any(isinstance(msg, SystemMessage) for msg in messages):
            return messages
        return [SystemMessage(content=DEFAULT_SYSTEM_PROMPT), *messages]
