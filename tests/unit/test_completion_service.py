"""Unit tests for CompletionService."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import SystemMessage

from companion.schemas.function_schema import CompletionMessage
from companion.services.completion_service import FALLBACK_REPLY, CompletionService
from companion.services.prompts import DEFAULT_SYSTEM_PROMPT
from tests.conftest import make_llm


def _messages() -> list[CompletionMessage]:
    return [CompletionMessage(role="user", content="I feel anxious today")]


class TestComplete:
    """Tests for CompletionService.complete."""

    @pytest.mark.asyncio
    async def test_primary_reply(self) -> None:
        primary = make_llm("I'm sorry to hear that. 💭")
        secondary = make_llm("unused")
        service = CompletionService(primary, secondary)

        response = await service.complete(_messages())

        assert response.content == "I'm sorry to hear that. 💭"
        secondary.ainvoke.assert_not_called()

    @pytest.mark.asyncio
    async def test_secondary_used_when_primary_fails(self) -> None:
        primary = make_llm(error=RuntimeError("503 from provider"))
        secondary = make_llm("Secondary reply")
        service = CompletionService(primary, secondary)

        response = await service.complete(_messages())

        assert response.content == "Secondary reply"
        sent_primary = primary.ainvoke.call_args.args[0]
        sent_secondary = secondary.ainvoke.call_args.args[0]
        assert sent_primary == sent_secondary

    @pytest.mark.asyncio
    async def test_empty_primary_reply_falls_through(self) -> None:
        service = CompletionService(make_llm("   "), make_llm("Secondary reply"))

        response = await service.complete(_messages())

        assert response.content == "Secondary reply"

    @pytest.mark.asyncio
    async def test_both_fail_returns_fallback(self, failing_llm: MagicMock) -> None:
        service = CompletionService(failing_llm, make_llm(error=ValueError()))

        response = await service.complete(_messages())

        assert response.content == FALLBACK_REPLY

    @pytest.mark.asyncio
    async def test_timeout_treated_as_failure(self) -> None:
        async def _hang(*args: object, **kwargs: object) -> None:
            await asyncio.sleep(10)

        slow = MagicMock(spec=BaseChatModel)
        slow.ainvoke = AsyncMock(side_effect=_hang)
        service = CompletionService(slow, make_llm("Quick reply"), timeout_seconds=0.05)

        response = await service.complete(_messages())

        assert response.content == "Quick reply"

    @pytest.mark.asyncio
    async def test_default_system_prompt_prepended(self, mock_llm: MagicMock) -> None:
        service = CompletionService(mock_llm, make_llm())

        await service.complete(_messages())

        sent = mock_llm.ainvoke.call_args.args[0]
        assert isinstance(sent[0], SystemMessage)
        assert sent[0].content == DEFAULT_SYSTEM_PROMPT
        assert len(sent) == 2

    @pytest.mark.asyncio
    async def test_caller_system_prompt_kept(self, mock_llm: MagicMock) -> None:
        service = CompletionService(mock_llm, make_llm())
        messages = [
            CompletionMessage(role="system", content="Be brief."),
            *_messages(),
        ]

        await service.complete(messages)

        sent = mock_llm.ainvoke.call_args.args[0]
        assert len(sent) == 2
        assert sent[0].content == "Be brief."

    @pytest.mark.asyncio
    async def test_empty_message_list(self, mock_llm: MagicMock) -> None:
        service = CompletionService(mock_llm, make_llm())

        response = await service.complete([])

        assert response.content == "Test response"
