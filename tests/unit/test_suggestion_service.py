"""Unit tests for SuggestionService and suggestion parsing."""

from unittest.mock import MagicMock

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from companion.core.exceptions import ParseError
from companion.schemas.function_schema import SuggestionContextMessage
from companion.services.suggestion_fallbacks import FALLBACK_SUGGESTIONS
from companion.services.suggestion_service import SuggestionService, parse_suggestions
from tests.conftest import make_llm


class TestParseSuggestions:
    """Tests for parse_suggestions."""

    def test_strips_markers_and_quotes(self) -> None:
        text = '1. How can I relax?\n2) "I feel tired."\n- Tell me more\n• What helps?'
        assert parse_suggestions(text) == [
            "How can I relax?",
            "I feel tired.",
            "Tell me more",
            "What helps?",
        ]

    def test_single_line_numbered_list(self) -> None:
        text = "1. I feel anxious today 2. How can I sleep better? 3. Can we talk about work?"
        assert parse_suggestions(text) == [
            "I feel anxious today",
            "How can I sleep better?",
            "Can we talk about work?",
        ]

    def test_single_line_bulleted_list(self) -> None:
        text = "• I feel lonely • Help me relax • I can't focus"
        assert parse_suggestions(text) == [
            "I feel lonely",
            "Help me relax",
            "I can't focus",
        ]

    def test_inner_hyphens_and_numbers_kept(self) -> None:
        text = "- What is self-care?\n- I slept 5 hours last night"
        assert parse_suggestions(text) == [
            "What is self-care?",
            "I slept 5 hours last night",
        ]

    def test_drops_blank_and_duplicate_lines(self) -> None:
        text = "How can I relax?\n\n  \nhow can i relax?\nI feel tired."
        assert parse_suggestions(text) == ["How can I relax?", "I feel tired."]

    def test_limit_and_length(self) -> None:
        text = "\n".join(["x" * 120, *[f"Suggestion {i}" for i in range(8)]])
        result = parse_suggestions(text, limit=5, max_length=100)
        assert result == [f"Suggestion {i}" for i in range(5)]

    def test_nothing_usable_raises(self) -> None:
        with pytest.raises(ParseError):
            parse_suggestions("\n - \n")


class TestSuggest:
    """Tests for SuggestionService.suggest."""

    @pytest.mark.asyncio
    async def test_primary_suggestions(self) -> None:
        primary = make_llm("How can I relax?\nI feel tired.")
        service = SuggestionService(primary, make_llm())

        result = await service.suggest([])

        assert result == ["How can I relax?", "I feel tired."]

    @pytest.mark.asyncio
    async def test_secondary_used_when_primary_fails(self, failing_llm: MagicMock) -> None:
        secondary = make_llm("What is mindfulness?")
        service = SuggestionService(failing_llm, secondary)

        result = await service.suggest([SuggestionContextMessage(content="Hi")])

        assert result == ["What is mindfulness?"]

    @pytest.mark.asyncio
    async def test_unparseable_primary_falls_through(self) -> None:
        service = SuggestionService(make_llm("   "), make_llm("I need help"))

        assert await service.suggest([]) == ["I need help"]

    @pytest.mark.asyncio
    async def test_topic_fallback_when_both_fail(self, failing_llm: MagicMock) -> None:
        service = SuggestionService(failing_llm, failing_llm)
        messages = [
            SuggestionContextMessage(content="I've been so anxious lately", is_bot=False),
            SuggestionContextMessage(content="I'm sorry to hear that.", is_bot=True),
            SuggestionContextMessage(content="Last night I had a panic attack"),
        ]

        result = await service.suggest(messages)

        assert result == FALLBACK_SUGGESTIONS["anxiety"]

    @pytest.mark.asyncio
    async def test_general_fallback_without_context(self, failing_llm: MagicMock) -> None:
        service = SuggestionService(failing_llm, failing_llm)

        result = await service.suggest([])

        assert result == FALLBACK_SUGGESTIONS["general"]

    @pytest.mark.asyncio
    async def test_results_bounded(self) -> None:
        lines = "\n".join(f"Thing number {i}" for i in range(10))
        service = SuggestionService(make_llm(lines), make_llm(), count=3, max_length=20)

        result = await service.suggest([])

        assert len(result) == 3
        assert all(len(s) <= 20 for s in result)

    @pytest.mark.asyncio
    async def test_fallback_respects_count(self, failing_llm: MagicMock) -> None:
        service = SuggestionService(failing_llm, failing_llm, count=2)

        assert len(await service.suggest([])) == 2


class TestBuildPrompt:
    """Prompt shape for initial and follow-up requests."""

    @pytest.mark.asyncio
    async def test_initial_prompt(self, mock_llm: MagicMock) -> None:
        service = SuggestionService(mock_llm, make_llm())

        await service.suggest([SuggestionContextMessage(content="Hi")], "initial")

        sent = mock_llm.ainvoke.call_args.args[0]
        assert isinstance(sent[0], SystemMessage)
        assert len(sent) == 2
        assert "starting a new conversation" in sent[1].content

    @pytest.mark.asyncio
    async def test_context_prompt(self, mock_llm: MagicMock) -> None:
        service = SuggestionService(mock_llm, make_llm())

        await service.suggest(
            [
                SuggestionContextMessage(content="How are you?", is_bot=True),
                SuggestionContextMessage(content="Not great"),
            ]
        )

        sent = mock_llm.ainvoke.call_args.args[0]
        assert [type(m) for m in sent] == [
            SystemMessage,
            AIMessage,
            HumanMessage,
            HumanMessage,
        ]
        assert sent[1].content == "How are you?"
        assert "Based on our conversation" in sent[-1].content
