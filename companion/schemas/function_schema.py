"""Wire schemas for the model proxy functions.

The completion response mirrors the upstream chat-completion envelope so
callers read ``choices[0].message.content`` whether or not a fallback was
used.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class CompletionMessage(BaseModel):
    """One message of a chat-completion request."""

    role: Literal["system", "user", "assistant"]
    content: str


class CompletionRequest(BaseModel):
    """Chat-completion function request."""

    messages: list[CompletionMessage] = Field(default_factory=list)


class CompletionChoiceMessage(BaseModel):
    """Message payload of a completion choice."""

    role: Literal["assistant"] = "assistant"
    content: str


class CompletionChoice(BaseModel):
    """Single completion choice."""

    message: CompletionChoiceMessage


class CompletionResponse(BaseModel):
    """Chat-completion function response."""

    choices: list[CompletionChoice]

    @classmethod
    def from_text(cls, content: str) -> "CompletionResponse":
        """Wrap reply text in the upstream envelope."""
        return cls(choices=[CompletionChoice(message=CompletionChoiceMessage(content=content))])

    @property
    def content(self) -> str:
        """Reply text of the first choice."""
        return self.choices[0].message.content


class SuggestionContextMessage(BaseModel):
    """Conversation message supplied as suggestion context."""

    model_config = ConfigDict(populate_by_name=True)

    content: str
    is_bot: bool = Field(default=False, alias="isBot")


class SuggestionRequest(BaseModel):
    """Suggestion function request."""

    model_config = ConfigDict(populate_by_name=True)

    messages: list[SuggestionContextMessage] = Field(default_factory=list)
    current_state: str | None = Field(default=None, alias="currentState")


class SuggestionResponse(BaseModel):
    """Suggestion function response."""

    suggestions: list[str]
