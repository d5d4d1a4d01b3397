"""Data models for the conversation log.

These models define what a displayed message is, independent of how the log
is observed or rendered.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ..analysis.models import Source

DEFAULT_GREETING = (
    "Hello! I'm an AI assistant designed to help you analyze content for potential "
    "misinformation. Paste a news snippet, an article, or any text you're unsure about, "
    "and I'll provide an analysis."
)

FAILURE_TEXT = (
    "Sorry, I couldn't process your request. The server might be busy. "
    "Please try again later."
)


class Message(BaseModel):
    """One entry of the conversation log. Never mutated once appended."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Message body (markdown for bot messages)")
    is_user: bool = Field(default=False, description="True for user submissions")
    sources: tuple[Source, ...] = Field(default=(), description="Cited sources, in order")
    is_error: bool = Field(default=False, description="True for terminal failure notices")
    timestamp: datetime = Field(default_factory=datetime.now)

    @property
    def role(self) -> str:
        return "user" if self.is_user else "assistant"


EventKind = Literal["appended", "reset", "request_started", "request_finished"]


class ConversationEvent(BaseModel):
    """Notification delivered to conversation subscribers."""

    model_config = ConfigDict(frozen=True)

    kind: EventKind
    message: Message | None = None
