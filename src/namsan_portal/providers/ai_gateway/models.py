"""Models for the AI gateway provider (chat messages and completion params)."""
from typing import Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """One chat turn in OpenAI-compatible shape."""

    role: Literal["system", "user", "assistant"]
    content: str


class ChatCompletionParams(BaseModel):
    """Body for POST /chat/completions."""

    model: str
    messages: list[ChatMessage] = Field(default_factory=list)
    stream: bool = True
