"""Pydantic schemas for chat operations."""

from typing import Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """A single conversation message."""

    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Schema for a chat request."""

    messages: list[ChatMessage] = Field(
        ...,
        min_length=1,
        description="Conversation history, oldest first",
    )
