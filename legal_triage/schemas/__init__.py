"""Pydantic schemas for request/response validation."""

from legal_triage.schemas.chat import ChatMessage, ChatRequest
from legal_triage.schemas.config import PromptPreview, ResolveRequest, ResolveResponse

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "PromptPreview",
    "ResolveRequest",
    "ResolveResponse",
]
