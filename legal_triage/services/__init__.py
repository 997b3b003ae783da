"""Business logic services."""

from legal_triage.services.chat import ChatService, LLMConfig
from legal_triage.services.triage import Resolution, TriageService

__all__ = [
    "ChatService",
    "LLMConfig",
    "Resolution",
    "TriageService",
]
