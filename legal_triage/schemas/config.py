"""Pydantic schemas for configuration endpoints.

The configuration document itself is served with the models from
``legal_triage.rules.models``.
"""

from pydantic import Field

from legal_triage.rules.models import TriageModel


class PromptPreview(TriageModel):
    """Schema for the rendered system prompt."""

    prompt: str
    prompt_hash: str = Field(..., description="SHA-256 of the prompt")
    rule_count: int


class ResolveRequest(TriageModel):
    """Schema for resolving an assignee from gathered facts."""

    request_type: str = Field(..., min_length=1)
    facts: dict[str, str] = Field(
        default_factory=dict,
        description="Condition field name to value",
        examples=[{"location": "Australia"}],
    )


class ResolveResponse(TriageModel):
    """Schema for an assignee resolution."""

    matched: bool
    rule_id: str | None = None
    assignee: str
