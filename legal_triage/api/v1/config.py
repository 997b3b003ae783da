"""Triage configuration endpoints."""

from fastapi import APIRouter, status

from legal_triage.api.deps import TriageServiceDep
from legal_triage.rules.engine import prompt_hash
from legal_triage.rules.models import TriageConfig, TriageRuleDraft
from legal_triage.schemas.config import PromptPreview, ResolveRequest, ResolveResponse

router = APIRouter()


@router.get(
    "",
    response_model=TriageConfig,
    response_model_exclude_none=True,
    summary="Get triage configuration",
)
async def get_config(service: TriageServiceDep) -> TriageConfig:
    """Retrieve the complete triage configuration."""
    return await service.get_config()


@router.put(
    "",
    response_model=TriageConfig,
    response_model_exclude_none=True,
    summary="Replace triage configuration",
)
async def update_config(config: TriageConfig, service: TriageServiceDep) -> TriageConfig:
    """Replace the complete triage configuration and return what was stored."""
    return await service.save_config(config)


@router.post(
    "/rules",
    response_model=TriageConfig,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Add triage rule",
)
async def add_rule(rule: TriageRuleDraft, service: TriageServiceDep) -> TriageConfig:
    """Add a new triage rule. An id is generated when none is given."""
    return await service.add_rule(rule)


@router.put(
    "/rules/{rule_id}",
    response_model=TriageConfig,
    response_model_exclude_none=True,
    summary="Update triage rule",
)
async def update_rule(
    rule_id: str,
    rule: TriageRuleDraft,
    service: TriageServiceDep,
) -> TriageConfig:
    """Replace an existing triage rule."""
    return await service.update_rule(rule_id, rule)


@router.delete(
    "/rules/{rule_id}",
    response_model=TriageConfig,
    response_model_exclude_none=True,
    summary="Delete triage rule",
)
async def delete_rule(rule_id: str, service: TriageServiceDep) -> TriageConfig:
    """Delete a triage rule."""
    return await service.delete_rule(rule_id)


@router.get(
    "/prompt",
    response_model=PromptPreview,
    summary="Preview system prompt",
    description="Returns the system prompt the chat assistant currently receives",
)
async def get_prompt(service: TriageServiceDep) -> PromptPreview:
    """Render the system prompt for the current configuration."""
    config = await service.get_config()
    prompt = await service.build_system_prompt()

    return PromptPreview(
        prompt=prompt,
        prompt_hash=prompt_hash(prompt),
        rule_count=len(config.rules),
    )


@router.post(
    "/resolve",
    response_model=ResolveResponse,
    summary="Resolve assignee",
    description="Applies the rules in priority order to gathered facts",
)
async def resolve_assignee(
    request: ResolveRequest,
    service: TriageServiceDep,
) -> ResolveResponse:
    """Resolve the assignee for a request type and gathered facts."""
    resolution = await service.resolve_assignee(request.request_type, request.facts)

    return ResolveResponse(
        matched=resolution.matched,
        rule_id=resolution.rule_id,
        assignee=resolution.assignee,
    )
