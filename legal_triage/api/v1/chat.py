"""Chat endpoints."""

import logging

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from legal_triage.api.deps import ChatServiceDep, TriageServiceDep
from legal_triage.rules.engine import prompt_hash
from legal_triage.schemas.chat import ChatRequest
from legal_triage.services.chat import build_messages

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_class=StreamingResponse,
    summary="Stream chat completion",
    description="Streams the assistant reply as plain text",
)
async def stream_chat(
    request: ChatRequest,
    triage_service: TriageServiceDep,
    chat_service: ChatServiceDep,
) -> StreamingResponse:
    """Stream a chat completion guided by the triage configuration."""
    system_prompt = await triage_service.build_system_prompt()
    messages = build_messages(
        system_prompt,
        [m.model_dump() for m in request.messages],
    )
    logger.info(f"Chat request: messages={len(messages)} prompt_hash={prompt_hash(system_prompt)}")

    # Open upstream before responding so failures map to an error status
    upstream = await chat_service.open_stream(messages)

    return StreamingResponse(
        chat_service.iter_content(upstream, len(messages)),
        media_type="text/plain; charset=utf-8",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
