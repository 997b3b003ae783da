"""FastAPI dependency injection utilities."""

from functools import lru_cache
from typing import Annotated

import httpx
from fastapi import Depends, Request

from legal_triage.core.config import settings
from legal_triage.rules.store import ConfigStore
from legal_triage.services.chat import ChatService, LLMConfig
from legal_triage.services.triage import TriageService


@lru_cache
def get_config_store() -> ConfigStore:
    """Get the process-wide config store.

    A single instance means a single mutation lock for the document.
    """
    return ConfigStore(settings.triage_config_path)


def get_triage_service(
    store: Annotated[ConfigStore, Depends(get_config_store)],
) -> TriageService:
    """Get a triage service bound to the config store."""
    return TriageService(
        store,
        organization_name=settings.organization_name,
        fallback_email=settings.fallback_email,
    )


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Get the shared HTTP client created at startup."""
    return request.app.state.http_client


def get_chat_service(
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> ChatService:
    """Get a chat service using the configured model endpoint."""
    return ChatService(
        client,
        LLMConfig(
            model_id=settings.openai_model,
            api_base_url=settings.openai_base_url,
            api_key=settings.openai_api_key,
            max_tokens=settings.openai_max_tokens,
            temperature=settings.openai_temperature,
        ),
    )


TriageServiceDep = Annotated[TriageService, Depends(get_triage_service)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
