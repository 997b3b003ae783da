"""API v1 router aggregating all endpoints."""

from fastapi import APIRouter

from legal_triage.api.v1 import chat, config, health

api_router = APIRouter()

# Health check
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"],
)

# Triage configuration
api_router.include_router(
    config.router,
    prefix="/config",
    tags=["config"],
)

# Chat
api_router.include_router(
    chat.router,
    prefix="/chat",
    tags=["chat"],
)
