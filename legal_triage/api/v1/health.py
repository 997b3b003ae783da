"""Health check endpoints."""

import logging

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from legal_triage.api.deps import get_config_store
from legal_triage.core.exceptions import StorageError
from legal_triage.rules.store import ConfigStore

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Returns service health status",
)
async def health_check() -> HealthResponse:
    """Check if the service is healthy.

    Returns:
        Health status response
    """
    return HealthResponse(status="ok")


@router.get(
    "/ready",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Returns 503 until the triage configuration can be read",
)
async def readiness_check(
    response: Response,
    store: ConfigStore = Depends(get_config_store),
) -> HealthResponse:
    """Check if the service is ready to accept requests.

    Returns:
        Readiness status response
    """
    try:
        store.get_config()
    except StorageError as e:
        logger.warning(f"Readiness check failed: {e}")
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="unavailable")

    return HealthResponse(status="ok")
