"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from legal_triage.api.deps import get_config_store
from legal_triage.api.v1.router import api_router
from legal_triage.core.config import settings
from legal_triage.core.exceptions import AppError, StorageError, ValidationError
from legal_triage.core.logging import setup_logging
from legal_triage.rules.validation import issues_from_errors

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)


def _log_config_summary() -> None:
    """Log counts from the loaded triage configuration."""
    store = get_config_store()

    if not settings.triage_seed_on_startup and not store.exists():
        logger.warning(f"No triage configuration at {store.config_path}")
        return

    try:
        if settings.triage_seed_on_startup:
            store.initialize()
        config = store.get_config()
    except StorageError:
        logger.exception("Failed to load triage configuration on startup")
        return

    logger.info(
        f"Triage configuration loaded: request_types={len(config.request_types)} "
        f"condition_fields={len(config.condition_fields)} rules={len(config.rules)}"
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    logger.info(f"Starting Legal Triage API (env={settings.env})")

    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; chat requests will be unauthenticated")

    _log_config_summary()

    app.state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.openai_timeout_seconds),
    )

    yield

    # Shutdown
    await app.state.http_client.aclose()
    logger.info("Shutting down Legal Triage API")


# Create FastAPI application
app = FastAPI(
    title="Legal Triage API",
    description="Rule-driven legal request triage assistant",
    version="0.1.0",
    docs_url="/docs" if settings.is_dev else None,
    redoc_url="/redoc" if settings.is_dev else None,
    openapi_url="/openapi.json" if settings.is_dev else None,
    lifespan=lifespan,
)

# CORS middleware (configure appropriately for production)
if settings.is_dev:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _validation_response(errors: list[dict[str, str]]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation failed", "errors": errors},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request body errors like domain validation errors."""
    errors = []
    for error in exc.errors():
        loc = tuple(error.get("loc", ()))
        if loc and loc[0] == "body":
            loc = loc[1:]
        errors.append({**error, "loc": loc})

    issues = issues_from_errors(errors)
    logger.warning(f"Validation error: {request.method} {request.url.path} issues={len(issues)}")
    return _validation_response([{"field": i.field, "message": i.message} for i in issues])


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle domain validation errors."""
    logger.warning(f"Validation error: {request.method} {request.url.path} {exc}")
    return _validation_response(exc.to_list())


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle operational errors raised by services."""
    logger.warning(
        f"Operational error: {request.method} {request.url.path} "
        f"status={exc.status_code} message={exc.message}"
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions."""
    logger.exception(f"Unhandled exception: {exc}")

    # Only expose internal errors in development
    if not settings.is_dev:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "error": str(exc)},
    )


# Include API router
app.include_router(api_router, prefix="/api/v1")


# Root endpoint
@app.get("/", include_in_schema=False)
async def root() -> dict:
    """Root endpoint with service info."""
    return {
        "service": "Legal Triage API",
        "version": "0.1.0",
        "docs": "/docs" if settings.is_dev else "Disabled in production",
    }
