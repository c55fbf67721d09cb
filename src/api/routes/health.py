"""Health check endpoints."""
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Request
from pydantic import BaseModel

from src.api.deps import FileStoreDep
from src.core.config import settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    message: str
    version: str
    environment: str
    timestamp: datetime


class ReadinessResponse(BaseModel):
    """Readiness check response with component status."""

    ready: bool
    checks: dict[str, bool]
    timestamp: datetime


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check - always returns OK if the service is running."""
    return HealthResponse(
        status="ok",
        message="Storage API is running",
        version=settings.app_version,
        environment=settings.environment.value,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "alive"}


@router.get("/ready", response_model=ReadinessResponse)
async def readiness(request: Request, store: FileStoreDep) -> ReadinessResponse:
    """Readiness probe - app started and storage directories present."""
    checks = {
        "app": getattr(request.app.state, "ready", False),
        "storage": store.files_path.is_dir() and store.metadata.base_path.is_dir(),
    }

    return ReadinessResponse(
        ready=all(checks.values()),
        checks=checks,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/info")
async def info() -> dict[str, Any]:
    """Application information endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment.value,
        "storage": {
            "bucket": settings.bucket_name,
            "max_upload_size_mb": settings.max_upload_size_mb,
            "max_upload_files": settings.max_upload_files,
        },
    }
