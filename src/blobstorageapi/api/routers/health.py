"""
Health check endpoints.
"""

import asyncio
import logging
from datetime import datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel

from ... import __version__
from ...core.exceptions import ConfigurationError
from ..deps import BlobServiceDep, CosmosServiceDep
from ..schemas.common import ApiResponse
from ..utils.responses import ok

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger("blobstorageapi")

CHECK_TIMEOUT_SECONDS = 10.0


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    timestamp: datetime
    version: str
    service: str


async def _check_backend(name: str, check) -> str:
    try:
        await asyncio.wait_for(check(), timeout=CHECK_TIMEOUT_SECONDS)
        return "ok"
    except ConfigurationError:
        return "not_configured"
    except Exception as e:
        logger.error(f"{name} connectivity test failed: {e}")
        return f"error: {str(e)[:50]}"


@router.get("/", response_model=ApiResponse[HealthResponse])
async def health_check(request: Request):
    """
    Health check endpoint.

    Returns the current status of the service.
    """
    return ok(request, data=HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow(),
        version=__version__,
        service="Blob Storage API",
    ), message="OK")


@router.get("/ready", response_model=ApiResponse[dict])
async def readiness_check(
    request: Request,
    blob_service: BlobServiceDep,
    cosmos_service: CosmosServiceDep,
):
    """
    Readiness check endpoint.

    Checks Blob Storage and Cosmos DB. A backend without credentials is
    reported as not configured rather than failing the check.
    """
    checks = {
        "azure_blob_storage": await _check_backend("Blob storage", blob_service.get_account_information),
        "cosmos_db": await _check_backend("Cosmos DB", cosmos_service.ping),
    }
    all_ok = all(value in ("ok", "not_configured") for value in checks.values())

    return ok(request, data={
        "status": "ready" if all_ok else "degraded",
        "timestamp": datetime.utcnow(),
        "checks": checks,
    }, message="OK" if all_ok else "Some services unavailable")


@router.get("/live", response_model=ApiResponse[dict])
async def liveness_check(request: Request):
    """
    Liveness check endpoint.

    Returns whether the service is alive.
    """
    return ok(request, data={"status": "alive", "timestamp": datetime.utcnow()}, message="OK")
