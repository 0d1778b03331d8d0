"""
NoteSync Backend - Health Check Routes
========================================

What:  Liveness and readiness endpoints for monitoring and load balancers.
Who:   Called by Docker health checks, load balancers and uptime monitors.

    GET /health        → always {"ok": true, ...} while the process serves HTTP
    GET /health/ready  → 200 when the data store answers, 503 otherwise

Neither endpoint requires authentication.
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app import __version__
from app.dependencies import get_store
from app.schemas.common import HealthResponse, ReadinessResponse
from app.services.store_base import DataStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service liveness check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        ok=True,
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
    )


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Data store unreachable", "model": ReadinessResponse}},
    summary="Service readiness check",
)
async def readiness_check(store: DataStore = Depends(get_store)):
    """
    Probe the data store with its lightweight ping.

    Returns 503 so that load balancers stop routing to an instance whose
    store is down.
    """
    if await store.ping():
        return ReadinessResponse(ok=True, store="reachable")

    logger.warning("Readiness check: data store unreachable")
    return JSONResponse(
        status_code=503,
        content=ReadinessResponse(ok=False, store="unreachable").model_dump(),
    )
