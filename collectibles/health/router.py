"""Liveness and readiness probes."""

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from collectibles.catalog.models import Category
from collectibles.db.session import get_db_no_commit
from collectibles.health.schemas import HealthResponse, ReadinessResponse

HEALTH_CHECK_TIMEOUT = 5.0

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live", response_model=HealthResponse, summary="Liveness probe")
async def liveness() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    responses={
        status.HTTP_200_OK: {"description": "Service is ready"},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "Service is not ready"},
    },
)
async def readiness(
    request: Request,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db_no_commit)],
) -> ReadinessResponse:
    """Ready once the database answers and the collection cache is loaded.

    Returns 503 when any check fails.
    """
    checks: dict[str, str] = {}

    try:
        result = await asyncio.wait_for(
            db.execute(select(func.count(Category.id))),
            timeout=HEALTH_CHECK_TIMEOUT,
        )
        result.scalar()
        checks["database"] = "ok"
    except TimeoutError:
        logger.warning(
            "Database health check timed out",
            extra={"timeout_seconds": HEALTH_CHECK_TIMEOUT},
        )
        checks["database"] = "timeout"
    except SQLAlchemyError as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        checks["database"] = "error"

    store = getattr(request.app.state, "collection_store", None)
    checks["collection"] = "ok" if store is not None and store.loaded else "not_loaded"

    all_ok = all(v == "ok" for v in checks.values())
    if not all_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(status="ok" if all_ok else "degraded", checks=checks)
