"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from api.dependencies import get_database, get_provider_registry, get_template_compiler
from modules.templates.compiler import TemplateCompiler
from providers.registry import ProviderRegistry
from shared.config import get_settings
from shared.database import Database

logger = logging.getLogger(__name__)

router = APIRouter()

_STARTED_AT = time.monotonic()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    timestamp: datetime
    uptime_seconds: float


class DatabaseHealth(BaseModel):
    configured: bool
    is_healthy: bool
    message: str


class DetailedHealthResponse(HealthResponse):
    database: DatabaseHealth
    provider_count: int
    model_count: int
    circuit_breakers: dict[str, dict[str, Any]]


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    database: str
    templates: str


def _base_health(status: str = "healthy") -> dict[str, Any]:
    return {
        "status": status,
        "version": get_settings().app_version,
        "timestamp": datetime.now(timezone.utc),
        "uptime_seconds": round(time.monotonic() - _STARTED_AT, 3),
    }


async def _check_database(db: Optional[Database]) -> DatabaseHealth:
    if db is None:
        return DatabaseHealth(configured=False, is_healthy=True, message="Using in-memory storage")

    try:
        result = await asyncio.wait_for(
            asyncio.to_thread(db.health_check),
            timeout=get_settings().health_check_timeout,
        )
    except asyncio.TimeoutError:
        logger.warning("Database health check timed out")
        return DatabaseHealth(configured=True, is_healthy=False, message="Database health check timed out")
    return DatabaseHealth(configured=True, **result)


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(**_base_health())


@router.get("/detailed", response_model=DetailedHealthResponse)
async def detailed_health_check(
    db: Optional[Database] = Depends(get_database),
    providers: ProviderRegistry = Depends(get_provider_registry),
) -> DetailedHealthResponse:
    """Database, provider catalog and circuit breaker status."""
    database = await _check_database(db)
    return DetailedHealthResponse(
        **_base_health("healthy" if database.is_healthy else "degraded"),
        database=database,
        provider_count=len(providers.providers),
        model_count=len(providers.get_all_models()),
        circuit_breakers=providers.breaker_states(),
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(
    db: Optional[Database] = Depends(get_database),
    compiler: TemplateCompiler = Depends(get_template_compiler),
):
    """
    Readiness check endpoint.

    503 until the database answers and templates are compiled.
    """
    database = await _check_database(db)
    ready = database.is_healthy and compiler.is_compiled
    body = ReadinessResponse(
        status="ready" if ready else "not_ready",
        database="connected" if db and database.is_healthy else ("in-memory" if db is None else "unavailable"),
        templates=f"{compiler.template_count} compiled" if compiler.is_compiled else "not compiled",
    )
    if not ready:
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
