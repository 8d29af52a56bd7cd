"""Health check endpoints.

/health reports liveness only; /healthz checks the database and Redis and
returns 503 when either is down.
"""

import logging
from typing import Any

import redis
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from tourdesk.app.config import Settings, get_settings
from tourdesk.app.db.engine import get_async_engine

logger = logging.getLogger(__name__)

router = APIRouter()


async def check_db(engine: AsyncEngine) -> tuple[bool, str]:
    """Check database connectivity.

    Returns:
        (is_ok, status_message)
    """
    try:
        async with engine.connect() as connection:
            await connection.execute(text("SELECT 1"))
        return (True, "ok")
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return (False, f"error: {type(e).__name__}")


async def check_redis(settings: Settings) -> tuple[bool, str]:
    """Check Redis connectivity.

    Returns:
        (is_ok, status_message)
    """
    if not settings.redis_url:
        return (True, "not_configured")

    try:
        client = redis.from_url(settings.redis_url, decode_responses=True)
        client.ping()
        return (True, "ok")
    except Exception as e:
        logger.warning(f"Redis health check failed: {e}")
        return (False, f"error: {type(e).__name__}")


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness check for Docker/k8s."""
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz() -> dict[str, Any] | JSONResponse:
    """Readiness check with component status.

    Returns:
        200 with component status if core systems ok
        503 if the database or Redis is unreachable
    """
    settings = get_settings()

    try:
        engine = get_async_engine()
    except ValueError as e:
        logger.warning(f"Database not configured: {e}")
        db_ok, db_status = False, "not_configured"
    else:
        db_ok, db_status = await check_db(engine)
    redis_ok, redis_status = await check_redis(settings)

    core_ok = db_ok and redis_ok
    response_body = {
        "status": "ok" if core_ok else "degraded",
        "components": {"db": db_status, "redis": redis_status},
    }

    if not core_ok:
        return JSONResponse(content=response_body, status_code=503)

    return response_body
