"""Health check endpoints.

- /health: liveness, always 200
- /healthz: DB and Redis connectivity plus the number of active environments,
  503 when a core component fails
"""

import json
from typing import Any

import redis
from fastapi import APIRouter, Response
from sqlalchemy import func, select, text

from backend.app.config import Settings, get_settings
from backend.app.db.engine import get_async_engine
from backend.app.db.models import Environment

router = APIRouter()


async def check_db() -> tuple[bool, str]:
    """Check database connectivity on the application's engine.

    Returns:
        (is_ok, status_message)
    """
    try:
        async with get_async_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


async def check_redis(settings: Settings) -> tuple[bool, str]:
    """Check Redis connectivity (shared domain cache).

    Returns:
        (is_ok, status_message)
    """
    if not settings.redis_url:
        return (True, "not_configured")

    try:
        client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
        client.ping()
        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


async def count_active_environments() -> int | None:
    """Number of active environments, or None if it cannot be read."""
    try:
        async with get_async_engine().connect() as conn:
            result = await conn.execute(
                select(func.count()).select_from(Environment).where(Environment.is_active.is_(True))
            )
            return int(result.scalar_one())
    except Exception:
        return None


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz() -> dict[str, Any] | Response:
    """Readiness probe.

    Returns:
        200 with component status if core systems ok
        503 if DB or Redis fail
    """
    settings = get_settings()

    db_ok, db_status = await check_db()
    redis_ok, redis_status = await check_redis(settings)
    environments = await count_active_environments() if db_ok else None

    core_ok = db_ok and redis_ok

    response_body = {
        "status": "ok" if core_ok else "degraded",
        "components": {
            "db": db_status,
            "redis": redis_status,
        },
        "active_environments": environments,
    }

    if not core_ok:
        return Response(
            content=json.dumps(response_body),
            status_code=503,
            media_type="application/json",
        )

    return response_body
