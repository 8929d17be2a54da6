"""
Liveness and readiness probes.
"""

from typing import Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import check_redis_connection
from app.core.config import settings
from app.core.logging import logger
from app.db.session import get_db

router = APIRouter()


async def cache_status() -> str:
    if not settings.cache.enabled:
        return "disabled"
    return "connected" if await check_redis_connection() else "unavailable"


@router.get("", response_model=Dict[str, str])
async def health_check() -> Dict[str, str]:
    return {"status": "ok", "version": settings.api.version}


@router.get("/db")
async def database_health_check(db: AsyncSession = Depends(get_db)):
    """
    Readiness: the database must answer `SELECT 1`; the cache is reported
    but never fails the probe. Responds 503 when the database is down.
    """
    cache = await cache_status()
    try:
        ok = (await db.execute(text("SELECT 1"))).scalar() == 1
    except SQLAlchemyError as e:
        logger.error(f"Database readiness check failed: {e}")
        ok = False

    if ok:
        return {"status": "ok", "database": "connected", "cache": cache}
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "error", "database": "unavailable", "cache": cache},
    )
