"""
FastAPI application for the CSR reporting and analytics API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core import cache
from app.core.config import settings
from app.core.logging import logger
from app.core.middleware import (
    RequestLoggingMiddleware,
    RequestTimeoutMiddleware,
    SecurityHeadersMiddleware,
)
from app.db.session import engine
from app.routers.analytics import router as analytics_router
from app.routers.health import router as health_router
from app.routers.reports import router as reports_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.api.title} {settings.api.version} ({settings.environment.value})")

    if cache.redis_client is None:
        logger.warning("Analytics cache disabled; dashboards are recomputed per request")
    elif not await cache.check_redis_connection():
        logger.error("Redis unreachable; analytics cache lookups will miss")

    yield

    if cache.redis_client is not None:
        await cache.redis_client.aclose()
    await engine.dispose()
    logger.info(f"Stopped {settings.api.title}")


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.api.title,
        description=settings.api.description,
        version=settings.api.version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Added last runs first: CORS, logging, timeout, then security headers
    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(RequestTimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)
    application.add_middleware(RequestLoggingMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.frontend_urls,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    prefix = settings.api.prefix
    application.include_router(health_router, prefix=f"{prefix}/health", tags=["health"])
    application.include_router(analytics_router, prefix=f"{prefix}/analytics", tags=["analytics"])
    application.include_router(reports_router, prefix=f"{prefix}/reports", tags=["reports"])

    @application.get("/", include_in_schema=False)
    async def root():
        return {"message": settings.api.title, "version": settings.api.version, "docs": "/docs"}

    return application


app = create_app()
