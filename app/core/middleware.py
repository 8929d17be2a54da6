"""
HTTP middleware: security headers, a request deadline and access logging.
"""
import asyncio
import time
from typing import Callable

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from app.core.logging import logger

SLOW_REQUEST_SECONDS = 2.0

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable):
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        return response


class RequestTimeoutMiddleware(BaseHTTPMiddleware):
    """Answer 504 in the usual response envelope when a request overruns its deadline."""

    def __init__(self, app, timeout_seconds: float):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds

    async def dispatch(self, request: Request, call_next: Callable):
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"{request.method} {request.url.path} exceeded {self.timeout_seconds:.1f}s")
            return JSONResponse(
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
                content={"success": False, "message": "Request timed out", "data": None},
            )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        client = request.client.host if request.client else "-"
        line = f"{request.method} {request.url.path} -> {response.status_code} in {elapsed:.3f}s from {client}"
        if elapsed > SLOW_REQUEST_SECONDS:
            logger.warning(f"Slow request: {line}")
        else:
            logger.info(line)
        return response
