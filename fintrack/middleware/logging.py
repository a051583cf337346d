"""
Access log middleware.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

logger = structlog.get_logger()


def get_client_ip(request: Request) -> str:
    """Best-effort caller address; proxies put the original first in X-Forwarded-For."""
    for header in ("x-forwarded-for", "x-real-ip"):
        value = request.headers.get(header, "").split(",")[0].strip()
        if value:
            return value
    return request.client.host if request.client else "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):
    """One structured line when a request arrives and one when it leaves."""
    
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        log = logger.bind(
            request_id=getattr(request.state, "request_id", "unknown"),
            method=request.method,
            path=request.url.path,
            client_ip=get_client_ip(request)
        )
        log.info("Request started", user_agent=request.headers.get("user-agent", ""))
        
        response = await call_next(request)
        elapsed = time.perf_counter() - started
        
        # Set by the session dependency on authenticated routes
        log.info(
            "Request completed",
            status_code=response.status_code,
            duration_ms=round(elapsed * 1000, 2),
            user_id=getattr(request.state, "user_id", None),
            session_outcome=getattr(request.state, "session_outcome", None)
        )
        
        response.headers["x-process-time"] = f"{elapsed:.4f}"
        return response
