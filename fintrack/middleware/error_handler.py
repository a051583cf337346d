"""
Error handling middleware and JSON error rendering.
"""

import time
import traceback
import uuid
from typing import Any, Callable, Dict, Optional

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

from ..utils.exceptions import AppException

logger = structlog.get_logger()


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
    headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    """Build the JSON error body shared by every failure path."""
    request_id = getattr(request.state, "request_id", "unknown")
    response_headers = {"x-request-id": request_id}
    response_headers.update(headers or {})
    
    return JSONResponse(
        status_code=status_code,
        content={
            "error": message,
            "code": code,
            "details": details if details is not None else [],
            "meta": {
                "timestamp": time.time(),
                "request_id": request_id,
                "path": str(request.url.path)
            }
        },
        headers=response_headers
    )


def _exposes_errors(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings is not None and settings.is_development)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle application exceptions.

    Server-side failures keep their details in the log line; the body
    carries them only in development.
    """
    server_error = exc.status_code >= 500
    log = logger.error if server_error else logger.warning
    log(
        "Application exception occurred",
        request_id=getattr(request.state, "request_id", "unknown"),
        error_code=exc.code,
        error_message=exc.message,
        error_details=exc.details,
        status_code=exc.status_code,
        path=request.url.path,
        method=request.method
    )
    details = exc.details
    if server_error and not _exposes_errors(request):
        details = []
    return error_response(request, exc.status_code, exc.code, exc.message, details)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed input as 400 with one entry per offending field."""
    details: Dict[str, str] = {}
    missing = False
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(location) or "body"
        if error.get("type") == "missing":
            missing = True
            details[field] = "Missing"
        else:
            details[field] = error.get("msg", "Invalid value")
    
    message = "Missing required fields" if missing else "Invalid input"
    return error_response(request, 400, "VALIDATION_ERROR", message, details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (404 route, 405 method) in the same shape."""
    message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
    return error_response(
        request,
        exc.status_code,
        "HTTP_ERROR",
        message,
        headers=getattr(exc, "headers", None)
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Assigns request ids and turns unexpected exceptions into a JSON 500."""
    
    def __init__(self, app: Callable, expose_errors: bool = False):
        super().__init__(app)
        self.expose_errors = expose_errors
    
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and handle any exceptions."""
        request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
        request.state.request_id = request_id
        
        try:
            response = await call_next(request)
        except AppException as exc:
            return await app_exception_handler(request, exc)
        except Exception as exc:
            logger.error(
                "Unexpected exception occurred",
                request_id=request_id,
                error_type=type(exc).__name__,
                error_message=str(exc),
                traceback=traceback.format_exc(),
                path=request.url.path,
                method=request.method
            )
            details = [traceback.format_exc()] if self.expose_errors else []
            return error_response(
                request,
                500,
                "INTERNAL_SERVER_ERROR",
                "Internal server error",
                details
            )
        
        response.headers["x-request-id"] = request_id
        return response
