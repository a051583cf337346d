"""
Security headers middleware.
"""

from typing import Callable, Dict

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

BASE_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

HSTS_VALUE = "max-age=31536000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamps hardening headers on every response.

    Responses under ``api_prefix`` carry per-user ledger data and are
    marked ``no-store``.
    """
    
    def __init__(self, app: Callable, api_prefix: str = "/api", hsts: bool = False):
        super().__init__(app)
        self.api_prefix = api_prefix
        self.headers = dict(BASE_HEADERS)
        if hsts:
            self.headers["Strict-Transport-Security"] = HSTS_VALUE
    
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        if request.url.path.startswith(self.api_prefix):
            response.headers.setdefault("Cache-Control", "no-store")
        
        return response
