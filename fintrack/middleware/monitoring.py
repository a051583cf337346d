"""
Request monitoring and Prometheus metrics.
"""
import time

from fastapi import Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

# Prometheus metrics
REQUEST_COUNT = Counter(
    'fintrack_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

REQUEST_DURATION = Histogram(
    'fintrack_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

DATABASE_OPERATIONS = Counter(
    'fintrack_database_operations_total',
    'Total number of database operations',
    ['operation', 'collection', 'status']
)

SESSION_RESOLUTIONS = Counter(
    'fintrack_session_resolutions_total',
    'Session cookie resolutions by outcome',
    ['outcome']
)

EXTERNAL_API_CALLS = Counter(
    'fintrack_external_api_calls_total',
    'Total number of external API calls',
    ['service', 'status']
)


class MonitoringMiddleware(BaseHTTPMiddleware):
    """Records request count and latency per route template."""
    
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        
        endpoint = self._extract_endpoint_pattern(request)
        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code
        ).inc()
        REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint
        ).observe(time.time() - start_time)
        
        return response
    
    def _extract_endpoint_pattern(self, request: Request) -> str:
        """Use the matched route template so ids do not explode label cardinality."""
        route = request.scope.get("route")
        if route is not None and getattr(route, "path", None):
            return route.path
        return "unmatched"


def prometheus_response() -> Response:
    """Render the default registry in the Prometheus text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
