"""
FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from .config import Settings, get_settings
from .infrastructure import FirestoreService
from .middleware.error_handler import (
    ErrorHandlerMiddleware,
    app_exception_handler,
    http_exception_handler,
    request_validation_handler
)
from .middleware.logging import LoggingMiddleware
from .middleware.monitoring import MonitoringMiddleware
from .middleware.security import SecurityHeadersMiddleware
from .routers import auth, health, reports, summary, transactions, users
from .services.identity import GitHubIdentityProvider
from .utils.exceptions import AppException


def configure_logging(settings: Settings) -> None:
    """Configure structured logging."""
    logging.basicConfig(
        format="%(message)s",
        stream=None,
        level=getattr(logging, settings.log_level),
    )
    
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer() if settings.is_development else structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    settings: Settings = app.state.settings
    logger = structlog.get_logger()
    
    logger.info(
        "Application starting up",
        app_name=settings.app_name,
        version=settings.version,
        environment=settings.environment,
        debug=settings.debug
    )
    
    yield
    
    logger.info("Application shutting down")
    await app.state.identity_provider.aclose()
    await app.state.firestore.close()
    logger.info("Resources cleaned up")


def create_app(
    settings: Optional[Settings] = None,
    firestore: Optional[FirestoreService] = None,
    identity_provider: Optional[GitHubIdentityProvider] = None
) -> FastAPI:
    """Create and configure FastAPI application.
    
    The storage client and identity provider are owned by the application
    and released on shutdown; tests pass in their own.
    """
    settings = settings or get_settings()
    configure_logging(settings)
    
    app = FastAPI(
        title="Fintrack API",
        version=settings.version,
        description="Shared income and expense ledger with GitHub sign-in.",
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=None,
        openapi_url=settings.openapi_url,
        lifespan=lifespan
    )
    
    app.state.settings = settings
    app.state.firestore = firestore or FirestoreService(settings)
    app.state.identity_provider = identity_provider or GitHubIdentityProvider(settings)
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins_list(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "X-Request-ID",
            "Accept",
            "Origin"
        ],
        expose_headers=[
            "X-Request-ID",
            "X-Process-Time",
            "Content-Disposition"
        ]
    )
    
    # Custom middleware (order matters - last added is executed first)
    app.add_middleware(SecurityHeadersMiddleware, api_prefix=settings.api_prefix, hsts=settings.is_production)
    app.add_middleware(MonitoringMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware, expose_errors=settings.is_development)
    
    # Exception handlers
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    
    # Include routers
    for module in (health, auth, users, transactions, summary, reports):
        app.include_router(module.router, prefix=settings.api_prefix)
    
    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.version,
            "environment": settings.environment,
            "docs_url": settings.docs_url
        }
    
    return app


if __name__ == "__main__":
    import uvicorn
    
    settings = get_settings()
    uvicorn.run(
        "fintrack.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower()
    )
