from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
from slowapi.errors import RateLimitExceeded
from typing import Optional
import logging
import uuid

from .config import Settings, get_settings
from .database import build_engine, build_session_factory, create_tables
from .services.auth_provider import build_auth_provider
from .utils.errors import APIError, format_validation_errors
from .utils.logging_config import setup_logging, set_request_context, clear_request_context
from .utils.rate_limiter import limiter
from .routers import admin, transactions, health

logger = logging.getLogger("tripdesk")


# Security Headers Middleware
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, is_production: bool = False):
        super().__init__(app)
        self.is_production = is_production

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if self.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


# Request ID Middleware
class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4())[:8])
        request.state.request_id = request_id
        set_request_context(request_id)
        try:
            response = await call_next(request)
        finally:
            clear_request_context()
        response.headers["X-Request-ID"] = request_id
        return response


async def api_error_handler(request: Request, exc: APIError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": format_validation_errors(exc.errors())})


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(status_code=429, content={"error": "Too many requests, try again later"})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API around an explicit, already-validated settings object.

    Without one, settings are loaded from the environment and a
    ConfigurationError stops the process before it serves anything.
    """
    settings = settings or get_settings()
    setup_logging(level=settings.log_level, json_format=settings.use_json_logs)

    engine = build_engine(settings)
    auth_provider = build_auth_provider(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting tripdesk-backend ({settings.environment})")
        logger.info(f"Auth provider: {settings.auth_provider.value}, admin policy: {settings.admin_auth_policy.value}")
        if settings.create_tables:
            create_tables(engine)
        yield
        logger.info("Shutting down tripdesk-backend")
        auth_provider.close()
        engine.dispose()

    app = FastAPI(
        title="TripDesk Backend API",
        description="Admin transaction workflows for the travel booking app",
        version="1.0.0",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.auth_provider = auth_provider

    # The limiter is shared by every app in the process; enablement is per app
    app.state.limiter = limiter
    app.state.rate_limit_enabled = settings.rate_limit_enabled

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, is_production=settings.is_production)

    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(health.router)
    app.include_router(admin.router)
    app.include_router(transactions.router)
    if settings.debug_endpoints_enabled:
        app.include_router(admin.debug_router)
        logger.warning("Debug endpoints enabled")

    @app.get("/")
    def root():
        return {
            "message": "TripDesk Backend API",
            "version": "1.0.0",
            "docs": "/docs",
            "status": "running"
        }

    return app


app = create_app()
