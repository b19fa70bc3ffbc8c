# vermietertools/main.py
"""
Vermietertools API - session cookie authentication for the landlord tools.

create_app() wires the stores, the password hasher, the session manager and
the request gate together and hangs them on app.state. Nothing here is a
module-level database handle: services are opened in the lifespan and
closed at shutdown.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from vermietertools.api.auth import router as auth_router
from vermietertools.core.config import Settings, get_settings, validate_required_settings
from vermietertools.core.exceptions import (
    INTERNAL_ERROR_MESSAGE,
    ConfigurationError,
    StorageError,
    UnexpectedError,
    VermieterError,
)
from vermietertools.core.logging_config import setup_logging
from vermietertools.core.rate_limit_config import limiter, rate_limit_exceeded_handler
from vermietertools.core.security import (
    Authenticator,
    PasswordHasher,
    RequestGate,
    SessionManager,
)
from vermietertools.services.factory import Stores, build_stores

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"

# Liveness/readiness probes never touch the session store
HEALTH_PATHS = frozenset({"/", "/health", "/health/ready"})


def get_safe_error_message(error: Exception, context: str = "") -> str:
    """Return a safe error message that doesn't expose internal details"""
    # Log the full error internally
    logger.error(f"Error in {context}: {type(error).__name__}: {str(error)}")

    if isinstance(error, HTTPException):
        return error.detail

    if isinstance(error, VermieterError):
        return error.public_message

    # Map specific errors to user-friendly messages
    error_messages = {
        "ConnectionError": "Verbindungsfehler. Bitte versuche es später erneut.",
        "TimeoutError": "Die Anfrage hat zu lange gedauert. Bitte versuche es erneut.",
    }

    error_type = type(error).__name__
    return error_messages.get(error_type, INTERNAL_ERROR_MESSAGE)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan event handler for startup/shutdown"""
    settings: Settings = app.state.settings

    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 {settings.APP_NAME} API Starting...")
    logger.info("=" * 60)

    # Validate configuration (warn but don't fail)
    if not validate_required_settings(settings):
        logger.warning("⚠️ Configuration problems detected - some requests may fail")

    try:
        for service in app.state.services:
            await service.initialize()
    except (ConfigurationError, StorageError) as e:
        logger.error(f"❌ Failed to initialize storage: {e}")
        logger.error("🔥 Startup failed - check DATABASE_URL / REDIS_URL")
        raise

    logger.info("📋 Configuration:")
    logger.info(f"  - Environment: {settings.APP_ENV}")
    logger.info(f"  - Session backend: {settings.SESSION_BACKEND}")
    logger.info(f"  - Secure cookies: {settings.is_production}")
    logger.info("✅ API Ready!")

    yield

    # Shutdown
    logger.info(f"🛑 {settings.APP_NAME} API Shutting down...")
    for service in reversed(app.state.services):
        await service.shutdown()
    logger.info("👋 Goodbye!")


def _register_exception_handlers(app: FastAPI) -> None:

    async def vermieter_error_handler(request: Request, exc: VermieterError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
        else:
            logger.debug(f"{request.method} {request.url.path} -> {exc.status_code} {exc.error_code}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_response_body())

    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.debug(f"Malformed request to {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={"error": "Ungültige Anfrage", "code": "validation_error"},
        )

    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        error = UnexpectedError(get_safe_error_message(exc, request.url.path))
        return JSONResponse(status_code=error.status_code, content=error.to_response_body())

    app.add_exception_handler(VermieterError, vermieter_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)


def _register_middleware(app: FastAPI, settings: Settings) -> None:
    # Registered inner to outer: the identity is attached before the route
    # runs, logging and headers wrap everything.

    @app.middleware("http")
    async def attach_identity(request: Request, call_next):
        """Single identity resolution point for every request"""
        if request.url.path not in HEALTH_PATHS:
            await app.state.request_gate.attach(request)
        return await call_next(request)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all incoming requests for debugging"""
        path = request.url.path

        # Log health checks once
        if path in ("/", "/health"):
            if not hasattr(app.state, "health_logged"):
                logger.info(f"✅ Health check endpoint hit: {path}")
                app.state.health_logged = True
        else:
            logger.info(f"📥 Request: {request.method} {path}")

        return await call_next(request)

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        """Add security headers to all responses"""
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        # Remove server header if present
        if "Server" in response.headers:
            del response.headers["Server"]

        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )


def _register_health_routes(app: FastAPI) -> None:

    @app.get("/", status_code=200)
    def read_root():
        """Liveness check - no storage access"""
        return {"status": "ok", "version": APP_VERSION, "service": "vermietertools"}

    @app.get("/health", status_code=200)
    def health():
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/health/ready")
    async def ready():
        """
        Readiness check with the store health and session metrics.
        503 as soon as one store is unhealthy.
        """
        checks = {}
        for service in app.state.services:
            checks[service.service_name] = await service.health_check()

        healthy = all(check["healthy"] for check in checks.values())
        body = {
            "overall": "healthy" if healthy else "unhealthy",
            "services": checks,
            "sessions": app.state.session_manager.get_metrics(),
        }
        return JSONResponse(status_code=200 if healthy else 503, content=body)


def create_app(
    settings: Optional[Settings] = None,
    *,
    stores: Optional[Stores] = None,
    hasher: Optional[PasswordHasher] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Defaults to the process settings from the environment
        stores: Pre-built stores; built from the settings when omitted
        hasher: Password hasher; defaults to bcrypt with BCRYPT_ROUNDS
    """
    settings = settings or get_settings()
    setup_logging()

    stores = stores or build_stores(settings)
    hasher = hasher or PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    session_manager = SessionManager(stores.sessions, stores.credentials)

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Sitzungsbasierte Anmeldung für die Vermietertools",
        version=APP_VERSION,
        lifespan=lifespan,
        debug=settings.DEBUG,
    )

    app.state.settings = settings
    app.state.services = stores.services
    app.state.session_manager = session_manager
    app.state.authenticator = Authenticator(stores.credentials, hasher)
    app.state.request_gate = RequestGate(
        session_manager,
        secure_cookies=settings.is_production,
        login_path=settings.LOGIN_PATH,
    )

    # Required by slowapi
    limiter.enabled = settings.RATE_LIMIT_ENABLED
    app.state.limiter = limiter

    _register_exception_handlers(app)
    _register_middleware(app, settings)
    _register_health_routes(app)
    app.include_router(auth_router)

    return app
