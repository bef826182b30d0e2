"""
FastAPI application entry point.

Uses structured logging from core.logging module.
"""

import time

from fastapi import Depends, FastAPI, status
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from core.db import db
from core.logging import RequestLoggingMiddleware, configure_logging, get_logger
from core.security import get_encryption_service

from .auth.dependencies import get_optional_user
from .config import get_settings
from .error_handlers import register_exception_handlers
from .middleware.request_id import RequestIDMiddleware
from .models import User
from .routers import account as account_router
from .routers import auth as auth_router

settings = get_settings()
configure_logging(level="DEBUG" if settings.debug else "INFO")
logger = get_logger("api")


def check_database_health(max_retries: int = 3, retry_delay: float = 2.0) -> bool:
    """
    Check database connectivity with retry logic.

    Raises:
        RuntimeError: If database is unreachable after all retries
    """
    for attempt in range(max_retries):
        if db.ping():
            logger.info("database_health_check_passed", attempt=attempt + 1)
            return True

        logger.warning("database_health_check_failed", attempt=attempt + 1, max_retries=max_retries)
        if attempt < max_retries - 1:
            time.sleep(retry_delay * (attempt + 1))

    raise RuntimeError(
        f"Database unreachable after {max_retries} attempts. "
        "Check DATABASE_URL configuration and database server status."
    )


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, debug=settings.debug)

    # Signed cookie session: OAuth state and the post-login target
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret_key,
        session_cookie="sponsors_session",
        max_age=settings.session_max_age,
        same_site="lax",
        https_only=settings.is_production,
    )

    # Structured request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Request ID middleware (outermost, binds the id for everything below)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    @app.on_event("startup")
    async def startup_event():
        """Initialize services on startup."""
        logger.info("app_startup", app_name=settings.app_name, env=settings.env)

        config_errors, config_warnings = settings.validate_production_config()
        for warning in config_warnings:
            logger.warning("config_warning", message=warning)
        if settings.is_production and config_errors:
            for error in config_errors:
                logger.error("config_error", error=error)
            raise RuntimeError("Invalid production configuration")

        db.initialize(settings.database_url)
        logger.info("database_initialized")
        check_database_health(max_retries=3, retry_delay=2.0)

        if get_encryption_service().is_available:
            logger.info("encryption_initialized")
        elif settings.require_encryption:
            raise RuntimeError("Encryption required but not available")
        else:
            logger.warning("encryption_unavailable")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("app_shutdown")

    @app.get("/", tags=["home"])
    def home(user: User | None = Depends(get_optional_user)):
        return {
            "app": settings.app_name,
            "authenticated": user is not None,
            "login": user.github_api_login if user else None,
        }

    @app.get("/health", tags=["health"])
    def health_check():
        """Liveness probe."""
        return {"status": "ok"}

    @app.get("/health/ready", tags=["health"])
    def readiness_check():
        """Readiness probe: 503 until the database answers."""
        if not db.ping():
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "checks": {"database": False}},
            )
        return {"status": "ready", "checks": {"database": True}}

    app.include_router(auth_router.router)
    app.include_router(account_router.router)

    return app


app = create_app()
