"""FastAPI application entry point"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tablekeeper.api import auth as auth_router
from tablekeeper.api import sessions as sessions_router
from tablekeeper.api import system as system_router
from tablekeeper.api import table_requests as table_requests_router
from tablekeeper.api import tables as tables_router
from tablekeeper.api import users as users_router
from tablekeeper.core.config import Settings, get_settings
from tablekeeper.core.database import db_manager
from tablekeeper.core.metrics import init_metrics
from tablekeeper.core.middleware import ClaimsMiddleware, RequestTracingMiddleware
from tablekeeper.core.security import PasswordHasher, TokenIssuer

# Import all models first to ensure proper mapper configuration
from tablekeeper.modules.auth.models import RefreshToken  # noqa: F401
from tablekeeper.modules.sessions.models import Session, SessionCheckin, SessionIntent  # noqa: F401
from tablekeeper.modules.table_requests.models import TableRequest  # noqa: F401
from tablekeeper.modules.tables.models import Table, TableMembership  # noqa: F401
from tablekeeper.modules.users.models import User  # noqa: F401
from tablekeeper.shared.errors import setup_exception_handlers
from tablekeeper.shared.logging import logger, setup_logger


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    settings: Settings = app.state.settings

    # Startup
    setup_logger(settings)
    logger.info(f"Starting {settings.app.name}...")

    if not db_manager.is_initialized:
        db_manager.init(settings.db, echo=settings.app.debug)
        logger.info("Database connection pool initialized")

    if settings.metrics.enabled:
        init_metrics(settings.app.name, settings.app.version)

    yield

    # Shutdown
    logger.info("Shutting down...")
    app.state.password_hasher.shutdown()
    await db_manager.close()
    logger.info("Database connections closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Explicit settings (tests); defaults to environment settings.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Scheduling backend for tabletop game tables and sessions",
        debug=settings.app.debug,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.app.debug else None,
        redoc_url="/api/redoc" if settings.app.debug else None,
        openapi_url="/api/openapi.json" if settings.app.debug else None,
        redirect_slashes=False,
    )

    app.state.settings = settings
    app.state.token_issuer = TokenIssuer(settings.jwt)
    app.state.password_hasher = PasswordHasher(settings.password)

    # Bearer token check (innermost: runs inside tracing and CORS)
    app.add_middleware(ClaimsMiddleware, issuer=app.state.token_issuer)

    # Custom request tracing middleware
    app.add_middleware(RequestTracingMiddleware)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    setup_exception_handlers(app)

    # Include API routers with /api prefix
    app.include_router(auth_router.router, prefix="/api")
    app.include_router(users_router.router, prefix="/api")
    app.include_router(tables_router.router, prefix="/api")
    app.include_router(table_requests_router.router, prefix="/api")
    app.include_router(sessions_router.router, prefix="/api")

    # System router (no /api prefix - accessible at root)
    app.include_router(system_router.router)

    return app


# Create the application instance
app = create_app()
