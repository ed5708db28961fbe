import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path

from dotenv import load_dotenv


# Load .env FIRST before any other imports that might need env vars
BACKEND_DIR = Path(__file__).parent.parent
ENV_PATH = BACKEND_DIR / ".env"
load_dotenv(ENV_PATH)

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import DBAPIError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .admin.router import router as admin_router
from .auth.router import router as auth_router
from .config.logging import setup_logging
from .config.settings import Settings, get_settings
from .core.schemas import ApiResponse, ok
from .database import create_app_engine, create_session_maker
from .database.init import init_database
from .exceptions import DomainError
from .middleware.error_handlers import (
    handle_database_errors,
    handle_domain_errors,
    handle_http_errors,
    handle_rate_limit_errors,
    handle_request_validation_errors,
    handle_unexpected_errors,
)
from .middleware.security import SimpleSecurityMiddleware, limiter
from .progress.router import router as progress_router
from .stacks.router import router as stacks_router
from .submissions.router import router as submissions_router


setup_logging()
logger = logging.getLogger(__name__)


def _register_routers(app: FastAPI) -> None:
    """Register all application routers."""
    app.include_router(auth_router)
    app.include_router(stacks_router)
    app.include_router(progress_router)  # /dashboard and /progress
    app.include_router(submissions_router)
    app.include_router(admin_router)


def _register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, handle_request_validation_errors)
    app.add_exception_handler(DomainError, handle_domain_errors)
    app.add_exception_handler(RateLimitExceeded, handle_rate_limit_errors)
    app.add_exception_handler(StarletteHTTPException, handle_http_errors)
    app.add_exception_handler(DBAPIError, handle_database_errors)
    app.add_exception_handler(Exception, handle_unexpected_errors)


async def _startup_database(app: FastAPI) -> None:
    """Create missing tables, retrying while the database comes up."""
    max_retries = 5
    retry_delay = 1  # seconds

    for attempt in range(max_retries):
        try:
            await init_database(app.state.engine)
            logger.info("Database initialization completed successfully")
            break

        except OperationalError:
            if attempt == max_retries - 1:
                logger.exception("Startup failed after %d attempts", max_retries)
                raise

            logger.warning(
                "Database connection attempt %d failed, retrying in %ds...",
                attempt + 1,
                retry_delay,
            )
            await asyncio.sleep(retry_delay)
            retry_delay *= 2  # Exponential backoff


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    if app.state.settings.DB_CREATE_TABLES:
        await _startup_database(app)

    yield

    logger.info("Starting graceful shutdown...")
    await app.state.engine.dispose()
    logger.info("Shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    The database engine and session factory are built here and kept on
    ``app.state``; request handlers reach them through ``get_db_session``.
    """
    if settings is None:
        try:
            settings = get_settings()
        except Exception:
            logger.exception("Failed to load settings")
            raise

    app = FastAPI(
        title="OLW API",
        description="Online learning platform: curriculum catalog, progress tracking and challenge grading",
        version="0.1.0",
        debug=settings.DEBUG,
        lifespan=lifespan if settings.ENVIRONMENT != "test" else None,
    )

    app.state.settings = settings
    app.state.engine = create_app_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)
    app.state.session_maker = create_session_maker(app.state.engine)

    # Note: When allow_credentials=True, allow_origins cannot be ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.CLIENT_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Security headers
    app.add_middleware(SimpleSecurityMiddleware)

    # Rate limiting
    app.state.limiter = limiter

    _register_exception_handlers(app)

    @app.get("/api/health")
    async def health_check() -> ApiResponse[dict[str, str]]:
        """Check application health status."""
        return ok(
            {
                "status": "ok",
                "timestamp": datetime.now(UTC).isoformat(),
                "environment": settings.ENVIRONMENT,
            },
            "OLW API is running",
        )

    _register_routers(app)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    from olw.config import env

    host = env("API_HOST", "127.0.0.1")
    port = int(env("API_PORT", "3000"))

    uvicorn.run(app, host=host, port=port)
