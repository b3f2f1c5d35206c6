"""
Circlegate

FastAPI application entry point. The application exposes health only;
embedding callers mount their own routers and get the domain error
mapping for free.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from pydantic import BaseModel

from src.api.errors import register_exception_handlers
from src.api.middleware.request_id import RequestContextMiddleware
from src.config import get_settings
from src.database import close_db, init_db
from src.logging_config import configure_logging, get_logger

logger = get_logger(__name__)


class HealthResponse(BaseModel):
    status: str
    version: str


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown tasks.
    """
    settings = get_settings()
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down...")
    await close_db()
    logger.info("Database connections closed")


def create_app() -> FastAPI:
    settings = get_settings()
    application = FastAPI(
        title=settings.project_name,
        description="Authorization and state-validation core for circles, boards and lockers.",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    application.add_middleware(RequestContextMiddleware)
    register_exception_handlers(application)

    @application.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Check application health."""
        return HealthResponse(status="ok", version=settings.version)

    return application


app = create_app()


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
    )
