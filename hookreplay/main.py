"""
FastAPI Application Entry Point

This module creates and configures the FastAPI application.
It sets up all routes and exception handlers.

Design Decisions:
- Use lifespan events for startup/shutdown
- Validate that every packaged fixture loads before serving
- Expose health and readiness endpoints
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from hookreplay import __version__
from hookreplay.api import router as fixtures_router
from hookreplay.config import get_settings
from hookreplay.fixtures import available_events, load_delivery
from hookreplay.logging_config import get_logger, setup_logging

# Initialize logging first
setup_logging()

logger = get_logger(__name__)


def check_fixtures() -> int:
    """Load every packaged fixture once; returns how many loaded."""
    events = available_events()
    for event in events:
        load_delivery(event).parsed_headers()
    return len(events)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events for the application.
    """
    settings = get_settings()
    logger.info(
        "Starting hookreplay",
        host=settings.host,
        port=settings.port,
        replay_target_url=settings.replay_target_url
    )

    try:
        num_fixtures = check_fixtures()
        logger.info("Fixtures validated successfully", num_fixtures=num_fixtures)
    except Exception as e:
        logger.error("Fixture validation failed", error=str(e))
        raise

    yield

    logger.info("Shutting down hookreplay")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="hookreplay",
        description="GitHub webhook delivery fixtures and replay service",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json"
    )

    app.include_router(fixtures_router)

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request,
        exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            error_type=type(exc).__name__
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal server error",
                "type": type(exc).__name__
            }
        )

    @app.get("/")
    async def root():
        """Root endpoint with basic info."""
        return {
            "name": "hookreplay",
            "version": __version__,
            "status": "running",
            "docs": "/docs"
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint for load balancers and monitors."""
        return {
            "status": "healthy",
            "service": "hookreplay",
            "version": __version__
        }

    @app.get("/ready")
    async def readiness_check():
        """
        Readiness check endpoint.

        Verifies that the fixtures can be served.
        """
        try:
            num_fixtures = check_fixtures()
        except Exception as e:
            logger.error("Readiness check failed", error=str(e))
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Not ready: {e}"
            )

        return {
            "status": "ready",
            "service": "hookreplay",
            "fixtures": num_fixtures
        }

    return app


# Create the application instance
app = create_app()
