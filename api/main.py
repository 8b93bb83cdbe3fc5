"""
API Application Entry Point

Defines the FastAPI application with middleware, route configuration
and lifecycle management.

Design Considerations:
- Logging configured once from settings before routes load
- Rate limiting attached per route, not globally
- Interactive docs disabled in production
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.config import EnvironmentType, get_settings
from api.routes import tasks, triage
from api.services.task_service import TaskParsingService, get_task_service
from api.utils.error_handlers import add_exception_handlers
from src.utils.logging_setup import setup_logging

logger = logging.getLogger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    service = get_task_service()
    logger.info(
        f"API service starting up (AI parsing: "
        f"{'enabled' if service.extractor.ai_enabled else 'disabled'})"
    )
    yield
    logger.info("API service shutting down")


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.API_TITLE,
        description=settings.API_DESCRIPTION,
        version=settings.API_VERSION,
        docs_url="/docs" if settings.ENVIRONMENT != EnvironmentType.PRODUCTION else None,
        redoc_url="/redoc" if settings.ENVIRONMENT != EnvironmentType.PRODUCTION else None,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=settings.CORS_METHODS,
        allow_headers=["*"],
    )

    add_exception_handlers(app)

    app.include_router(tasks.router)
    app.include_router(triage.router)

    logger.info(f"Application initialized in {settings.ENVIRONMENT} environment")
    return app


app = create_application()


@app.get("/health", tags=["Monitoring"])
async def health_check(service: TaskParsingService = Depends(get_task_service)):
    """API health check endpoint."""
    return {
        "status": "healthy",
        "ai_parsing": service.extractor.ai_enabled,
    }
