"""FastAPI server for the inventory archive service.

Main entry point for the API server.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import archive, health
from core.config import ArchiveSettings, load_settings
from core.observability.logging import configure_logging, get_logger
from core.security.token_cache import InMemoryTokenCache

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings: ArchiveSettings = app.state.settings
    configure_logging(level=settings.logging_level, json_format=settings.log_json)

    missing = settings.missing_credentials()
    if missing:
        logger.warning(f"SharePoint credentials not configured: {', '.join(missing)}")

    logger.info(
        "Inventory archive API starting up",
        extra_fields={
            "site_name": settings.site_name,
            "token_cache": settings.token_cache_enabled,
        },
    )

    yield

    if app.state.token_cache is not None:
        app.state.token_cache.clear()
    logger.info("Inventory archive API shutting down")


def create_app(settings: Optional[ArchiveSettings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Service configuration (loaded from the environment if None)
    """
    app = FastAPI(
        title="Inventory Archive API",
        description="Archives stock-take reconciliation results to SharePoint as CSV",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    if settings is None:
        settings = load_settings()
    app.state.settings = settings
    app.state.token_cache = InMemoryTokenCache() if settings.token_cache_enabled else None

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(archive.router, prefix="/api", tags=["Archive"])

    return app


# Default app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.server:app", host="0.0.0.0", port=8000, reload=True)
