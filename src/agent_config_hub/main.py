"""Main application entry point."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn
import logging
from contextlib import asynccontextmanager

from . import __version__
from .config import settings
from .api.auto_claude import router as auto_claude_router
from .api.components import router as components_router
from .database.init import init_database
from .errors import (
    ConfigurationError,
    ConflictError,
    HubError,
    ImportValidationError,
    InvalidComponentError,
    NotFoundError,
    StorageError,
)

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(),
    ],
)

logger = logging.getLogger(__name__)

# Most specific class first
ERROR_STATUS = (
    (ImportValidationError, 422),
    (InvalidComponentError, 422),
    (ConfigurationError, 400),
    (ConflictError, 409),
    (NotFoundError, 404),
    (StorageError, 500),
)


async def log_requests_middleware(request: Request, call_next):
    """Log every request and its response status."""
    logger.info(f"Incoming request: {request.method} {request.url.path}")
    try:
        response = await call_next(request)
        logger.info(f"Response status: {response.status_code}")
        return response
    except Exception:
        logger.exception(f"Error processing request {request.method} {request.url.path}")
        raise


async def hub_error_handler(request: Request, exc: HubError):
    """Translate pipeline errors into JSON responses."""
    status_code = next(
        (code for error_cls, code in ERROR_STATUS if isinstance(exc, error_cls)), 500
    )
    body = {"error": exc.message, "details": exc.details}
    if isinstance(exc, ImportValidationError):
        body["errors"] = exc.errors
        body["preview"] = exc.preview
        body["warnings"] = exc.warnings

    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=status_code, content=body)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    # Startup
    await init_database()
    yield
    # Shutdown
    logger.info("Shutting down Agent Config Hub...")


def create_app(use_lifespan: bool = True) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Agent Config Hub",
        description="Import and sync service for Auto-Claude agent configuration",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan if use_lifespan else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure properly in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add request logging middleware
    app.middleware("http")(log_requests_middleware)
    app.add_exception_handler(HubError, hub_error_handler)

    # Include routers
    app.include_router(auto_claude_router, prefix=f"{settings.api_prefix}")
    app.include_router(components_router, prefix=f"{settings.api_prefix}")

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"name": "Agent Config Hub", "version": __version__, "status": "running"}

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


def run():
    """Console entry point."""
    uvicorn.run(
        "agent_config_hub.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
