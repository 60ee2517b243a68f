"""
Application factory - builds the FastAPI app with middleware and routes.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mdsnap import __version__
from mdsnap.config import Settings, get_settings
from mdsnap.modules.clipboard.router import router as clipboard_router
from mdsnap.modules.health.router import router as health_router
from mdsnap.modules.render.router import router as render_router
from mdsnap.modules.render.service import get_render_service, set_render_service
from mdsnap.shared.errors import MdSnapError
from mdsnap.shared.ids import generate_request_id
from mdsnap.shared.logging import (
    clear_request_context,
    get_logger,
    get_request_context,
    set_request_context,
    setup_logging,
)
from mdsnap.shared.types import RequestContext

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info(f"Starting mdsnap {__version__}...")

    yield

    # Shutdown: tear down any surviving surface and the browser
    logger.info("Shutting down mdsnap...")
    service = get_render_service()
    await service.aclose()
    set_render_service(None)
    logger.info("mdsnap stopped")


def build_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Optional settings override (useful for testing)

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="mdsnap",
        description="Render Markdown to cropped PNG images",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next: Any) -> Response:
        """Attach request context for logging."""
        ctx = RequestContext(
            request_id=request.headers.get("X-Request-ID", generate_request_id()),
            actor=request.headers.get("X-Actor", "system"),
        )
        set_request_context(ctx)

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = ctx.request_id
            return response
        finally:
            clear_request_context()

    @app.exception_handler(MdSnapError)
    async def mdsnap_error_handler(request: Request, exc: MdSnapError) -> JSONResponse:
        """Render MdSnapError as a consistent JSON body."""
        ctx = get_request_context()
        return JSONResponse(
            status_code=exc.http_status,
            content={
                "error": exc.to_dict(),
                "request_id": ctx.request_id if ctx else None,
            },
        )

    app.include_router(health_router, tags=["health"])
    app.include_router(render_router)
    app.include_router(clipboard_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        return {"service": "mdsnap", "version": __version__}

    return app
