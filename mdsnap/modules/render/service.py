"""Render service - Markdown to PNG using a headless Chromium surface."""

import time

from mdsnap.config import Settings, get_settings
from mdsnap.shared.errors import EmptyInputError
from mdsnap.shared.logging import get_logger

from .capture import CaptureCropEngine
from .pipeline import PipelineOrchestrator
from .renderer import ContentRenderer
from .resizer import SurfaceResizer
from .schemas import RenderedImage, RenderImageInfo, RenderStatus
from .surface import PlaywrightSurfaceFactory

logger = get_logger(__name__)


def validate_markdown(markdown_text: str | None) -> str:
    """Reject empty or whitespace-only input before it reaches the pipeline."""
    if not markdown_text or not markdown_text.strip():
        raise EmptyInputError("Markdown content must not be empty")
    return markdown_text


def build_orchestrator(settings: Settings) -> PipelineOrchestrator:
    timings = settings.timings()
    return PipelineOrchestrator(
        surface_factory=PlaywrightSurfaceFactory(
            device_scale_factor=settings.device_scale_factor,
        ),
        renderer=ContentRenderer(timings, library_path=settings.marked_script_path),
        resizer=SurfaceResizer(timings=timings),
        capture=CaptureCropEngine(),
        timings=timings,
    )


class RenderService:
    """Service for rendering Markdown to cropped PNG images."""

    def __init__(self, orchestrator: PipelineOrchestrator | None = None):
        self.orchestrator = orchestrator or build_orchestrator(get_settings())

    @property
    def busy(self) -> bool:
        return self.orchestrator.busy

    @property
    def status(self) -> RenderStatus:
        return self.orchestrator.status

    async def render_markdown(self, markdown_text: str) -> RenderedImage:
        """
        Render Markdown text to an image.

        Raises:
            EmptyInputError: text is empty or whitespace-only
            RenderError: pipeline failure (see mdsnap.shared.errors)
        """
        validate_markdown(markdown_text)
        return await self.orchestrator.render_markdown_to_image(markdown_text)

    async def render_png(self, markdown_text: str) -> tuple[bytes, RenderImageInfo]:
        """Render and encode as PNG, returning bytes plus metadata."""
        start_time = time.time()
        image = await self.render_markdown(markdown_text)
        png_bytes = image.to_png()
        duration_ms = int((time.time() - start_time) * 1000)

        logger.info(f"Generated PNG: {image.width}x{image.height}, {len(png_bytes)} bytes")
        return png_bytes, RenderImageInfo(
            width=image.width,
            height=image.height,
            device_pixel_ratio=image.device_pixel_ratio,
            size_bytes=len(png_bytes),
            duration_ms=duration_ms,
        )

    async def aclose(self) -> None:
        await self.orchestrator.aclose()


_service: RenderService | None = None


def get_render_service() -> RenderService:
    """Process-wide render service (FastAPI dependency)."""
    global _service
    if _service is None:
        _service = RenderService()
    return _service


def set_render_service(service: RenderService | None) -> None:
    global _service
    _service = service
