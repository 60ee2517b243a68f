"""Render module routes."""

from fastapi import APIRouter, Depends, Response

from mdsnap.shared.logging import get_logger

from .schemas import RenderMarkdownRequest, RenderStatus
from .service import RenderService, get_render_service

logger = get_logger(__name__)
router = APIRouter(prefix="/render", tags=["render"])


@router.post("/markdown")
async def render_markdown(
    request: RenderMarkdownRequest,
    service: RenderService = Depends(get_render_service),
) -> Response:
    """
    Render Markdown to a cropped PNG.

    Returns the PNG as binary content. Failures surface as typed errors
    through the application exception handler.
    """
    png_bytes, info = await service.render_png(request.markdown)

    return Response(
        content=png_bytes,
        media_type="image/png",
        headers={
            "Content-Length": str(info.size_bytes),
            "X-Image-Width": str(info.width),
            "X-Image-Height": str(info.height),
            "X-Device-Pixel-Ratio": f"{info.device_pixel_ratio:g}",
            "X-Processing-Time": f"{(info.duration_ms or 0) / 1000:.3f}",
        },
    )


@router.get("/status", response_model=RenderStatus)
def get_status(service: RenderService = Depends(get_render_service)) -> RenderStatus:
    """Current pipeline state."""
    return service.status
