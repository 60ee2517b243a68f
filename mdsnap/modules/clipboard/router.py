"""Clipboard module routes."""

from fastapi import APIRouter, Depends

from mdsnap.modules.render.service import RenderService, get_render_service

from .schemas import ConvertResult
from .service import ClipboardService

router = APIRouter(prefix="/clipboard", tags=["clipboard"])


def get_clipboard_service(
    render_service: RenderService = Depends(get_render_service),
) -> ClipboardService:
    return ClipboardService(render_service=render_service)


@router.post("/convert", response_model=ConvertResult)
async def convert_clipboard(
    service: ClipboardService = Depends(get_clipboard_service),
) -> ConvertResult:
    """Render the clipboard's Markdown and put the PNG back on the clipboard."""
    return await service.convert()
