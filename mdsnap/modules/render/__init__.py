"""Render module - Markdown to cropped PNG using Playwright."""

from .pipeline import PipelineOrchestrator
from .router import router
from .schemas import ContentGeometry, PixelRect, RenderedImage, RenderMarkdownRequest, RenderStatus
from .service import RenderService, get_render_service, set_render_service

__all__ = [
    "router",
    "ContentGeometry",
    "PipelineOrchestrator",
    "PixelRect",
    "RenderedImage",
    "RenderMarkdownRequest",
    "RenderService",
    "RenderStatus",
    "get_render_service",
    "set_render_service",
]
