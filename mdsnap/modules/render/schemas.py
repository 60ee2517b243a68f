"""
Render module schemas and value types.
"""

import io
import math
from dataclasses import dataclass
from typing import Any

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field

from mdsnap.shared.types import PipelineState


# =============================================================================
# GEOMETRY
# =============================================================================

class ContentGeometry(BaseModel):
    """Content container box in CSS pixels plus the surface's pixel ratio."""
    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)
    device_pixel_ratio: float = Field(default=1.0, ge=1.0)

    @classmethod
    def from_rect(cls, rect: dict[str, Any]) -> "ContentGeometry":
        """Build from a raw bounding rect, rounding outward.

        Offsets are floored and extents ceiled so sub-pixel positions never
        clip content.
        """
        return cls(
            x=math.floor(rect["x"]),
            y=math.floor(rect["y"]),
            width=math.ceil(rect["width"]),
            height=math.ceil(rect["height"]),
            device_pixel_ratio=rect.get("devicePixelRatio") or 1.0,
        )

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height


class PixelRect(BaseModel):
    """Crop rectangle in device pixels."""
    model_config = ConfigDict(frozen=True)

    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def as_box(self) -> tuple[int, int, int, int]:
        """(left, upper, right, lower) as Pillow expects."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)


# =============================================================================
# RESULT
# =============================================================================

@dataclass
class RenderedImage:
    """Final cropped raster. Owned by the caller."""
    image: Image.Image
    geometry: ContentGeometry
    crop: PixelRect
    raster_size: tuple[int, int]

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def device_pixel_ratio(self) -> float:
        return self.geometry.device_pixel_ratio

    def to_png(self) -> bytes:
        output = io.BytesIO()
        self.image.save(output, format="PNG")
        return output.getvalue()


# =============================================================================
# API
# =============================================================================

class RenderMarkdownRequest(BaseModel):
    """Request to render Markdown to a PNG image."""
    markdown: str = Field(..., description="Markdown source text")


class RenderImageInfo(BaseModel):
    """Metadata of a rendered image."""
    width: int
    height: int
    device_pixel_ratio: float
    size_bytes: int
    duration_ms: int | None = None


class RenderStatus(BaseModel):
    """Current render pipeline status."""
    active: bool = False
    run_id: str | None = None
    state: PipelineState = PipelineState.IDLE
    history: list[PipelineState] = Field(default_factory=list)
    last_error: dict[str, Any] | None = None
