"""
Capture & crop - snapshot the surface and cut out the content box.
"""

import io
import math

from PIL import Image, UnidentifiedImageError

from mdsnap.shared.errors import CaptureEmptyError, RenderError
from mdsnap.shared.logging import get_logger

from .schemas import ContentGeometry, PixelRect, RenderedImage
from .surface import RenderSurface

logger = get_logger(__name__)


def compute_crop_rect(geometry: ContentGeometry, raster_width: int, raster_height: int) -> PixelRect:
    """
    Convert CSS-pixel geometry to a device-pixel crop clamped to the raster.

    Offsets are floored and extents ceiled, so rounding can only grow the
    crop, never shrink it below the content.
    """
    if raster_width <= 0 or raster_height <= 0:
        raise CaptureEmptyError("capture failed: empty snapshot")

    dpr = geometry.device_pixel_ratio
    x = math.floor(geometry.x * dpr)
    y = math.floor(geometry.y * dpr)
    w = math.ceil(geometry.width * dpr)
    h = math.ceil(geometry.height * dpr)

    crop_x = max(0, min(x, raster_width - 1))
    crop_y = max(0, min(y, raster_height - 1))
    crop_w = max(0, min(w, raster_width - crop_x))
    crop_h = max(0, min(h, raster_height - crop_y))

    return PixelRect(x=crop_x, y=crop_y, width=crop_w, height=crop_h)


class CaptureCropEngine:
    """Takes a full-viewport snapshot and crops it to the content."""

    async def capture(self, surface: RenderSurface) -> Image.Image:
        data = await surface.screenshot()
        if not data:
            raise CaptureEmptyError("capture failed: empty snapshot")
        try:
            snapshot = Image.open(io.BytesIO(data))
            snapshot.load()
        except (UnidentifiedImageError, OSError) as e:
            raise RenderError(f"capture failed: {e}", code="CAPTURE_FAILED") from e

        if snapshot.width == 0 or snapshot.height == 0:
            raise CaptureEmptyError("capture failed: empty snapshot")
        return snapshot

    async def capture_and_crop(
        self, surface: RenderSurface, geometry: ContentGeometry
    ) -> RenderedImage:
        snapshot = await self.capture(surface)
        logger.info(f"Image: {snapshot.width}x{snapshot.height}")

        rect = compute_crop_rect(geometry, snapshot.width, snapshot.height)
        logger.info(f"Crop (device pixels, dpr={geometry.device_pixel_ratio:g}): {rect}")
        if rect.is_empty:
            raise CaptureEmptyError("capture failed: content region is empty")

        cropped = snapshot.crop(rect.as_box())
        return RenderedImage(
            image=cropped,
            geometry=geometry,
            crop=rect,
            raster_size=(snapshot.width, snapshot.height),
        )
