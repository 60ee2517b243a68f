"""
Layout prober - reads the content container's geometry.
"""

from typing import Protocol

from mdsnap.shared.logging import get_logger

from .schemas import ContentGeometry
from .scripts import MEASURE_SCRIPT
from .surface import RenderSurface

logger = get_logger(__name__)


class Measurer(Protocol):
    async def measure(self, surface: RenderSurface) -> ContentGeometry | None: ...


class LayoutProber:
    """Measures the content container. Returns None if it is absent."""

    async def measure(self, surface: RenderSurface) -> ContentGeometry | None:
        rect = await surface.evaluate(MEASURE_SCRIPT)
        if not rect:
            return None
        geometry = ContentGeometry.from_rect(rect)
        logger.debug(f"Measured container: {geometry}")
        return geometry
