"""
Surface resizer - two measurement passes so content is never clipped.

Final content size is unknown until rendered, so the surface is first
blown up to an oversized viewport, measured, then shrunk around the real
footprint plus a margin and measured again.
"""

import asyncio
from typing import Callable

from mdsnap.config import RenderTimings
from mdsnap.shared.errors import ContainerNotFoundError
from mdsnap.shared.logging import get_logger
from mdsnap.shared.types import PipelineState

from .prober import LayoutProber, Measurer
from .schemas import ContentGeometry
from .surface import RenderSurface

logger = get_logger(__name__)


StepCallback = Callable[[PipelineState], None]


class SurfaceResizer:
    """Grows then fits the surface viewport around the content."""

    def __init__(self, prober: Measurer | None = None, timings: RenderTimings | None = None):
        self.prober = prober or LayoutProber()
        self.timings = timings or RenderTimings()

    async def resize(self, surface: RenderSurface, width: int, height: int, settle: float) -> None:
        logger.info(f"Resizing surface to {width}x{height}")
        await surface.resize(width, height)
        await asyncio.sleep(settle)

    async def measure(self, surface: RenderSurface) -> ContentGeometry:
        geometry = await self.prober.measure(surface)
        if geometry is None:
            raise ContainerNotFoundError("Container not found")
        return geometry

    def fit_size(self, geometry: ContentGeometry) -> tuple[int, int]:
        """Viewport that holds the content plus a margin for offset shifts."""
        margin = self.timings.fit_margin
        return geometry.right + margin, geometry.bottom + margin

    async def two_pass_resize(
        self, surface: RenderSurface, on_step: StepCallback | None = None
    ) -> ContentGeometry:
        """
        Expand, measure, fit, re-measure.

        Returns:
            The authoritative geometry from the second measurement. Offsets
            may differ from the first pass since resizing can reflow.
        """
        t = self.timings
        step = on_step or (lambda state: None)

        await self.resize(surface, t.expand_width, t.expand_height, t.expand_settle_delay)
        step(PipelineState.RESIZED_PASS1)

        measured = await self.measure(surface)
        logger.info(f"Measured: {measured}")
        step(PipelineState.MEASURED_PASS1)

        width, height = self.fit_size(measured)
        await self.resize(surface, width, height, t.fit_settle_delay)
        step(PipelineState.RESIZED_FINAL)

        final = await self.measure(surface)
        logger.info(f"Final: {final}")
        step(PipelineState.MEASURED_FINAL)
        return final
