"""
Pipeline orchestrator.

Runs one render strictly in sequence under an overall deadline:

    IDLE -> SURFACE_CREATED -> CONTENT_READY -> RESIZED_PASS1 -> MEASURED_PASS1
         -> RESIZED_FINAL -> MEASURED_FINAL -> CAPTURED -> DONE

Any failure moves to FAILED and aborts the run; nothing partial is returned.
"""

import asyncio
import time

from mdsnap.config import RenderTimings
from mdsnap.shared.errors import BusyError, OverallTimeoutError, RenderError
from mdsnap.shared.ids import generate_run_id
from mdsnap.shared.logging import get_logger
from mdsnap.shared.types import PipelineState

from .capture import CaptureCropEngine
from .renderer import ContentRenderer
from .resizer import SurfaceResizer
from .schemas import RenderedImage, RenderStatus
from .surface import RenderSurface, SurfaceFactory

logger = get_logger(__name__)


class PipelineOrchestrator:
    """Single-flight Markdown-to-image pipeline."""

    def __init__(
        self,
        surface_factory: SurfaceFactory,
        renderer: ContentRenderer | None = None,
        resizer: SurfaceResizer | None = None,
        capture: CaptureCropEngine | None = None,
        timings: RenderTimings | None = None,
    ):
        self.timings = timings or RenderTimings()
        self.surface_factory = surface_factory
        self.renderer = renderer or ContentRenderer(self.timings)
        self.resizer = resizer or SurfaceResizer(timings=self.timings)
        self.capture = capture or CaptureCropEngine()

        self._run_token: str | None = None
        self._surface: RenderSurface | None = None
        self.state = PipelineState.IDLE
        self.history: list[PipelineState] = []
        self.last_error: RenderError | None = None

    @property
    def busy(self) -> bool:
        return self._run_token is not None

    @property
    def status(self) -> RenderStatus:
        return RenderStatus(
            active=self.busy,
            run_id=self._run_token,
            state=self.state,
            history=list(self.history),
            last_error=self.last_error.to_dict() if self.last_error else None,
        )

    def _advance(self, state: PipelineState) -> None:
        logger.info(f"Pipeline {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def _fail(self, error: RenderError) -> None:
        if self.state is not PipelineState.FAILED:
            logger.warning(f"Pipeline failed in state {self.state.value}: [{error.code}] {error}")
            self._advance(PipelineState.FAILED)
        self.last_error = error

    async def render_markdown_to_image(self, markdown_text: str) -> RenderedImage:
        """
        Render Markdown to a cropped image.

        A concurrent call while a run is in flight is rejected, not queued.

        Raises:
            BusyError: another run holds the token
            OverallTimeoutError: the end-to-end deadline elapsed
            RenderError: any other typed pipeline failure
        """
        if self._run_token is not None:
            raise BusyError("Already processing; wait for the current conversion to complete")

        token = generate_run_id()
        self._run_token = token
        self.state = PipelineState.IDLE
        self.history = [PipelineState.IDLE]
        self.last_error = None
        start = time.monotonic()
        logger.info(f"Render run {token} started ({len(markdown_text)} chars)")

        try:
            image = await asyncio.wait_for(
                self._run(markdown_text), timeout=self.timings.overall_timeout
            )
        except asyncio.TimeoutError:
            error = OverallTimeoutError(
                f"Render timeout after {self.timings.overall_timeout:g} seconds"
            )
            self._fail(error)
            raise error from None
        finally:
            self._run_token = None

        elapsed = time.monotonic() - start
        logger.info(f"Render run {token} done in {elapsed:.3f}s: {image.width}x{image.height}")
        return image

    async def _run(self, markdown_text: str) -> RenderedImage:
        try:
            # Never share a surface with a previous run
            await self._destroy_surface()

            surface = await self.surface_factory.create_surface()
            self._surface = surface
            self._advance(PipelineState.SURFACE_CREATED)

            await self.renderer.load(surface, markdown_text)
            self._advance(PipelineState.CONTENT_READY)

            geometry = await self.resizer.two_pass_resize(surface, on_step=self._advance)

            image = await self.capture.capture_and_crop(surface, geometry)
            self._advance(PipelineState.CAPTURED)

            self._advance(PipelineState.DONE)
            return image

        except RenderError as e:
            self._fail(e)
            raise
        except Exception as e:
            logger.exception("Unexpected render failure")
            error = RenderError(f"Render failed: {e}")
            self._fail(error)
            raise error from e
        finally:
            await self._destroy_surface()

    async def _destroy_surface(self) -> None:
        surface, self._surface = self._surface, None
        if surface is None or surface.closed:
            return
        try:
            await surface.close()
        except Exception as e:
            logger.warning(f"Failed to close render surface: {e}")

    async def aclose(self) -> None:
        """Destroy any surviving surface and shut the factory down."""
        await self._destroy_surface()
        await self.surface_factory.aclose()
