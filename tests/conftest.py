"""
Shared fixtures: a fake render surface so the pipeline runs without a browser.
"""

import asyncio
import io
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient
from PIL import Image, ImageDraw

from mdsnap.app import build_app
from mdsnap.config import RenderTimings, Settings, init_settings, reset_settings
from mdsnap.modules.render.capture import CaptureCropEngine
from mdsnap.modules.render.pipeline import PipelineOrchestrator
from mdsnap.modules.render.renderer import ContentRenderer
from mdsnap.modules.render.resizer import SurfaceResizer
from mdsnap.modules.render.service import RenderService, set_render_service
from mdsnap.modules.render.template import MarkdownLibrary

FAKE_LIBRARY = MarkdownLibrary(
    source="window.marked = { parse: function (s) { return '<p>' + s + '</p>'; } };",
)


class FakeSurface:
    """
    In-memory RenderSurface.

    Content has a fixed natural size in CSS pixels; the fit resize can
    optionally shift its offset to simulate reflow.
    """

    def __init__(
        self,
        *,
        content_size: tuple[float, float] = (300.0, 120.0),
        offset: tuple[float, float] = (16.0, 16.0),
        fit_offset: tuple[float, float] | None = None,
        dpr: float = 2.0,
        ready_after: int | None = 1,
        poll_errors: int = 0,
        container: bool = True,
        empty_capture: bool = False,
        load_delay: float = 0.0,
        load_error: Exception | None = None,
        render_error: str | None = None,
    ):
        self.content_size = content_size
        self.offset = offset
        self.fit_offset = fit_offset
        self.dpr = dpr
        self.ready_after = ready_after
        self.poll_errors = poll_errors
        self.container = container
        self.empty_capture = empty_capture
        self.load_delay = load_delay
        self.load_error = load_error
        self.render_error = render_error

        self.viewport = (1200, 800)
        self.resizes: list[tuple[int, int]] = []
        self.html: str | None = None
        self.polls = 0
        self.measures = 0
        self.screenshots = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def current_offset(self) -> tuple[float, float]:
        if self.fit_offset is not None and len(self.resizes) >= 2:
            return self.fit_offset
        return self.offset

    async def load_html(self, html: str) -> None:
        self.html = html
        if self.load_delay:
            await asyncio.sleep(self.load_delay)
        if self.load_error is not None:
            raise self.load_error

    async def evaluate(self, script: str) -> Any:
        if "readyState" in script:
            self.polls += 1
            if self.polls <= self.poll_errors:
                raise RuntimeError("Execution context was destroyed")
            rendered = self.ready_after is not None and self.polls >= self.ready_after
            return {
                "readyState": "complete",
                "libraryLoaded": True,
                "markdownRendered": rendered,
                "renderError": self.render_error,
                "containerExists": self.container,
                "contentExists": self.container,
            }
        if "getBoundingClientRect" in script:
            self.measures += 1
            if not self.container:
                return None
            x, y = self.current_offset()
            width, height = self.content_size
            return {"x": x, "y": y, "width": width, "height": height, "devicePixelRatio": self.dpr}
        raise AssertionError(f"Unexpected script: {script[:60]}")

    async def resize(self, width: int, height: int) -> None:
        self.viewport = (width, height)
        self.resizes.append((width, height))

    async def screenshot(self) -> bytes:
        self.screenshots += 1
        if self.empty_capture:
            return b""
        width = round(self.viewport[0] * self.dpr)
        height = round(self.viewport[1] * self.dpr)
        image = Image.new("RGB", (width, height), "white")
        x, y = self.current_offset()
        w, h = self.content_size
        draw = ImageDraw.Draw(image)
        draw.rectangle(
            [x * self.dpr, y * self.dpr, (x + w) * self.dpr - 1, (y + h) * self.dpr - 1],
            fill="black",
        )
        output = io.BytesIO()
        image.save(output, format="PNG")
        return output.getvalue()

    async def close(self) -> None:
        self._closed = True


class FakeSurfaceFactory:
    """Hands out surfaces built by ``make``; remembers every one created."""

    def __init__(self, **surface_kwargs: Any):
        self.surface_kwargs = surface_kwargs
        self.created: list[FakeSurface] = []
        self.closed = False

    async def create_surface(self) -> FakeSurface:
        surface = FakeSurface(**self.surface_kwargs)
        self.created.append(surface)
        return surface

    async def aclose(self) -> None:
        self.closed = True


def fast_timings(**overrides: Any) -> RenderTimings:
    values = dict(
        load_timeout=1.0,
        ready_grace_delay=0.0,
        ready_poll_interval=0.0,
        ready_max_attempts=100,
        style_settle_delay=0.0,
        expand_settle_delay=0.0,
        fit_settle_delay=0.0,
        overall_timeout=5.0,
    )
    values.update(overrides)
    return RenderTimings(**values)


def make_orchestrator(
    factory: FakeSurfaceFactory | None = None,
    timings: RenderTimings | None = None,
) -> PipelineOrchestrator:
    timings = timings or fast_timings()
    return PipelineOrchestrator(
        surface_factory=factory or FakeSurfaceFactory(),
        renderer=ContentRenderer(timings, library=FAKE_LIBRARY),
        resizer=SurfaceResizer(timings=timings),
        capture=CaptureCropEngine(),
        timings=timings,
    )


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep tests away from the user's real config file."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    reset_settings()
    settings = init_settings(Settings(notifications_enabled=False))
    yield settings
    reset_settings()
    set_render_service(None)


@pytest.fixture
def surface_factory() -> FakeSurfaceFactory:
    return FakeSurfaceFactory()


@pytest.fixture
def orchestrator(surface_factory: FakeSurfaceFactory) -> PipelineOrchestrator:
    return make_orchestrator(surface_factory)


@pytest.fixture
def render_service(orchestrator: PipelineOrchestrator) -> RenderService:
    service = RenderService(orchestrator=orchestrator)
    set_render_service(service)
    return service


@pytest.fixture
def client(render_service: RenderService) -> TestClient:
    return TestClient(build_app())
