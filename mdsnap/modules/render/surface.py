"""
Render surfaces.

A surface is an isolated off-screen document host. The pipeline only talks
to the ``RenderSurface`` protocol; ``PlaywrightSurface`` backs it with a
headless Chromium page living in its own browser context.
"""

import asyncio
from typing import Any, Protocol

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from mdsnap.shared.errors import LoadFailureError, RenderError
from mdsnap.shared.logging import get_logger

logger = get_logger(__name__)


# Initial viewport before the first resize pass
INITIAL_VIEWPORT = {"width": 1200, "height": 800}


class RenderSurface(Protocol):
    """Disposable document host owned by exactly one pipeline run."""

    @property
    def closed(self) -> bool: ...

    async def load_html(self, html: str) -> None:
        """Load a document from memory, returning once the load event fired."""
        ...

    async def evaluate(self, script: str) -> Any:
        """Evaluate a function expression in the document and return its value."""
        ...

    async def resize(self, width: int, height: int) -> None:
        """Set the viewport size in CSS pixels."""
        ...

    async def screenshot(self) -> bytes:
        """PNG snapshot of the current viewport at device pixel density."""
        ...

    async def close(self) -> None: ...


class SurfaceFactory(Protocol):
    async def create_surface(self) -> RenderSurface: ...

    async def aclose(self) -> None: ...


# =============================================================================
# PLAYWRIGHT
# =============================================================================

class PlaywrightSurface:
    """RenderSurface backed by a Playwright page."""

    def __init__(self, context: BrowserContext, page: Page):
        self._context = context
        self._page = page
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def load_html(self, html: str) -> None:
        # The caller enforces the load deadline
        try:
            await self._page.set_content(html, wait_until="load", timeout=0)
        except PlaywrightError as e:
            raise LoadFailureError(f"Failed to load page: {e.message}") from e

    async def evaluate(self, script: str) -> Any:
        return await self._page.evaluate(script)

    async def resize(self, width: int, height: int) -> None:
        await self._page.set_viewport_size({"width": width, "height": height})

    async def screenshot(self) -> bytes:
        return await self._page.screenshot(type="png", full_page=False)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._context.close()


class PlaywrightSurfaceFactory:
    """Launches one headless Chromium lazily and hands out fresh surfaces."""

    def __init__(self, device_scale_factor: float = 2.0, headless: bool = True):
        self.device_scale_factor = device_scale_factor
        self.headless = headless
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    async def _ensure_browser(self) -> Browser:
        async with self._lock:
            if self._browser is not None and self._browser.is_connected():
                return self._browser

            logger.info("Launching headless Chromium...")
            try:
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(
                    headless=self.headless,
                    args=["--disable-dev-shm-usage"],
                )
            except PlaywrightError as e:
                raise RenderError(
                    f"Failed to launch browser: {e.message}", code="BROWSER_UNAVAILABLE"
                ) from e
            return self._browser

    async def create_surface(self) -> PlaywrightSurface:
        browser = await self._ensure_browser()
        context = await browser.new_context(
            viewport=dict(INITIAL_VIEWPORT),
            device_scale_factor=self.device_scale_factor,
        )
        try:
            page = await context.new_page()
        except BaseException:
            # Includes cancellation by the overall deadline
            await context.close()
            raise
        return PlaywrightSurface(context, page)

    async def aclose(self) -> None:
        async with self._lock:
            if self._browser is not None:
                await self._browser.close()
                self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
        logger.info("Browser closed")
