"""
Content renderer - loads the composed document and waits until the
Markdown has actually been mounted.
"""

import asyncio
from pathlib import Path
from typing import Any

from mdsnap.config import RenderTimings
from mdsnap.shared.errors import LoadFailureError, LoadTimeoutError, RenderError, RenderTimeoutError
from mdsnap.shared.logging import get_logger

from .scripts import readiness_script
from .surface import RenderSurface
from .template import MarkdownLibrary, compose_document, load_markdown_library

logger = get_logger(__name__)


def is_ready(status: dict[str, Any]) -> bool:
    """All three conditions must hold; readyState alone fires too early."""
    return (
        status.get("readyState") == "complete"
        and bool(status.get("libraryLoaded"))
        and status.get("markdownRendered") is True
    )


class ContentRenderer:
    """Loads Markdown into a surface and signals when rendering is complete."""

    def __init__(
        self,
        timings: RenderTimings | None = None,
        library: MarkdownLibrary | None = None,
        library_path: str | Path | None = None,
        template: str | None = None,
    ):
        self.timings = timings or RenderTimings()
        self._library = library
        self._library_path = library_path
        self.template = template

    @property
    def library(self) -> MarkdownLibrary:
        if self._library is None:
            self._library = load_markdown_library(self._library_path)
        return self._library

    async def load(self, surface: RenderSurface, markdown_text: str) -> int:
        """
        Load Markdown into the surface and wait for the ready signal.

        Returns:
            Number of readiness polls it took

        Raises:
            LoadFailureError: the document failed to load
            LoadTimeoutError: the load event did not arrive in time
            RenderTimeoutError: the readiness flag never became true
        """
        html = compose_document(markdown_text, self.library, template=self.template)
        logger.info(
            f"Loading document ({len(html)} chars, markdown {len(markdown_text)} chars)"
        )

        try:
            await asyncio.wait_for(surface.load_html(html), timeout=self.timings.load_timeout)
        except asyncio.TimeoutError:
            raise LoadTimeoutError(
                f"Page load timeout after {self.timings.load_timeout:g} seconds"
            ) from None
        except RenderError:
            raise
        except Exception as e:
            raise LoadFailureError(f"Failed to load page: {e}") from e

        return await self.wait_until_ready(surface)

    async def wait_until_ready(self, surface: RenderSurface) -> int:
        """Poll the readiness flag with a bounded number of attempts."""
        t = self.timings
        script = readiness_script(self.library.entry_point)

        await asyncio.sleep(t.ready_grace_delay)

        render_error: str | None = None
        for attempt in range(1, t.ready_max_attempts + 1):
            status = await self._probe(surface, script, attempt)

            if status is not None:
                if attempt % 10 == 0:
                    logger.debug(f"Render status (attempt {attempt}/{t.ready_max_attempts}): {status}")
                if status.get("renderError") and status["renderError"] != render_error:
                    render_error = str(status["renderError"])
                    logger.warning(f"Markdown conversion failed in page: {render_error}")
                if is_ready(status):
                    logger.info(f"Markdown rendered after {attempt} poll(s)")
                    await asyncio.sleep(t.style_settle_delay)
                    return attempt

            await asyncio.sleep(t.ready_poll_interval)

        ceiling = t.ready_max_attempts * t.ready_poll_interval
        logger.error(f"Gave up waiting for markdown to render after {t.ready_max_attempts} polls")
        message = f"Timeout waiting for markdown to render ({ceiling:g}s)"
        details: dict[str, Any] = {"attempts": t.ready_max_attempts}
        if render_error:
            message = f"{message}: {render_error}"
            details["render_error"] = render_error
        raise RenderTimeoutError(message, details=details)

    async def _probe(
        self, surface: RenderSurface, script: str, attempt: int
    ) -> dict[str, Any] | None:
        """One readiness query. Failures are transient and yield None."""
        try:
            status = await surface.evaluate(script)
        except Exception as e:
            logger.debug(f"Readiness poll {attempt} failed: {e}")
            return None

        if not isinstance(status, dict) or status.get("error"):
            logger.debug(f"Readiness poll {attempt} returned {status!r}")
            return None
        return status
