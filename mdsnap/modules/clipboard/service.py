"""
Clipboard conversion service.

Reads Markdown from the clipboard, renders it, and writes the PNG back.
"""

import asyncio

from mdsnap.config import get_settings
from mdsnap.modules.render.service import RenderService, get_render_service
from mdsnap.shared.errors import BusyError, EmptyInputError, MdSnapError
from mdsnap.shared.logging import get_logger

from .backends import Clipboard, DesktopNotifier, Notifier, SystemClipboard
from .detect import is_markdown
from .schemas import ConvertResult

logger = get_logger(__name__)


class ClipboardService:
    """Clipboard-to-image conversion, the shortcut's entry point."""

    def __init__(
        self,
        render_service: RenderService | None = None,
        clipboard: Clipboard | None = None,
        notifier: Notifier | None = None,
    ):
        self.render_service = render_service or get_render_service()
        self.clipboard = clipboard or SystemClipboard()
        self.notifier = notifier or DesktopNotifier(enabled=get_settings().notifications_enabled)

    async def convert(self) -> ConvertResult:
        """
        Convert the clipboard's text to an image on the clipboard.

        Raises:
            BusyError: a conversion is already running
            EmptyInputError: the clipboard holds no text
            MdSnapError: rendering or clipboard failure
        """
        if self.render_service.busy:
            self._notify_busy()
            raise BusyError("Already processing; wait for the current conversion to complete")

        try:
            text = await asyncio.to_thread(self.clipboard.read_text)
            logger.info(f"Clipboard text length: {len(text)}")

            if not text.strip():
                self.notifier.notify("Empty Clipboard", "Clipboard is empty. Please copy some text first.")
                raise EmptyInputError("Clipboard is empty")

            looks_like_markdown = is_markdown(text)
            if not looks_like_markdown:
                logger.info("Clipboard content does not appear to be Markdown, converting anyway")

            png_bytes, info = await self.render_service.render_png(text)
            await asyncio.to_thread(self.clipboard.write_png, png_bytes)

        except EmptyInputError:
            raise
        except BusyError:
            # Another run took the pipeline while the clipboard was being read
            self._notify_busy()
            raise
        except MdSnapError as e:
            logger.error(f"Clipboard conversion failed: [{e.code}] {e}")
            self.notifier.notify("Conversion Error", f"Failed to convert: {e.message}")
            raise

        self.notifier.notify("Converted!", "Markdown converted to image. Ready to paste.")
        return ConvertResult(
            success=True,
            width=info.width,
            height=info.height,
            size_bytes=info.size_bytes,
            looks_like_markdown=looks_like_markdown,
            duration_ms=info.duration_ms,
        )

    def _notify_busy(self) -> None:
        self.notifier.notify(
            "Already Processing", "Please wait for the current conversion to complete."
        )
