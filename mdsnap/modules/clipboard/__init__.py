"""Clipboard module - convert clipboard Markdown into a PNG on the clipboard."""

from .detect import is_markdown
from .router import router
from .schemas import ConvertResult
from .service import ClipboardService

__all__ = ["router", "ClipboardService", "ConvertResult", "is_markdown"]
