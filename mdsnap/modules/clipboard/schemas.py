"""
Clipboard module schemas.
"""

from pydantic import BaseModel


class ConvertResult(BaseModel):
    """Outcome of converting the clipboard's Markdown into an image."""
    success: bool
    width: int | None = None
    height: int | None = None
    size_bytes: int | None = None
    looks_like_markdown: bool = False
    duration_ms: int | None = None
