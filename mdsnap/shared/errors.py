"""
Error hierarchy.

Every error raised across a module boundary is an ``MdSnapError`` so the
HTTP layer and the clipboard trigger can report it uniformly.
"""

from typing import Any


class MdSnapError(Exception):
    """Base error with a stable code and an HTTP status."""

    code = "INTERNAL_ERROR"
    http_status = 500

    def __init__(
        self,
        message: str,
        code: str | None = None,
        http_status: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if http_status is not None:
            self.http_status = http_status
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# INPUT
# =============================================================================

class EmptyInputError(MdSnapError):
    """Text was empty or whitespace-only."""
    code = "EMPTY_INPUT"
    http_status = 400


class ClipboardError(MdSnapError):
    """Clipboard tooling missing or failed."""
    code = "CLIPBOARD_ERROR"
    http_status = 503


# =============================================================================
# RENDER PIPELINE
# =============================================================================

class RenderError(MdSnapError):
    """A render pipeline run failed. Terminal for that run."""
    code = "RENDER_ERROR"
    http_status = 500


class LoadFailureError(RenderError):
    """The document failed to load into the surface."""
    code = "LOAD_FAILURE"


class LoadTimeoutError(RenderError):
    """The document load event did not arrive in time."""
    code = "LOAD_TIMEOUT"
    http_status = 504


class RenderTimeoutError(RenderError):
    """The readiness flag never became true within the polling ceiling."""
    code = "RENDER_TIMEOUT"
    http_status = 504


class ContainerNotFoundError(RenderError):
    """The content container element is missing from the document."""
    code = "CONTAINER_NOT_FOUND"


class CaptureEmptyError(RenderError):
    """The raster snapshot (or its crop) has zero area."""
    code = "CAPTURE_EMPTY"


class OverallTimeoutError(RenderError):
    """The end-to-end deadline elapsed before the pipeline finished."""
    code = "OVERALL_TIMEOUT"
    http_status = 504


class BusyError(RenderError):
    """Another pipeline run is already in flight."""
    code = "BUSY"
    http_status = 409


class LibraryNotFoundError(RenderError):
    """The bundled Markdown-to-HTML library could not be located."""
    code = "LIBRARY_NOT_FOUND"
