"""
Shared types used across modules.
"""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class RequestContext:
    """Per-request context attached by the HTTP middleware."""
    request_id: str
    actor: str = "system"


class PipelineState(str, Enum):
    """Lifecycle states of a single render pipeline run."""
    IDLE = "idle"
    SURFACE_CREATED = "surface_created"
    CONTENT_READY = "content_ready"
    RESIZED_PASS1 = "resized_pass1"
    MEASURED_PASS1 = "measured_pass1"
    RESIZED_FINAL = "resized_final"
    MEASURED_FINAL = "measured_final"
    CAPTURED = "captured"
    DONE = "done"
    FAILED = "failed"
