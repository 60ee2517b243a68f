"""Configuration: environment settings and persisted user overrides."""

from .settings import (
    RenderTimings,
    Settings,
    get_settings,
    init_settings,
    reset_settings,
)
from .store import ConfigStore

__all__ = [
    "ConfigStore",
    "RenderTimings",
    "Settings",
    "get_settings",
    "init_settings",
    "reset_settings",
]
