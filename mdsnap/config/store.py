"""
Persistent user configuration (JSON file).
"""

import json
import os
from pathlib import Path
from typing import Any

from mdsnap.shared.logging import get_logger

logger = get_logger(__name__)


DEFAULT_CONFIG: dict[str, Any] = {
    "device_scale_factor": 2.0,
    "marked_script_path": None,
    "notifications_enabled": True,
}


def default_config_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser("~/.config")
    return Path(base) / "mdsnap" / "config.json"


class ConfigStore:
    """Load and save user overrides for a subset of settings."""

    def __init__(self, config_path: Path | None = None):
        self.config_path = Path(config_path) if config_path else default_config_path()

    def _read(self) -> dict[str, Any]:
        if not self.config_path.exists():
            return {}
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable config {self.config_path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config {self.config_path}: not a JSON object")
            return {}
        return {k: v for k, v in data.items() if k in DEFAULT_CONFIG}

    def load(self) -> dict[str, Any]:
        """Defaults merged with whatever the file holds."""
        config = dict(DEFAULT_CONFIG)
        config.update(self._read())
        return config

    def load_overrides(self) -> dict[str, Any]:
        """Only the keys the user actually set (non-null)."""
        return {k: v for k, v in self._read().items() if v is not None}

    def save(self, config: dict[str, Any]) -> None:
        unknown = set(config) - set(DEFAULT_CONFIG)
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        logger.info(f"Saved config to {self.config_path}")
