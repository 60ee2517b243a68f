"""
Application settings.

Values come from ``MDSNAP_*`` environment variables, then user overrides
persisted by ``ConfigStore`` are applied on top.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RenderTimings(BaseModel):
    """Timing and geometry constants for one render pipeline run.

    Delays and timeouts are in seconds, sizes in CSS pixels.
    """
    model_config = ConfigDict(frozen=True)

    load_timeout: float = 5.0
    ready_grace_delay: float = 0.2
    ready_poll_interval: float = 0.1
    ready_max_attempts: int = 100
    style_settle_delay: float = 0.3
    expand_width: int = 1200
    expand_height: int = 10000
    expand_settle_delay: float = 0.8
    fit_margin: int = 100
    fit_settle_delay: float = 0.4
    overall_timeout: float = 15.0


class Settings(BaseSettings):
    """Process-wide settings."""
    model_config = SettingsConfigDict(env_prefix="MDSNAP_", extra="ignore")

    # Server
    host: str = "127.0.0.1"
    port: int = 8765
    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost"])

    # Render surface
    device_scale_factor: float = Field(default=2.0, ge=1.0)
    marked_script_path: str | None = None

    # Desktop integration
    notifications_enabled: bool = True

    # Pipeline timings (see RenderTimings)
    load_timeout: float = Field(default=5.0, gt=0)
    ready_grace_delay: float = Field(default=0.2, ge=0)
    ready_poll_interval: float = Field(default=0.1, ge=0)
    ready_max_attempts: int = Field(default=100, ge=1)
    style_settle_delay: float = Field(default=0.3, ge=0)
    expand_width: int = Field(default=1200, gt=0)
    expand_height: int = Field(default=10000, gt=0)
    expand_settle_delay: float = Field(default=0.8, ge=0)
    fit_margin: int = Field(default=100, ge=0)
    fit_settle_delay: float = Field(default=0.4, ge=0)
    overall_timeout: float = Field(default=15.0, gt=0)

    def timings(self) -> RenderTimings:
        return RenderTimings(**self.model_dump(include=set(RenderTimings.model_fields)))


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings, building them on first use."""
    global _settings
    if _settings is None:
        from .store import ConfigStore

        overrides = ConfigStore().load_overrides()
        _settings = Settings(**overrides)
    return _settings


def init_settings(settings: Settings) -> Settings:
    """Install an explicit settings instance (tests, embedding)."""
    global _settings
    _settings = settings
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next ``get_settings`` rebuilds them."""
    global _settings
    _settings = None
