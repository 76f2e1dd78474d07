"""
Shared configuration management for the mdlabels web proxy.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEVELOPMENT_MODES = ("dev", "development")


class BaseConfig(BaseSettings):
    """Base configuration class with common settings.

    Field names double as environment variable names (case-insensitive),
    so ``PORT`` and ``MODE`` map straight onto ``port`` and ``mode``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    mode: str = Field(default="")
    log_level: str = Field(default="info")

    # Listener
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    read_timeout: float = Field(default=15.0)
    write_timeout: float = Field(default=15.0)
    idle_timeout: float = Field(default=60.0)
    shutdown_timeout: float = Field(default=10.0)

    # External services
    musicbrainz_url: str = Field(default="https://musicbrainz.org/ws/2")
    coverart_url: str = Field(default="https://coverartarchive.org")
    musicbrainz_contact: str = Field(default="https://mdlabels.incursion.dev ; pborges475@gmail.com")
    search_timeout: float = Field(default=10.0)
    artwork_timeout: float = Field(default=10.0)
    artwork_base64_timeout: float = Field(default=15.0)

    # Rate limiting (MusicBrainz allows 50 req/s)
    search_min_interval: float = Field(default=0.020, ge=0)

    # Frontend
    static_dir: str = Field(default="mdlabels-ui/dist")
    dev_server_origin: str = Field(default="http://localhost:5173")

    # Build metadata, baked into the image at build time
    app_version: str = Field(default="dev")
    build_time: str = Field(default="unknown")
    git_commit: str = Field(default="unknown")

    @property
    def is_development(self) -> bool:
        """True when MODE selects the external dev server workflow."""
        return self.mode in DEVELOPMENT_MODES

    @property
    def mode_label(self) -> str:
        return "development" if self.is_development else "production"


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str = "web"


def get_config(service_name: str, **overrides) -> ServiceConfig:
    """Resolve configuration for a service from the environment.

    Called once at process start; the result is handed to constructors.
    """
    return ServiceConfig(service_name=service_name, **overrides)
