"""Application settings loaded from environment variables and .env files.

Hey future me - every knob of the app lives here. Sections are nested models,
so an env var like ANIMELOG_JIKAN__MIN_INTERVAL_SECONDS=2 overrides
settings.jikan.min_interval_seconds. Don't read os.environ anywhere else!
"""

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class JikanSettings(BaseModel):
    """Jikan (MyAnimeList mirror) API configuration."""

    base_url: str = Field(
        default="https://api.jikan.moe/v4", description="Jikan API base URL"
    )
    # Jikan asks for max 1 request/second. Going lower gets you 429s fast.
    min_interval_seconds: float = Field(
        default=1.0, ge=0.0, description="Minimum spacing between API calls"
    )
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    user_agent: str = Field(default="animelog/0.1.0")


class StorageSettings(BaseModel):
    """Filesystem locations."""

    data_dir: Path = Field(default=Path("./data"))
    covers_dir: Path = Field(default=Path("./public/anime-covers"))
    # URL prefix the cover directory is served under (also stored in db.json)
    covers_url_prefix: str = Field(default="/anime-covers")

    @property
    def database_file(self) -> Path:
        """Path of the flat-file record store."""
        return self.data_dir / "db.json"


class ObservabilitySettings(BaseModel):
    """Logging configuration."""

    log_json_format: bool = Field(default=False)


class BackfillSettings(BaseModel):
    """Cover backfill worker configuration."""

    enabled: bool = Field(default=True)
    startup_delay_seconds: float = Field(default=5.0, ge=0.0)
    # 0 = run once after startup, never again
    interval_seconds: float = Field(default=0.0, ge=0.0)


class Settings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(
        env_prefix="ANIMELOG_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = Field(default="animelog")
    log_level: str = Field(default="INFO")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)

    jikan: JikanSettings = Field(default_factory=JikanSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    backfill: BackfillSettings = Field(default_factory=BackfillSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
