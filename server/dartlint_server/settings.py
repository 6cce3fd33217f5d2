"""
dartlint Server Settings

Configuration management using pydantic settings.
Loads from environment variables with DARTLINT_ prefix.
"""

from typing import List, Optional

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Server configuration settings.

    Environment variables:
    - DARTLINT_PROJECT_PATH: Project analyzed at startup (optional)
    - DARTLINT_CONFIG_PATH: Engine config file; searched upward from the project if unset
    - DARTLINT_HOST / DARTLINT_PORT: Bind address for `python -m dartlint_server.main`
    - DARTLINT_ALLOWED_ORIGINS_RAW: Comma-separated list of allowed CORS origins
    - DARTLINT_DEBUG: Enable debug logging (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="DARTLINT_",
        env_file=".env",
        extra="ignore",
    )

    project_path: Optional[str] = None
    config_path: Optional[str] = None

    host: str = "127.0.0.1"
    port: int = 8765

    allowed_origins_raw: str = ""

    debug: bool = False

    @computed_field
    @property
    def allowed_origins(self) -> List[str]:
        """Parse comma-separated allowed origins into list."""
        if not self.allowed_origins_raw:
            return []
        return [v.strip() for v in self.allowed_origins_raw.split(",") if v.strip()]


def get_settings() -> Settings:
    return Settings()
