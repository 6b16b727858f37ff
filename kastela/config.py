"""Client configuration loaded from the environment."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class KastelaSettings(BaseSettings):
    """Kastela connection settings, read from ``KASTELA_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="KASTELA_",
        env_file=".env",
        extra="ignore",
    )

    # Server
    server_url: str = "https://127.0.0.1:3201"
    revision: str = "v0.2"  # server API revision, see kastela.revisions

    # Mutual TLS material (file paths)
    ca_cert: str
    client_cert: str
    client_key: str

    # None leaves the timeout to the transport
    timeout: Optional[float] = None


@lru_cache
def get_settings() -> KastelaSettings:
    """Get cached settings instance."""
    return KastelaSettings()
