"""
client/config.py -- Client process configuration via pydantic-settings.

Same pattern as core/config.py but a separate class: the client never needs
SECRET_KEY or DATABASE_URL, and its variables carry a RECORDKEEPER_ prefix
(e.g. RECORDKEEPER_API_BASE_URL) so they cannot collide with the server's.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RECORDKEEPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_base_url: str = "http://localhost:3001"
    timeout_seconds: float = 10.0
    # None keeps the session in memory only (nothing survives a restart).
    state_path: Optional[Path] = Path.home() / ".recordkeeper" / "state.json"
    notification_duration_ms: int = 5000


@lru_cache
def get_client_settings() -> ClientSettings:
    """Return the ClientSettings singleton."""
    return ClientSettings()
