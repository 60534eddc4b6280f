"""Server configuration values, read from RELAYCHAT_* environment variables or `.env`."""
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for the relay server."""

    model_config = SettingsConfigDict(env_prefix="RELAYCHAT_", env_file=".env", extra="ignore")

    host: str = "0.0.0.0"
    port: int = 3000

    # Origins allowed to call the REST endpoints (browser front-ends)
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]

    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Operator override only: 0 keeps the full room history for the process
    # lifetime; a positive value evicts the oldest messages per room
    history_limit: int = 0


def get_settings() -> Settings:
    return Settings()
