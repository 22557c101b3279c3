from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DEALROOM_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    log_level: str = "INFO"
    json_logs: bool = False

    # Reference ledger service (see app.main)
    ledger_url: str = "http://localhost:8000"
    request_timeout: float = 5

    keys_dir: str = "keys"

    # Viewer session
    chain_id: int = 31337
    duration_days: int = 30
    reveal_delay_seconds: float = 1.5


def get_settings() -> Settings:
    return Settings()
