from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    App settings.

    Notes:
    - Defaults target a local SQLite file next to the package.
    - Every field can be overridden with a `PERSONNEL_`-prefixed env var.
    """

    model_config = SettingsConfigDict(env_prefix="PERSONNEL_", extra="ignore")

    db_url: str | None = None
    echo_sql: bool = False
    log_level: str = "INFO"

    cors_origins: list[str] = ["*"]
    seed_demo_data: bool = False

    host: str = "0.0.0.0"
    port: int = 8080

    def resolved_db_url(self) -> str:
        if self.db_url:
            return self.db_url

        repo_root = Path(__file__).resolve().parents[1]
        db_path = repo_root / "personnel.db"
        return f"sqlite:///{db_path}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
