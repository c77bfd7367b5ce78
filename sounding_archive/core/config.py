"""Archive settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "sounding-archive"
    archive_root: str = "/data/soundings"
    index_file_name: str = "index.sqlite"
    file_dir_name: str = "files"
    # SQLite connection behavior
    sqlite_busy_timeout_seconds: float = 5.0  # Wait on a locked store before failing
    sqlite_journal_mode: str = "WAL"
    echo_sql: bool = False
    reference_config_path: str = "config/reference.yml"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

__all__ = ["settings", "Settings"]
