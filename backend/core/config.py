"""Application configuration loaded from the environment."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BACKEND_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Runtime settings for the photofeed backend."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "photofeed"
    app_env: str = "local"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]

    database_url: str = "sqlite+aiosqlite:///./photofeed.db"
    database_echo: bool = False

    redis_url: str = "redis://localhost:6379/0"

    session_secret: str = "change-me"
    session_cookie_name: str = "sid"
    session_ttl_seconds: int = 60 * 60 * 24 * 7
    allow_insecure_http_cookies: bool = False

    password_hash_rounds: int = 10

    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_server_metadata_url: str = (
        "https://accounts.google.com/.well-known/openid-configuration"
    )
    oauth_merge_on_username_conflict: bool = True

    storage_backend: str = "local"
    media_root: Path = BACKEND_DIR / "media"
    upload_max_bytes: int = 10 * 1024 * 1024

    minio_endpoint: str = "localhost:9000"
    minio_access_key: str = "minioadmin"
    minio_secret_key: str = "minioadmin"
    minio_bucket: str = "photofeed"
    minio_secure: bool = False


settings = Settings()
