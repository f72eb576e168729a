"""Application configuration."""
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    reset_db_on_startup: bool = False

    # Companions
    companion_limit: Optional[int] = None  # None means unlimited
    recent_sessions_limit: int = 10

    # Voice assistant
    assistant_model: str = "gpt-4"
    transcriber_model: str = "nova-3"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
