"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Courtside"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"  # Bind to all interfaces for external access
    port: int = 8000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./courtside.db"
    enforce_write_policy: bool = True  # Emulate row-level security on writes

    # Games
    default_duration_minutes: int = 120
    max_candidate_times: int = 2

    # Background reconciliation
    sweep_enabled: bool = True
    sweep_interval_minutes: int = 10


settings = Settings()
