"""Configuration and environment settings for the bank transactions importer."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings for the bank transactions importer."""

    database_url: str = "sqlite:///jobs.db"
    import_batch_size: int = 1000
    error_message_max_length: int = 300
    max_upload_size_bytes: int = 10 * 1024 * 1024
    stats_default_limit: int = 50
    stats_max_limit: int = 500
    log_dir: str = "logs"
    log_level: str = "INFO"
    server_host: str = "127.0.0.1"
    server_port: int = 8000

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def get_settings() -> "Settings":
    """Return an instance of the application settings."""
    return Settings()
