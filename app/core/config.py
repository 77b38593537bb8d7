"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Event Registrations"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"  # Bind to all interfaces for external access
    port: int = 8000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./registrations.db"

    # Identity (verified upstream, forwarded as headers)
    subject_header: str = "X-Subject-Id"
    admin_key_header: str = "X-Admin-Key"
    admin_api_key: str = "change-me-in-production"

    # Registration rules
    default_rejection_reason: str = "Rejected by admin"
    free_reference_prefix: str = "FREE"

    # Notification redelivery
    notification_redelivery_seconds: int = 60
    notification_redelivery_window_hours: int = 24


settings = Settings()
