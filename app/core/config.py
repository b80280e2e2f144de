from functools import lru_cache

from pydantic import EmailStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_env: str = "local"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    # Security / session
    secret_key: str = "changeme"  # override in .env
    session_cookie_name: str = "session"
    session_max_age_seconds: int = 24 * 60 * 60

    # Database
    database_url: str = "sqlite:///./practice_admin.db"

    # Redis
    redis_url: str | None = None
    analytics_cache_ttl_seconds: int = 60

    # Email
    email_backend: str = "console"  # console | smtp | resend
    email_from: EmailStr = "no-reply@example.com"
    email_smtp_host: str = "localhost"
    email_smtp_port: int = 1025
    email_smtp_username: str | None = None
    email_smtp_password: str | None = None
    resend_api_key: str | None = None
    email_sandbox_mode: bool = True
    email_test_recipient: EmailStr | None = None
    notification_max_attempts: int = 3

    # Scheduling analytics
    clinic_open_hour: int = 9
    clinic_close_hour: int = 17
    default_wait_time_minutes: int = 10

    # Pydantic v2 style config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings instance so the .env is parsed once.
    """
    return Settings()
