from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Values are read from process environment and optionally from `.env`.
    """

    github_base_url: str = "https://github.com"
    request_timeout_seconds: float = 10.0
    user_agent: str = "github-contributions-api"
    cache_enabled: bool = True
    cache_ttl_seconds: float = 3600
    cors_allow_origins: list[str] = ["*"]
    gzip_minimum_size: int = 1000
    log_level: str = "INFO"
    log_dir: str | None = None
    log_rotation: str = "1 month"
    log_retention: str = "12 months"
    sentry_dsn: str | None = None
    environment: str = "development"
    release: str | None = None
    sentry_traces_sample_rate: float = 0.1

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
