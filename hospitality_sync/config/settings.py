"""Application settings and configuration management."""
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Hospitality REST API configuration."""

    base_url: str = "http://localhost:5000/api"
    token: str = ""  # Bearer credential issued by the identity service
    request_timeout: int = 30
    max_retries: int = 3  # Applies to snapshot reads only, never to transitions
    retry_backoff_base: float = 2.0

    model_config = SettingsConfigDict(env_prefix="HOSPITALITY_API_")


class RefreshSettings(BaseSettings):
    """Polling intervals (seconds) per operational view."""

    front_desk_interval: float = 30.0
    housekeeping_interval: float = 60.0

    model_config = SettingsConfigDict(env_prefix="REFRESH_")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main application settings."""

    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False

    # Tenant context, read from .env as TENANT_SLUG / BRANCH_ID
    tenant_slug: str = ""
    branch_id: Optional[str] = None

    # Hospitality API from .env (HOSPITALITY_API_BASE_URL, HOSPITALITY_API_TOKEN); overrides nested api.*
    hospitality_api_base_url: str = ""
    hospitality_api_token: str = ""

    # Sub-settings
    api: ApiSettings = ApiSettings()
    refresh: RefreshSettings = RefreshSettings()
    logging: LoggingSettings = LoggingSettings()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    def validate_api(self) -> list[str]:
        """Validate required vars for talking to the API. Returns list of missing var names."""
        missing = []
        if not self.api_base_url:
            missing.append("HOSPITALITY_API_BASE_URL")
        if not self.api_token:
            missing.append("HOSPITALITY_API_TOKEN")
        return missing

    @property
    def api_base_url(self) -> str:
        """API base URL without a trailing slash."""
        return (self.hospitality_api_base_url or self.api.base_url or "").strip().rstrip("/")

    @property
    def api_token(self) -> str:
        """Bearer token, from .env or the environment."""
        return (self.hospitality_api_token or self.api.token or "").strip()


# Global settings instance
settings = Settings()
