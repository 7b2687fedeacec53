"""Application configuration and environment management."""

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Attributes:
        instance_url: Base URL of the Salesforce org, e.g. ``https://acme.my.salesforce.com``.
        session_id: Session id or OAuth access token used as bearer token.
        api_version: REST API version segment.
        request_timeout_seconds: HTTP timeout for outbound API requests.
        max_retry_attempts: Maximum number of retry attempts for transient failures.
        initial_backoff_seconds: Initial backoff used when retrying failed requests.
        export_dir: Directory receiving exports written without an explicit path.
    """

    instance_url: str = Field(..., alias="SF_INSTANCE_URL")
    session_id: SecretStr = Field(..., alias="SF_SESSION_ID")
    api_version: str = Field(default="v59.0", alias="SF_API_VERSION")
    request_timeout_seconds: int = Field(default=30, alias="REQUEST_TIMEOUT_SECONDS")
    max_retry_attempts: int = Field(default=3, alias="MAX_RETRY_ATTEMPTS")
    initial_backoff_seconds: float = Field(default=0.5, alias="INITIAL_BACKOFF_SECONDS")
    export_dir: str = Field(default="exports", alias="EXPORT_DIR")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def get_session_id(self) -> str:
        """Return the Salesforce session id as a plain string."""
        return self.session_id.get_secret_value()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings instance."""
    return Settings()
