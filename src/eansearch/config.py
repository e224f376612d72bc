"""
Settings for the HTTP facade, loaded with Pydantic Settings.

The client library itself takes its token and timeout as constructor
arguments and never reads the environment.
"""

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Facade configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=(".env.local", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    ean_search_token: SecretStr = Field(..., description="ean-search.org API token")
    ean_search_timeout: float = Field(180, description="Upstream request timeout in seconds")

    # Logging
    log_level: str = "INFO"

    @property
    def ean_search_token_str(self) -> str:
        """Get the API token as a plain string."""
        return self.ean_search_token.get_secret_value()


@lru_cache
def get_settings() -> Settings:
    """Get cached facade settings."""
    return Settings()
