"""This module defines the configuration management for the application.

It uses Pydantic's BaseSettings to create a strongly-typed configuration
class that reads from environment variables and .env files. This ensures
all required configuration is present and valid at startup.
"""

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """A Pydantic model for managing application settings.

    It automatically loads configuration from environment variables and .env files.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    POSTGRES_DRIVER: str = "postgresql+psycopg"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: str = "5432"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "budget_tracker"
    POSTGRES_DB_SCHEMA: str | None = None

    LOG_LEVEL: str = "INFO"

    AUTH_USER_HEADER: str = "X-User-Id"
    CORS_ALLOWED_ORIGINS: list[str] = ["*"]

    ALLOCATION_LOCK_ENABLED: bool = True
    ALLOCATION_LOCK_POOL_SIZE: int = 10
    ALLOCATION_SCOPE: Literal["overlapping", "all"] = "overlapping"

    DEFAULT_NOTIFICATION_THRESHOLD: int = 80

    @field_validator("DEFAULT_NOTIFICATION_THRESHOLD")
    @classmethod
    def check_threshold_range(cls, value: int) -> int:
        """Ensures the default notification threshold is a valid percentage.

        Args:
            value: The configured threshold.

        Returns:
            The validated threshold.

        Raises:
            ValueError: If the threshold is outside the 1..100 range.
        """
        if not 1 <= value <= 100:
            raise ValueError("DEFAULT_NOTIFICATION_THRESHOLD must be between 1 and 100")
        return value

    @property
    def database_url(self) -> str:
        """Builds the SQLAlchemy connection URL from the POSTGRES_* settings.

        Returns:
            The connection URL.
        """
        return (
            f"{self.POSTGRES_DRIVER}://"
            f"{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
            f"{self.POSTGRES_DB}"
        )


class ConfigProvider:
    """A provider class that acts as a factory for the application's configuration.

    It does not hold state but provides a method to create fresh config instances.
    """

    @staticmethod
    def get_config() -> Config:
        """Factory method that instantiates and returns a new Config object.

        Calling this function will always create a new instance of the Config model,
        which forces Pydantic to reload and re-validate all settings from the
        current environment variables. This ensures the configuration is always fresh.

        Returns:
            A new, validated Config object.
        """
        return Config()
