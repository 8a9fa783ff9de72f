"""
Application configuration using Pydantic Settings.

Values come from environment variables or a local ``.env`` file. Leaving
``DATABASE_URL`` unset runs the service on the in-memory storage backend.
"""

import logging
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Name shown in the OpenAPI docs
        environment: Deployment environment label
        debug: Debug mode flag
        database_url: SQLAlchemy URL; ``None`` selects the in-memory backend
        db_echo: Echo SQL statements to the log
        bcrypt_rounds: Work factor for password hashing
        cors_origins: Origins allowed by the CORS middleware
        log_level: Root log level
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "PlanVault"
    environment: str = "development"
    debug: bool = False

    # Database
    database_url: Optional[str] = None
    db_echo: bool = False

    # Security
    bcrypt_rounds: int = 12

    # HTTP
    cors_origins: List[str] = ["*"]

    log_level: str = "INFO"

    @property
    def uses_database(self) -> bool:
        return bool(self.database_url)


@lru_cache()
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()


settings = get_settings()
