"""Library configuration using Pydantic Settings.

Configuration is loaded from environment variables. Optionally, point
`ENV_FILE` at a local env file (for development); it is never loaded
implicitly.
"""

import os
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppEnvironment(str, Enum):
    """Application environment values."""

    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class Settings(BaseSettings):
    """
    Option tree engine settings with type validation.

    The engine itself is pure; these settings govern the document layer
    (parse limits) and the ambient logging/metrics of the service layer.
    """

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None, env_prefix="", extra="ignore"
    )

    # Application
    app_env: AppEnvironment = AppEnvironment.LOCAL
    app_name: str = "option-tree-engine"
    app_log_level: str = "INFO"

    # Observability
    observability_structured_logs: bool = True
    metrics_enabled: bool = True

    # Document limits
    # Condition expressions nested deeper than this are rejected when a
    # document is parsed, before the recursive evaluator ever sees them.
    condition_max_depth: int = Field(default=32, ge=1, le=256)

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        """Validate and parse app_env to AppEnvironment enum."""
        if isinstance(v, AppEnvironment):
            return v
        try:
            return AppEnvironment(v.lower())
        except ValueError:
            raise ValueError(
                f"app_env must be one of {[e.value for e in AppEnvironment]}, got '{v}'"
            )

    @field_validator("app_log_level")
    @classmethod
    def validate_app_log_level(cls, v: str) -> str:
        """Normalize the log level name and reject unknown levels."""
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"app_log_level must be a standard logging level, got '{v}'")
        return level


settings = Settings()
