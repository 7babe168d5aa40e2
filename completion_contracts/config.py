"""
Configuration management for Completion Contracts.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Every field can be overridden with a ``COMPLETION_``-prefixed environment
    variable (e.g. ``COMPLETION_LOG_LEVEL=DEBUG``) or a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="COMPLETION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Completion Contracts")

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console", description="'json' or 'console'")

    # Storage
    store_uri: str = Field(
        default="file://./workspace",
        description="Artifact store URI used when no workspace root is given",
    )

    # Evaluation
    max_parallel_validators: int = Field(default=4, ge=1)
    default_max_iterations: int = Field(
        default=10, ge=1, description="Applies when a contract sets no max_iterations"
    )
    default_stagnation_window: int = Field(default=3, ge=2)

    # Integrity
    inject_universal_defaults: bool = Field(default=True)
    require_must_coverage: bool = Field(default=True)
    citation_pattern: str = Field(
        default=r"\[[^\]]+\]\(([^)]+)\)",
        description="Citation regex used by the injected traceability criterion",
    )


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
