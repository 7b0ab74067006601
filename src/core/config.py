"""Configuration management for family-tasks."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # SQLite Configuration
    sqlite_db_path: str = Field(default="data/family_tasks.db", description="Path to the SQLite task database")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="production", description="Deployment environment reported to Logfire")

    # Task Hierarchy Configuration
    max_hierarchy_depth: int = Field(
        default=1000,
        gt=0,
        description="Ceiling on the number of tasks visited while walking a parent chain",
    )
    max_subtasks: int | None = Field(
        default=None,
        gt=0,
        description="Maximum direct subtasks per task (unset means no cap)",
    )

    # Query Configuration
    default_per_page_limit: int = Field(default=100, gt=0, description="Page size used when scanning the task store")


# Application Constants
class Constants:
    """Application-wide constants."""

    # Collections
    TASKS_COLLECTION: str = "tasks"

    # Tag Validation
    MAX_TAG_LENGTH: int = 50
    TAG_SEPARATOR: str = ","


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
