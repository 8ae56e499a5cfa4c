"""Pydantic Settings model for application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from github_mirror.store.models import RepoVisibility
from github_mirror.utils.constants import (
    DEFAULT_GITHUB_API_URL,
    DEFAULT_QUERY_BATCH_SIZE,
    DEFAULT_QUERY_PAGE_SIZE,
    DEFAULT_SAVE_LOCATION,
)


class Settings(BaseSettings):
    """Environment variable settings for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Generic application-wide settings
    DEBUG: bool = False

    # GitHub API settings
    GITHUB_API_URL: str = DEFAULT_GITHUB_API_URL
    GITHUB_PAT_TOKEN: str | None = None

    # Query settings
    QUERY_BATCH_SIZE: int = DEFAULT_QUERY_BATCH_SIZE
    QUERY_PAGE_SIZE: int = DEFAULT_QUERY_PAGE_SIZE

    # Store settings
    SAVE_LOCATION: Path = DEFAULT_SAVE_LOCATION
    NEW_REPO_VISIBILITY: RepoVisibility = RepoVisibility.VISIBLE

