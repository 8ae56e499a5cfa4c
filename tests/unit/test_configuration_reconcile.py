"""Unit tests for reconciling CLI arguments and settings into a run context."""

from pathlib import Path

import pytest

from github_mirror.configuration.config import RunContext
from github_mirror.configuration.env import Settings
from github_mirror.configuration.exceptions import GitHubAuthenticationConfigurationUndefinedError
from github_mirror.configuration.models import NotificationMode
from github_mirror.configuration.reconcile import reconcile_run_context, validate_github_authentication_configuration
from github_mirror.store.models import RepoVisibility


@pytest.mark.asyncio
async def test_valid_pat_authentication() -> None:
    """Test that a PAT is accepted."""
    # When
    token = await validate_github_authentication_configuration(github_pat_token="test-token")

    # Then
    assert token == "test-token"


@pytest.mark.asyncio
async def test_no_auth_error() -> None:
    """Test that error is raised when no authentication is provided."""
    # When/Then
    with pytest.raises(GitHubAuthenticationConfigurationUndefinedError) as exc_info:
        await validate_github_authentication_configuration(github_pat_token=None)

    assert "No GitHub authentication configuration provided" in str(exc_info.value)


@pytest.mark.asyncio
async def test_cli_values_take_precedence(tmp_path: Path) -> None:
    """Test that CLI arguments override settings."""
    # Given
    settings = Settings(GITHUB_PAT_TOKEN="env-token", GITHUB_API_URL="https://ghe.example.com/api", SAVE_LOCATION=tmp_path / "env")

    # When
    context = await reconcile_run_context(
        settings,
        cli_github_pat_token="cli-token",
        cli_save_location=tmp_path / "cli",
        cli_notification_mode=NotificationMode.CONSOLE_COMMENTS_AND_REVIEWS,
    )

    # Then
    assert isinstance(context, RunContext)
    assert context.github_pat_token == "cli-token"
    assert context.github_api_url == "https://ghe.example.com/api"
    assert context.save_location == tmp_path / "cli"
    assert context.notification_mode == NotificationMode.CONSOLE_COMMENTS_AND_REVIEWS


@pytest.mark.asyncio
async def test_settings_fill_in_defaults(tmp_path: Path) -> None:
    """Test that settings are used when no CLI argument is given."""
    # Given
    settings = Settings(
        GITHUB_PAT_TOKEN="env-token",
        SAVE_LOCATION=tmp_path,
        QUERY_BATCH_SIZE=50,
        NEW_REPO_VISIBILITY=RepoVisibility.ONLY_PRS,
        DEBUG=True,
    )

    # When
    context = await reconcile_run_context(settings)

    # Then
    assert context.github_pat_token == "env-token"
    assert context.save_location == tmp_path
    assert context.query_batch_size == 50
    assert context.new_repo_visibility == RepoVisibility.ONLY_PRS
    assert context.notification_mode == NotificationMode.STANDARD
    assert context.debug is True


@pytest.mark.asyncio
async def test_missing_token_raises(tmp_path: Path) -> None:
    settings = Settings(GITHUB_PAT_TOKEN=None, SAVE_LOCATION=tmp_path)

    with pytest.raises(GitHubAuthenticationConfigurationUndefinedError):
        await reconcile_run_context(settings)
