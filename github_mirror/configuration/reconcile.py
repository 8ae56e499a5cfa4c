"""Reconcile CLI arguments, environment variables and settings into a run context."""

from pathlib import Path

import structlog

from github_mirror.configuration.config import RunContext
from github_mirror.configuration.env import Settings
from github_mirror.configuration.exceptions import GitHubAuthenticationConfigurationUndefinedError
from github_mirror.configuration.models import NotificationMode

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def validate_github_authentication_configuration(github_pat_token: str | None) -> str:
    """Validates the GitHub authentication configuration.

    The update pass queries the authenticated viewer, so only a personal access
    token (or any other user token) can be used.

    Args:
        github_pat_token (str | None): The GitHub PAT token.

    Raises:
        GitHubAuthenticationConfigurationUndefinedError: If no token is configured.

    Returns:
        str: The token to authenticate with.
    """
    if not github_pat_token:
        raise GitHubAuthenticationConfigurationUndefinedError(
            "No GitHub authentication configuration provided. Please provide a PAT "
            "(command line option --github-pat-token, environment variable GITHUB_PAT_TOKEN)."
        )
    return github_pat_token


async def reconcile_run_context(
    settings: Settings,
    cli_github_pat_token: str | None = None,
    cli_github_api_url: str | None = None,
    cli_save_location: Path | None = None,
    cli_notification_mode: NotificationMode = NotificationMode.STANDARD,
    cli_debug: bool = False,
) -> RunContext:
    """Build the run context for one update pass, preferring CLI values over settings."""
    github_pat_token = await validate_github_authentication_configuration(cli_github_pat_token or settings.GITHUB_PAT_TOKEN)
    context = RunContext(
        save_location=cli_save_location or settings.SAVE_LOCATION,
        github_pat_token=github_pat_token,
        github_api_url=cli_github_api_url or settings.GITHUB_API_URL,
        notification_mode=cli_notification_mode,
        query_batch_size=settings.QUERY_BATCH_SIZE,
        query_page_size=settings.QUERY_PAGE_SIZE,
        new_repo_visibility=settings.NEW_REPO_VISIBILITY,
        debug=cli_debug or settings.DEBUG,
    )
    logger.debug(
        "Reconciled run context",
        github_api_url=context.github_api_url,
        save_location=str(context.save_location),
        notification_mode=context.notification_mode.value,
    )
    return context
