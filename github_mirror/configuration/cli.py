"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
import logging
from pathlib import Path

import structlog
import typer
from dotenv import load_dotenv
from typer import Argument, Option
from typing_extensions import Annotated

from github_mirror.configuration.env import Settings
from github_mirror.configuration.exceptions import GitHubAuthenticationConfigurationUndefinedError
from github_mirror.configuration.models import NotificationMode, UpdateTarget
from github_mirror.configuration.reconcile import reconcile_run_context
from github_mirror.store.exceptions import DecodeError, PersistError
from github_mirror.synchronize.driver import run_update_workflow
from github_mirror.synchronize.exceptions import QueryFailureError

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False)


@typer_app.callback()
def main_callback(
    debug: Annotated[bool, Option(envvar="DEBUG", help="Enable debug logging.")] = False,
) -> None:
    """Keep a local mirror of your GitHub repositories, pull requests and issues up to date."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if debug else logging.INFO))


def print_update_usage(message: str | None) -> None:
    """Print the options accepted by the update command, preceded by an optional error message."""
    if message:
        typer.echo(f"Error: {message}", err=True)
        typer.echo("")
    typer.echo("Please provide one of the following options for 'update':")
    typer.echo(f"  {UpdateTarget.ALL.value:<10}Update all items")
    typer.echo("")
    typer.echo("Options for notifications:")
    typer.echo(f"  {'-n':<10}List new comments and reviews on items")
    typer.echo("")


@typer_app.command(name="update")
def update_cli(
    target: Annotated[str | None, Argument(help="What to update: 'all', or 'help' to list the options.")] = None,
    notify_comments_and_reviews: Annotated[
        bool, Option("-n", "--notify-comments-and-reviews", help="List new comments and reviews on items.")
    ] = False,
    github_api_url: Annotated[str | None, Option(envvar="GITHUB_API_URL", help="GitHub API URL.")] = None,
    github_pat_token: Annotated[str | None, Option(envvar="GITHUB_PAT_TOKEN", help="GitHub Personal Access Token.")] = None,
    save_location: Annotated[Path | None, Option(envvar="SAVE_LOCATION", help="Directory holding the local mirror.")] = None,
) -> None:
    """Fetch the latest state of every synchronized item and update the local mirror."""
    if target is None:
        print_update_usage("Missing argument")
        return
    if target == UpdateTarget.HELP.value:
        print_update_usage(None)
        return
    if target != UpdateTarget.ALL.value:
        print_update_usage(f"Unknown argument: {target}")
        return

    notification_mode = NotificationMode.CONSOLE_COMMENTS_AND_REVIEWS if notify_comments_and_reviews else NotificationMode.STANDARD
    try:
        context = asyncio.run(
            reconcile_run_context(
                Settings(),
                cli_github_pat_token=github_pat_token,
                cli_github_api_url=github_api_url,
                cli_save_location=save_location,
                cli_notification_mode=notification_mode,
            )
        )
    except GitHubAuthenticationConfigurationUndefinedError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from e

    typer.echo("Starting update...")
    try:
        result = asyncio.run(run_update_workflow(context))
    except (QueryFailureError, DecodeError, PersistError) as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from e

    typer.echo("Update done.")
    typer.echo(f"Total update API cost: {result.total_query_costs}")
    if result.total_api_remaining is not None:
        typer.echo(f"Remaining API limit: {result.total_api_remaining}")


if __name__ == "__main__":
    typer_app()
