"""Per-pass run context shared by every component of an update.

The run context is constructed once per pass by the configuration
reconciliation and passed explicitly to the store, the query service and the
update orchestrator.
"""

from dataclasses import dataclass
from pathlib import Path

from github_mirror.configuration.models import NotificationMode
from github_mirror.store.models import RepoVisibility, User
from github_mirror.utils.constants import DEFAULT_GITHUB_API_URL, DEFAULT_QUERY_BATCH_SIZE, DEFAULT_QUERY_PAGE_SIZE


@dataclass
class RunContext:
    """Configuration and running totals for a single update pass."""

    save_location: Path
    github_pat_token: str | None = None
    github_api_url: str = DEFAULT_GITHUB_API_URL
    notification_mode: NotificationMode = NotificationMode.STANDARD
    query_batch_size: int = DEFAULT_QUERY_BATCH_SIZE
    query_page_size: int = DEFAULT_QUERY_PAGE_SIZE
    new_repo_visibility: RepoVisibility = RepoVisibility.VISIBLE
    debug: bool = False
    my_user: User | None = None
    total_query_costs: int = 0
    total_api_remaining: int | None = None
    query_count: int = 0

    def record_query_cost(self, cost: int | None, remaining: int | None) -> None:
        """Add the cost of one GraphQL request to the running totals."""
        self.query_count += 1
        if cost is not None:
            self.total_query_costs += cost
        if remaining is not None:
            self.total_api_remaining = remaining

