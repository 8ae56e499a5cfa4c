"""Contains results of an update pass."""

from github_mirror.notifications.models import Announcement
from github_mirror.synchronize.exceptions import UnresolvedParentError


class UpdateResult:
    """Contains results of a successful update pass."""

    def __init__(
        self,
        announcements: list[Announcement],
        unresolved: list[UnresolvedParentError],
        total_query_costs: int,
        total_api_remaining: int | None,
        entity_count: int,
    ) -> None:
        """Initialize the result with what the pass delivered, skipped and cost."""
        self.announcements = announcements
        self.unresolved = unresolved
        self.total_query_costs = total_query_costs
        self.total_api_remaining = total_api_remaining
        self.entity_count = entity_count
