"""Models for user-facing announcements derived during an update."""

from dataclasses import dataclass
from enum import Enum


class AnnouncementType(str, Enum):
    """Enum for the kinds of events surfaced to the user."""

    NEW_PULL_REQUEST = "new_pull_request"
    PULL_REQUEST_CLOSED = "pull_request_closed"
    PULL_REQUEST_MERGED = "pull_request_merged"
    NEW_ISSUE = "new_issue"
    ISSUE_CLOSED = "issue_closed"
    NEW_COMMENT = "new_comment"
    NEW_REVIEW = "new_review"
    NEW_REACTION = "new_reaction"
    NEW_REPOSITORY = "new_repository"


@dataclass(frozen=True)
class Announcement:
    """A single user-facing event."""

    type: AnnouncementType
    entity_id: str
    title: str
    subtitle: str | None = None
    url: str | None = None

    @property
    def is_comment_or_review(self) -> bool:
        """Return True for events about discussion activity."""
        return self.type in (AnnouncementType.NEW_COMMENT, AnnouncementType.NEW_REVIEW)
