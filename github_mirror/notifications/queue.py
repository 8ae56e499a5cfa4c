"""Queue of announcements flushed to the console at the end of an update."""

import structlog
import typer

from github_mirror.configuration.models import NotificationMode
from github_mirror.notifications.models import Announcement

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class NotificationQueue:
    """Collects announcements during a pass and delivers them once the store has been saved."""

    def __init__(self, mode: NotificationMode = NotificationMode.STANDARD) -> None:
        """Initialize an empty queue for the given notification mode."""
        self.mode = mode
        self.pending: list[Announcement] = []
        self.delivered: list[Announcement] = []

    def enqueue(self, announcement: Announcement) -> None:
        """Add an announcement to the queue."""
        logger.debug("Queued announcement", type=announcement.type.value, entity_id=announcement.entity_id)
        self.pending.append(announcement)

    def process_queue(self) -> list[Announcement]:
        """Deliver every pending announcement and return the delivered ones."""
        delivered: list[Announcement] = []
        for announcement in self.pending:
            if self.mode == NotificationMode.CONSOLE_COMMENTS_AND_REVIEWS:
                if not announcement.is_comment_or_review:
                    continue
                self._echo_detailed(announcement)
            else:
                typer.echo(f"[{announcement.type.value}] {announcement.title}")
            delivered.append(announcement)
        logger.info("Processed notification queue", mode=self.mode.value, pending=len(self.pending), delivered=len(delivered))
        self.pending = []
        self.delivered.extend(delivered)
        return delivered

    def _echo_detailed(self, announcement: Announcement) -> None:
        typer.echo(announcement.title)
        if announcement.subtitle:
            typer.echo(f"  {announcement.subtitle}")
        if announcement.url:
            typer.echo(f"  {announcement.url}")
        typer.echo("")
