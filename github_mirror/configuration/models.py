"""Models for configuration between CLI arguments and environment variables."""

from enum import Enum


class NotificationMode(str, Enum):
    """Enum for how announcements are surfaced at the end of an update."""

    STANDARD = "standard"
    CONSOLE_COMMENTS_AND_REVIEWS = "console_comments_and_reviews"


class UpdateTarget(str, Enum):
    """Enum for the arguments accepted by the update command."""

    ALL = "all"
    HELP = "help"
