"""Unit tests for the notification queue."""

import pytest

from github_mirror.configuration.models import NotificationMode
from github_mirror.notifications.models import Announcement, AnnouncementType
from github_mirror.notifications.queue import NotificationQueue

NEW_ISSUE = Announcement(AnnouncementType.NEW_ISSUE, "I1", "New Issue #2: Crash on start")
NEW_COMMENT = Announcement(AnnouncementType.NEW_COMMENT, "C1", "@dave commented", subtitle="Nice work", url="https://github.com/acme/api/pull/1")


def test_standard_mode_delivers_everything(capsys: pytest.CaptureFixture[str]) -> None:
    queue = NotificationQueue()
    queue.enqueue(NEW_ISSUE)
    queue.enqueue(NEW_COMMENT)

    delivered = queue.process_queue()

    assert delivered == [NEW_ISSUE, NEW_COMMENT]
    assert queue.pending == []
    assert "[new_issue] New Issue #2: Crash on start" in capsys.readouterr().out


def test_console_mode_delivers_only_comments_and_reviews(capsys: pytest.CaptureFixture[str]) -> None:
    """Comment and review announcements are printed with their details."""
    queue = NotificationQueue(NotificationMode.CONSOLE_COMMENTS_AND_REVIEWS)
    queue.enqueue(NEW_ISSUE)
    queue.enqueue(NEW_COMMENT)

    delivered = queue.process_queue()

    assert delivered == [NEW_COMMENT]
    output = capsys.readouterr().out
    assert "Nice work" in output
    assert "https://github.com/acme/api/pull/1" in output
    assert "Crash on start" not in output


def test_process_queue_twice_delivers_once() -> None:
    queue = NotificationQueue()
    queue.enqueue(NEW_ISSUE)

    queue.process_queue()
    second = queue.process_queue()

    assert second == []
    assert queue.delivered == [NEW_ISSUE]
