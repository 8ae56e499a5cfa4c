"""Derive user-facing announcements from entities observed during a pass."""

from typing import TYPE_CHECKING

from github_mirror.notifications.models import Announcement, AnnouncementType
from github_mirror.store.models import Comment, Entity, Issue, PullRequest, Reaction, Repo, Review, SyncState

if TYPE_CHECKING:
    from github_mirror.store.store import EntityStore


def _parent_of(item: Entity, store: "EntityStore") -> Entity | None:
    if item.parent is None:
        return None
    return store.get(item.parent.kind, item.parent.id)


def _has_repository(item: PullRequest | Issue, store: "EntityStore") -> bool:
    return item.repo_id is not None and store.get(Repo.kind, item.repo_id) is not None


def _is_mine(login: str | None, store: "EntityStore") -> bool:
    me = store.context.my_user
    return me is not None and login is not None and login == me.login


def derive_announcement(item: Entity, store: "EntityStore") -> Announcement | None:
    """Return the announcement for an item, or None if nothing should be surfaced.

    New pull requests, issues and repositories are announced, as are pull
    requests and issues that were updated into a closed or merged state.
    Comments, reviews and reactions are announced only when they are new, were
    not written by the authenticated user, and their parent is not itself new
    (a new parent already produced its own announcement). Pull requests and
    issues whose repository is not in the store are never announced.
    """
    if item.sync_state == SyncState.NONE:
        return None

    if isinstance(item, Repo):
        if item.sync_state == SyncState.NEW:
            return Announcement(AnnouncementType.NEW_REPOSITORY, item.id, f"New repository: {item.summary()}", url=item.url)
        return None

    # Pull requests and issues without a repository are dropped at commit.
    if isinstance(item, (PullRequest, Issue)) and not _has_repository(item, store):
        return None

    if isinstance(item, PullRequest):
        if item.sync_state == SyncState.NEW and not item.is_closed and not _is_mine(item.author_login, store):
            return Announcement(AnnouncementType.NEW_PULL_REQUEST, item.id, f"New {item.summary()}", url=item.url)
        if item.sync_state == SyncState.UPDATED and item.state == "MERGED":
            return Announcement(AnnouncementType.PULL_REQUEST_MERGED, item.id, f"Merged {item.summary()}", url=item.url)
        if item.sync_state == SyncState.UPDATED and item.state == "CLOSED":
            return Announcement(AnnouncementType.PULL_REQUEST_CLOSED, item.id, f"Closed {item.summary()}", url=item.url)
        return None

    if isinstance(item, Issue):
        if item.sync_state == SyncState.NEW and not item.is_closed and not _is_mine(item.author_login, store):
            return Announcement(AnnouncementType.NEW_ISSUE, item.id, f"New {item.summary()}", url=item.url)
        if item.sync_state == SyncState.UPDATED and item.is_closed:
            return Announcement(AnnouncementType.ISSUE_CLOSED, item.id, f"Closed {item.summary()}", url=item.url)
        return None

    if item.sync_state != SyncState.NEW:
        return None
    parent = _parent_of(item, store)
    if parent is None or parent.sync_state == SyncState.NEW:
        return None

    if isinstance(item, Comment) and not _is_mine(item.author_login, store):
        return Announcement(AnnouncementType.NEW_COMMENT, item.id, f"@{item.author_login} commented", subtitle=item.body, url=item.url)

    if isinstance(item, Review) and not _is_mine(item.author_login, store):
        return Announcement(AnnouncementType.NEW_REVIEW, item.id, item.summary(), subtitle=parent.summary())

    if isinstance(item, Reaction) and not _is_mine(item.user_login, store):
        # Only reactions to the authenticated user's own posts are interesting.
        if _is_mine(getattr(parent, "author_login", None), store):
            return Announcement(AnnouncementType.NEW_REACTION, item.id, item.summary(), subtitle=parent.summary())

    return None
