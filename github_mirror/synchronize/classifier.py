"""Pure predicates deciding what an update pass fetches."""

from dataclasses import dataclass

from github_mirror.store.models import Entity, Repo, RepoVisibility, SyncState


@dataclass(frozen=True)
class RepoSyncPolicy:
    """Which parts of a repository take part in a pass."""

    participates: bool
    sync_prs: bool
    sync_issues: bool


NOT_PARTICIPATING = RepoSyncPolicy(participates=False, sync_prs=False, sync_issues=False)
FULLY_PARTICIPATING = RepoSyncPolicy(participates=True, sync_prs=True, sync_issues=True)


def classify_repo(repo: Repo | None) -> RepoSyncPolicy:
    """Classify a repository; a repository unknown to the store participates fully."""
    if repo is None:
        return FULLY_PARTICIPATING
    if repo.sync_state == SyncState.NONE or repo.visibility == RepoVisibility.HIDDEN:
        return NOT_PARTICIPATING
    return RepoSyncPolicy(
        participates=True,
        sync_prs=repo.visibility != RepoVisibility.ONLY_ISSUES,
        sync_issues=repo.visibility != RepoVisibility.ONLY_PRS,
    )


def needs_comments(item: Entity) -> bool:
    """Return True if the comments of an item must be fetched."""
    return item.sync_state != SyncState.NONE and bool(getattr(item, "sync_needs_comments", False))


def needs_reactions(item: Entity) -> bool:
    """Return True if the reactions of an item must be fetched."""
    return item.sync_state != SyncState.NONE and bool(getattr(item, "sync_needs_reactions", False))
