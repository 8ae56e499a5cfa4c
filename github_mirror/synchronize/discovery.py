"""Registers pull request and issue ids discovered per repository."""

from typing import Any

import structlog

from github_mirror.store.models import Issue, PullRequest, Repo
from github_mirror.store.store import EntityStore
from github_mirror.synchronize.classifier import classify_repo

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def extract_ids(section: Any) -> list[str]:
    """Return the ids listed in a connection, accepting both ``edges[].node`` and ``nodes[]`` shapes."""
    if not isinstance(section, dict):
        return []
    if isinstance(section.get("edges"), list):
        entries = [edge.get("node") for edge in section["edges"] if isinstance(edge, dict)]
    elif isinstance(section.get("nodes"), list):
        entries = section["nodes"]
    else:
        return []
    return [entry["id"] for entry in entries if isinstance(entry, dict) and isinstance(entry.get("id"), str)]


class ItemIdRegistry:
    """The per-pass id maps from pull request and issue ids to the id of their repository."""

    def __init__(self, store: EntityStore) -> None:
        """Initialize empty id maps over the given store."""
        self.store = store
        self.pr_ids: dict[str, str] = {}
        self.issue_ids: dict[str, str] = {}

    def seed(self) -> None:
        """Start from the stored items whose repository still opts into their sync."""
        repos = self.store.collection(Repo)
        for pr in self.store.collection(PullRequest):
            repo = repos.get(pr.repo_id) if pr.repo_id is not None else None
            if repo is not None and repo.should_sync_prs:
                self.pr_ids[pr.id] = repo.id
        for issue in self.store.collection(Issue):
            repo = repos.get(issue.repo_id) if issue.repo_id is not None else None
            if repo is not None and repo.should_sync_issues:
                self.issue_ids[issue.id] = repo.id
        logger.debug("Seeded id maps", pull_requests=len(self.pr_ids), issues=len(self.issue_ids))

    def register_node(self, node: dict[str, Any]) -> None:
        """Register the ids listed in one repository node of the discovery response."""
        repo_id = node.get("id")
        if not isinstance(repo_id, str):
            return

        policy = classify_repo(self.store.collection(Repo).get(repo_id))
        if not policy.participates:
            return

        if policy.sync_prs:
            for item_id in extract_ids(node.get("pullRequests")):
                self.pr_ids[item_id] = repo_id
                logger.debug("Registered PR ID", id=item_id, repo_id=repo_id)

        if policy.sync_issues:
            for item_id in extract_ids(node.get("issues")):
                self.issue_ids[item_id] = repo_id
                logger.debug("Registered Issue ID", id=item_id, repo_id=repo_id)
