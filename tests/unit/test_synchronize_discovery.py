"""Unit tests for pull request and issue id discovery."""

import pytest
from graphql_responses import connection, item_ids_node

from github_mirror.store.models import Issue, Parent, PullRequest, Repo, RepoVisibility, SyncState
from github_mirror.store.store import EntityStore
from github_mirror.synchronize.discovery import ItemIdRegistry, extract_ids


@pytest.mark.parametrize(
    "section",
    [
        connection({"id": "A"}, {"id": "B"}),
        {"nodes": [{"id": "A"}, {"id": "B"}]},
    ],
    ids=["edges", "nodes"],
)
def test_extract_ids_accepts_both_shapes(section: dict) -> None:
    assert extract_ids(section) == ["A", "B"]


def test_extract_ids_ignores_malformed_sections() -> None:
    assert extract_ids(None) == []
    assert extract_ids({"totalCount": 3}) == []
    assert extract_ids({"nodes": [None, {"id": 5}, {"id": "C"}]}) == ["C"]


def add_repo(store: EntityStore, repo_id: str, visibility: RepoVisibility, sync_state: SyncState = SyncState.EXISTING) -> None:
    store.update(Repo(id=repo_id, name_with_owner=f"acme/{repo_id}", visibility=visibility, sync_state=sync_state))


def test_register_node_follows_repo_visibility(store: EntityStore) -> None:
    add_repo(store, "R1", RepoVisibility.VISIBLE)
    add_repo(store, "R2", RepoVisibility.ONLY_ISSUES)
    add_repo(store, "R3", RepoVisibility.HIDDEN)
    registry = ItemIdRegistry(store)

    registry.register_node(item_ids_node("R1", ["PR1"], ["I1"]))
    registry.register_node(item_ids_node("R2", ["PR2"], ["I2"]))
    registry.register_node(item_ids_node("R3", ["PR3"], ["I3"]))

    assert registry.pr_ids == {"PR1": "R1"}
    assert registry.issue_ids == {"I1": "R1", "I2": "R2"}


def test_register_node_for_unknown_repo(store: EntityStore) -> None:
    registry = ItemIdRegistry(store)

    registry.register_node(item_ids_node("R7", ["PR7"], []))
    registry.register_node({"pullRequests": connection({"id": "PR8"})})

    assert registry.pr_ids == {"PR7": "R7"}


def test_seed_keeps_stored_items_of_participating_repos(store: EntityStore) -> None:
    """Stored items are refreshed even when they no longer show up as open."""
    add_repo(store, "R1", RepoVisibility.ONLY_PRS)
    add_repo(store, "R2", RepoVisibility.VISIBLE, sync_state=SyncState.NONE)
    store.update(PullRequest(id="PR1", number=1, title="Merged", state="MERGED", parent=Parent(id="R1", kind="repo", field="pullRequests")))
    store.update(Issue(id="I1", number=2, title="Bug", state="OPEN", parent=Parent(id="R1", kind="repo", field="issues")))
    store.update(Issue(id="I2", number=3, title="Bug", state="OPEN", parent=Parent(id="R2", kind="repo", field="issues")))
    store.update(Issue(id="I3", number=4, title="Orphan", state="OPEN"))
    registry = ItemIdRegistry(store)

    registry.seed()

    assert registry.pr_ids == {"PR1": "R1"}
    assert registry.issue_ids == {}
