"""Unit tests for the entity models."""

import pytest
from graphql_responses import comment_node, pull_request_node, reaction_node, repo_node, user_node

from github_mirror.store.models import (
    ENTITY_TYPES,
    ENTITY_TYPES_BY_TYPENAME,
    Comment,
    Issue,
    Parent,
    PullRequest,
    Reaction,
    Repo,
    RepoVisibility,
    SyncState,
    User,
)


def test_pull_request_from_node() -> None:
    """A pull request node is flattened into a snapshot with its parent."""
    parent = Parent(id="R1", kind="repo", field="pullRequests")

    pr = PullRequest.from_node(pull_request_node("PR1", 7, "Add feature", author="alice"), parent)

    assert pr.id == "PR1"
    assert pr.number == 7
    assert pr.author_login == "alice"
    assert pr.head_ref_name == "feature-7"
    assert pr.repo_id == "R1"
    assert pr.sync_state == SyncState.NEW
    assert pr.touched is False


def test_user_from_node_marks_viewer() -> None:
    """The viewer flag of a user node becomes is_me."""
    assert User.from_node(user_node("U1", "me", is_viewer=True)).is_me is True
    assert User.from_node(user_node("U2", "other")).is_me is False


def test_remote_content_ignores_bookkeeping_and_local_fields() -> None:
    """Bookkeeping and local fields never count as remote changes."""
    repo = Repo.from_node(repo_node("R1", "acme/api"))
    changed = repo.model_copy(
        update={"sync_state": SyncState.EXISTING, "touched": True, "visibility": RepoVisibility.HIDDEN, "parent": None}
    )

    assert repo.remote_content() == changed.remote_content()
    assert repo.remote_content() != repo.model_copy(update={"is_archived": True}).remote_content()


def test_reaction_content_field_is_kept_apart_from_remote_content() -> None:
    """The reaction's own content field is part of its remote content."""
    reaction = Reaction.from_node(reaction_node("RE1", "bob", content="HEART"))

    assert reaction.content == "HEART"
    assert reaction.remote_content()["content"] == "HEART"


@pytest.mark.parametrize(
    "state,needs_comments,expected",
    [
        (SyncState.EXISTING, False, True),
        (SyncState.EXISTING, True, False),
        (SyncState.NONE, True, True),
        (SyncState.NEW, True, False),
    ],
)
def test_listable_item_retains_comments(state: SyncState, needs_comments: bool, expected: bool) -> None:
    """Comments of an item are kept when they were not re-fetched."""
    issue = Issue(id="I1", number=1, title="Bug", state="OPEN", sync_state=state, sync_needs_comments=needs_comments)

    assert issue.retains_children("comments") is expected
    assert issue.retains_children("labels") is False


def test_comment_typenames() -> None:
    """Issue comments and review comments are the same entity kind."""
    assert ENTITY_TYPES_BY_TYPENAME["IssueComment"] is Comment
    assert ENTITY_TYPES_BY_TYPENAME["PullRequestReviewComment"] is Comment
    comment = Comment.from_node(comment_node("C1", "bob", "Looks good", typename="PullRequestReviewComment"))
    assert comment.body == "Looks good"


def test_entity_types_list_children_before_parents() -> None:
    """Every kind is registered once, with pull requests before their repositories."""
    kinds = [model.kind for model in ENTITY_TYPES]

    assert len(kinds) == len(set(kinds))
    assert kinds.index("pull_request") < kinds.index("repo")
    assert kinds.index("comment") < kinds.index("review")
    assert kinds[-1] == "user"


def test_closed_states() -> None:
    """Merged and closed items are both closed."""
    assert Issue(id="I1", number=1, title="Bug", state="CLOSED").is_closed
    assert PullRequest(id="P1", number=1, title="Fix", state="MERGED").is_closed
    assert not PullRequest(id="P2", number=2, title="Fix", state="OPEN").is_closed
