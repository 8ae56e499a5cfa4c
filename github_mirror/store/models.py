"""Pydantic models for the entities mirrored from GitHub.

Every entity is an immutable value snapshot. Changing an entity, including
attaching it to a parent, means building a new snapshot with ``model_copy`` and
replacing the stored entry under the same id. Children reference their parent
by id through a ``Parent`` descriptor; parents never hold their children.
"""

from enum import Enum
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict


class SyncState(str, Enum):
    """Enum for the synchronization state of an entity."""

    NONE = "none"
    EXISTING = "existing"
    NEW = "new"
    UPDATED = "updated"


class RepoVisibility(str, Enum):
    """Enum for the locally chosen visibility of a repository."""

    VISIBLE = "visible"
    HIDDEN = "hidden"
    ONLY_ISSUES = "only_issues"
    ONLY_PRS = "only_prs"


class Parent(BaseModel):
    """Back-reference from a child entity to the entity that owns it."""

    model_config = ConfigDict(frozen=True)

    id: str
    kind: str
    field: str


BOOKKEEPING_FIELDS = frozenset({"sync_state", "touched", "parent", "sync_needs_comments", "sync_needs_reactions"})
"""Fields that are maintained locally and never compared against remote content."""


def _nested(node: dict[str, Any], *keys: str) -> Any:
    """Follow a chain of keys through nested GraphQL objects, tolerating nulls."""
    value: Any = node
    for key in keys:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


class Entity(BaseModel):
    """Base model for every entity kind kept in the store."""

    model_config = ConfigDict(frozen=True)

    kind: ClassVar[str]
    typenames: ClassVar[tuple[str, ...]]
    parent_required: ClassVar[bool] = True
    local_fields: ClassVar[frozenset[str]] = frozenset()
    sync_flags: ClassVar[tuple[str, ...]] = ()

    id: str
    sync_state: SyncState = SyncState.NEW
    touched: bool = False
    parent: Parent | None = None

    @classmethod
    def from_node(cls, node: dict[str, Any], parent: Parent | None = None) -> Self:
        """Build a snapshot from a GraphQL node."""
        return cls.model_validate({"id": node["id"], "parent": parent, **cls._fields_from_node(node)})

    @classmethod
    def _fields_from_node(cls, node: dict[str, Any]) -> dict[str, Any]:
        return {}

    def remote_content(self) -> dict[str, Any]:
        """Remote content of the entity, used to detect updates."""
        return self.model_dump(exclude=set(BOOKKEEPING_FIELDS | self.local_fields))

    def with_local_defaults(self, context: Any) -> Self:
        """Apply local preferences to an entity seen for the first time."""
        return self

    def retains_children(self, field: str) -> bool:
        """Return True if untouched children under ``field`` are kept because they were not re-fetched."""
        return False

    def summary(self) -> str:
        """Short human readable description used in announcements."""
        return f"{self.kind} {self.id}"


class User(Entity):
    """A GitHub user."""

    kind: ClassVar[str] = "user"
    typenames: ClassVar[tuple[str, ...]] = ("User",)
    parent_required: ClassVar[bool] = False

    login: str
    avatar_url: str | None = None
    is_me: bool = False

    @classmethod
    def _fields_from_node(cls, node: dict[str, Any]) -> dict[str, Any]:
        return {"login": node["login"], "avatar_url": node.get("avatarUrl"), "is_me": bool(node.get("isViewer", False))}

    def summary(self) -> str:
        return f"@{self.login}"


class Org(Entity):
    """A GitHub organization the viewer belongs to."""

    kind: ClassVar[str] = "org"
    typenames: ClassVar[tuple[str, ...]] = ("Organization",)
    parent_required: ClassVar[bool] = False

    login: str
    name: str | None = None

    @classmethod
    def _fields_from_node(cls, node: dict[str, Any]) -> dict[str, Any]:
        return {"login": node["login"], "name": node.get("name")}


class Repo(Entity):
    """A repository, listed under an organization or the viewer."""

    kind: ClassVar[str] = "repo"
    typenames: ClassVar[tuple[str, ...]] = ("Repository",)
    parent_required: ClassVar[bool] = False
    local_fields: ClassVar[frozenset[str]] = frozenset({"visibility"})

    name_with_owner: str
    url: str | None = None
    is_fork: bool = False
    is_archived: bool = False
    visibility: RepoVisibility = RepoVisibility.VISIBLE

    @classmethod
    def _fields_from_node(cls, node: dict[str, Any]) -> dict[str, Any]:
        return {
            "name_with_owner": node["nameWithOwner"],
            "url": node.get("url"),
            "is_fork": bool(node.get("isFork", False)),
            "is_archived": bool(node.get("isArchived", False)),
        }

    def with_local_defaults(self, context: Any) -> Self:
        return self.model_copy(update={"visibility": context.new_repo_visibility})

    @property
    def should_sync_prs(self) -> bool:
        """Return True if pull requests of this repository are synchronized."""
        return self.sync_state != SyncState.NONE and self.visibility in (RepoVisibility.VISIBLE, RepoVisibility.ONLY_PRS)

    @property
    def should_sync_issues(self) -> bool:
        """Return True if issues of this repository are synchronized."""
        return self.sync_state != SyncState.NONE and self.visibility in (RepoVisibility.VISIBLE, RepoVisibility.ONLY_ISSUES)

    def summary(self) -> str:
        return self.name_with_owner


class ListableItem(Entity):
    """Fields shared by pull requests and issues."""

    sync_flags: ClassVar[tuple[str, ...]] = ("sync_needs_comments", "sync_needs_reactions")

    number: int
    title: str
    body: str | None = None
    state: str
    url: str | None = None
    author_login: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    reaction_count: int = 0
    sync_needs_comments: bool = False
    sync_needs_reactions: bool = False

    @classmethod
    def _fields_from_node(cls, node: dict[str, Any]) -> dict[str, Any]:
        return {
            "number": node["number"],
            "title": node["title"],
            "body": node.get("body"),
            "state": node["state"],
            "url": node.get("url"),
            "author_login": _nested(node, "author", "login"),
            "created_at": node.get("createdAt"),
            "updated_at": node.get("updatedAt"),
            "reaction_count": _nested(node, "reactions", "totalCount") or 0,
        }

    @property
    def repo_id(self) -> str | None:
        """Id of the owning repository, if the item has been attached to one."""
        if self.parent is not None and self.parent.kind == Repo.kind:
            return self.parent.id
        return None

    @property
    def is_closed(self) -> bool:
        """Return True if the item is no longer open."""
        return self.state in ("CLOSED", "MERGED")

    def retains_children(self, field: str) -> bool:
        if field == "comments":
            return self.sync_state == SyncState.NONE or not self.sync_needs_comments
        if field == "reactions":
            return self.sync_state == SyncState.NONE or not self.sync_needs_reactions
        return False


class PullRequest(ListableItem):
    """A pull request belonging to a repository."""

    kind: ClassVar[str] = "pull_request"
    typenames: ClassVar[tuple[str, ...]] = ("PullRequest",)

    head_ref_name: str | None = None
    is_draft: bool = False
    mergeable: str | None = None

    @classmethod
    def _fields_from_node(cls, node: dict[str, Any]) -> dict[str, Any]:
        return {
            **super()._fields_from_node(node),
            "head_ref_name": node.get("headRefName"),
            "is_draft": bool(node.get("isDraft", False)),
            "mergeable": node.get("mergeable"),
        }

    def summary(self) -> str:
        return f"PR #{self.number}: {self.title}"


class Issue(ListableItem):
    """An issue belonging to a repository."""

    kind: ClassVar[str] = "issue"
    typenames: ClassVar[tuple[str, ...]] = ("Issue",)

    def summary(self) -> str:
        return f"Issue #{self.number}: {self.title}"


class Review(Entity):
    """A pull request review."""

    kind: ClassVar[str] = "review"
    typenames: ClassVar[tuple[str, ...]] = ("PullRequestReview",)
    sync_flags: ClassVar[tuple[str, ...]] = ("sync_needs_comments",)

    state: str
    body: str | None = None
    author_login: str | None = None
    submitted_at: str | None = None
    updated_at: str | None = None
    sync_needs_comments: bool = False

    @classmethod
    def _fields_from_node(cls, node: dict[str, Any]) -> dict[str, Any]:
        return {
            "state": node["state"],
            "body": node.get("body"),
            "author_login": _nested(node, "author", "login"),
            "submitted_at": node.get("submittedAt"),
            "updated_at": node.get("updatedAt"),
        }

    def retains_children(self, field: str) -> bool:
        if field == "comments":
            return self.sync_state == SyncState.NONE or not self.sync_needs_comments
        return False

    def summary(self) -> str:
        return f"Review by @{self.author_login}: {self.state.lower().replace('_', ' ')}"


class Comment(Entity):
    """A comment on a pull request, an issue or a review."""

    kind: ClassVar[str] = "comment"
    typenames: ClassVar[tuple[str, ...]] = ("IssueComment", "PullRequestReviewComment")
    sync_flags: ClassVar[tuple[str, ...]] = ("sync_needs_reactions",)

    body: str | None = None
    author_login: str | None = None
    url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    reaction_count: int = 0
    sync_needs_reactions: bool = False

    @classmethod
    def _fields_from_node(cls, node: dict[str, Any]) -> dict[str, Any]:
        return {
            "body": node.get("body"),
            "author_login": _nested(node, "author", "login"),
            "url": node.get("url"),
            "created_at": node.get("createdAt"),
            "updated_at": node.get("updatedAt"),
            "reaction_count": _nested(node, "reactions", "totalCount") or 0,
        }

    def retains_children(self, field: str) -> bool:
        if field == "reactions":
            return self.sync_state == SyncState.NONE or not self.sync_needs_reactions
        return False

    def summary(self) -> str:
        return f"Comment by @{self.author_login}: {self.body or ''}"


class ReviewRequest(Entity):
    """A pending review request on a pull request."""

    kind: ClassVar[str] = "review_request"
    typenames: ClassVar[tuple[str, ...]] = ("ReviewRequest",)

    reviewer_login: str | None = None

    @classmethod
    def _fields_from_node(cls, node: dict[str, Any]) -> dict[str, Any]:
        reviewer = node.get("requestedReviewer") or {}
        return {"reviewer_login": reviewer.get("login") or reviewer.get("slug")}


class Reaction(Entity):
    """An emoji reaction on a pull request, an issue or a comment."""

    kind: ClassVar[str] = "reaction"
    typenames: ClassVar[tuple[str, ...]] = ("Reaction",)

    content: str
    user_login: str | None = None
    created_at: str | None = None

    @classmethod
    def _fields_from_node(cls, node: dict[str, Any]) -> dict[str, Any]:
        return {"content": node["content"], "user_login": _nested(node, "user", "login"), "created_at": node.get("createdAt")}

    def summary(self) -> str:
        return f"@{self.user_login} reacted with {self.content.lower()}"


class Label(Entity):
    """A label attached to a pull request or an issue."""

    kind: ClassVar[str] = "label"
    typenames: ClassVar[tuple[str, ...]] = ("Label",)

    name: str
    color: str | None = None

    @classmethod
    def _fields_from_node(cls, node: dict[str, Any]) -> dict[str, Any]:
        return {"name": node["name"], "color": node.get("color")}


class Milestone(Entity):
    """A milestone assigned to a pull request or an issue."""

    kind: ClassVar[str] = "milestone"
    typenames: ClassVar[tuple[str, ...]] = ("Milestone",)

    title: str
    number: int | None = None
    state: str | None = None

    @classmethod
    def _fields_from_node(cls, node: dict[str, Any]) -> dict[str, Any]:
        return {"title": node["title"], "number": node.get("number"), "state": node.get("state")}


class Status(Entity):
    """A commit status context reported on the head of a pull request."""

    kind: ClassVar[str] = "status"
    typenames: ClassVar[tuple[str, ...]] = ("StatusContext",)

    context: str
    state: str
    description: str | None = None
    target_url: str | None = None
    created_at: str | None = None

    @classmethod
    def _fields_from_node(cls, node: dict[str, Any]) -> dict[str, Any]:
        return {
            "context": node["context"],
            "state": node["state"],
            "description": node.get("description"),
            "target_url": node.get("targetUrl"),
            "created_at": node.get("createdAt"),
        }


ENTITY_TYPES: tuple[type[Entity], ...] = (
    Milestone,
    Status,
    ReviewRequest,
    Reaction,
    Label,
    Issue,
    PullRequest,
    Comment,
    Review,
    Repo,
    Org,
    User,
)
"""Every entity kind, children before parents."""

ENTITY_TYPES_BY_TYPENAME: dict[str, type[Entity]] = {typename: model for model in ENTITY_TYPES for typename in model.typenames}
