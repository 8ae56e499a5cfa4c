"""Builders for GraphQL response nodes and a query service answering from scripted responses."""

from typing import Any, Callable

from github_mirror.configuration.config import RunContext
from github_mirror.github.query import QueryService

Response = dict[str, Any] | Callable[[dict[str, Any]], dict[str, Any]] | Exception


def connection(*nodes: dict[str, Any], has_next_page: bool = False, end_cursor: str | None = None) -> dict[str, Any]:
    """Build a paged connection in the ``edges { node }`` shape."""
    return {"edges": [{"node": node} for node in nodes], "pageInfo": {"hasNextPage": has_next_page, "endCursor": end_cursor}}


def user_node(user_id: str, login: str, is_viewer: bool = False, **fields: Any) -> dict[str, Any]:
    return {"__typename": "User", "id": user_id, "login": login, "avatarUrl": None, "isViewer": is_viewer, **fields}


def org_node(org_id: str, login: str, *repos: dict[str, Any]) -> dict[str, Any]:
    return {"__typename": "Organization", "id": org_id, "login": login, "name": login.title(), "repositories": connection(*repos)}


def repo_node(repo_id: str, name_with_owner: str) -> dict[str, Any]:
    return {
        "__typename": "Repository",
        "id": repo_id,
        "nameWithOwner": name_with_owner,
        "url": f"https://github.com/{name_with_owner}",
        "isFork": False,
        "isArchived": False,
    }


def item_ids_node(repo_id: str, pr_ids: list[str], issue_ids: list[str]) -> dict[str, Any]:
    return {
        "__typename": "Repository",
        "id": repo_id,
        "pullRequests": connection(*({"id": item_id} for item_id in pr_ids)),
        "issues": connection(*({"id": item_id} for item_id in issue_ids)),
    }


def label_node(label_id: str, name: str) -> dict[str, Any]:
    return {"__typename": "Label", "id": label_id, "name": name, "color": "ededed"}


def review_node(review_id: str, author: str, state: str = "APPROVED") -> dict[str, Any]:
    return {
        "__typename": "PullRequestReview",
        "id": review_id,
        "state": state,
        "body": "",
        "submittedAt": "2024-05-01T10:00:00Z",
        "updatedAt": "2024-05-01T10:00:00Z",
        "author": {"login": author},
    }


def pull_request_node(
    pr_id: str,
    number: int,
    title: str,
    author: str = "octocat",
    state: str = "OPEN",
    labels: tuple[dict[str, Any], ...] = (),
    reviews: tuple[dict[str, Any], ...] = (),
) -> dict[str, Any]:
    return {
        "__typename": "PullRequest",
        "id": pr_id,
        "number": number,
        "title": title,
        "body": f"Body of {title}",
        "state": state,
        "url": f"https://github.com/acme/api/pull/{number}",
        "createdAt": "2024-05-01T09:00:00Z",
        "updatedAt": "2024-05-01T09:00:00Z",
        "author": {"login": author},
        "reactions": {"totalCount": 0},
        "milestone": None,
        "labels": connection(*labels),
        "headRefName": f"feature-{number}",
        "isDraft": False,
        "mergeable": "MERGEABLE",
        "reviewRequests": connection(),
        "reviews": connection(*reviews),
    }


def issue_node(issue_id: str, number: int, title: str, author: str = "octocat", state: str = "OPEN") -> dict[str, Any]:
    return {
        "__typename": "Issue",
        "id": issue_id,
        "number": number,
        "title": title,
        "body": None,
        "state": state,
        "url": f"https://github.com/acme/api/issues/{number}",
        "createdAt": "2024-05-02T09:00:00Z",
        "updatedAt": "2024-05-02T09:00:00Z",
        "author": {"login": author},
        "reactions": {"totalCount": 0},
        "milestone": None,
        "labels": connection(),
    }


def comment_node(comment_id: str, author: str, body: str, typename: str = "IssueComment") -> dict[str, Any]:
    return {
        "__typename": typename,
        "id": comment_id,
        "body": body,
        "url": f"https://github.com/acme/api/pull/1#{comment_id}",
        "createdAt": "2024-05-03T09:00:00Z",
        "updatedAt": "2024-05-03T09:00:00Z",
        "author": {"login": author},
        "reactions": {"totalCount": 0},
    }


def reaction_node(reaction_id: str, user: str, content: str = "THUMBS_UP") -> dict[str, Any]:
    return {"__typename": "Reaction", "id": reaction_id, "content": content, "createdAt": "2024-05-04T09:00:00Z", "user": {"login": user}}


def operation_of(text: str) -> str:
    """Return the operation name of a rendered query, e.g. ``ItemIDs`` for ``query ItemIDs($ids: ...)``."""
    return text.split()[1].split("(")[0]


class ScriptedQueryService(QueryService):
    """Query service answering requests from responses keyed by operation name.

    A response is either the data dict itself, a callable receiving the request
    variables, or an exception to raise.
    """

    def __init__(self, context: RunContext, responses: dict[str, Response] | None = None) -> None:
        super().__init__(context)
        self.responses: dict[str, Response] = responses or {}
        self.requests: list[tuple[str, dict[str, Any]]] = []
        self.texts: list[str] = []

    async def execute(self, text: str, variables: dict[str, Any]) -> dict[str, Any]:
        operation = operation_of(text)
        self.requests.append((operation, variables))
        self.texts.append(text)
        response = self.responses[operation]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(variables)
        return {"rateLimit": {"cost": 1, "remaining": 4999 - len(self.requests)}, **response}

    def operations(self) -> list[str]:
        """Operation names of every request made so far, in order."""
        return [operation for operation, _ in self.requests]
