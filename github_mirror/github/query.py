"""Executes paginated GitHub GraphQL queries.

A ``Query`` renders one root selection, executes it through the
``QueryService`` and walks the response. Every entity node found in the
response is collected together with a ``Parent`` descriptor naming the
enclosing entity and the field it was reached through. Connections reporting
``hasNextPage`` are followed with ``node(id:)`` queries until exhausted.
"""

import asyncio
import re
import time
from typing import Any, Callable

import structlog
from githubkit import GitHub
from githubkit.exception import GitHubException, GraphQLFailed

from github_mirror.configuration.config import RunContext
from github_mirror.github.client import get_github_pat_client
from github_mirror.github.graphql import Element, Fragment, Group, fragments_in, render_elements
from github_mirror.store.models import ENTITY_TYPES_BY_TYPENAME, Parent
from github_mirror.utils.retry import retry_on_rate_limit

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

NodeCallback = Callable[[dict[str, Any]], None]

RATE_LIMIT_SELECTION = "rateLimit { cost remaining }"

NOT_FOUND_ERROR_TYPE = "NOT_FOUND"


def is_entity_node(value: Any) -> bool:
    """Return True if a response value is an entity node the store knows about."""
    return isinstance(value, dict) and "id" in value and value.get("__typename") in ENTITY_TYPES_BY_TYPENAME


def operation_name(name: str) -> str:
    """Turn a query name such as 'Item IDs' into a GraphQL operation name."""
    return re.sub(r"[^A-Za-z0-9_]", "", name) or "Query"


def data_without_missing_nodes(error: GraphQLFailed) -> dict[str, Any] | None:
    """Return the partial data of a failed response whose only errors are ids under ``nodes`` that no longer resolve.

    GitHub answers ``nodes(ids:)`` with a NOT_FOUND error and a null entry for
    every id that was deleted upstream. Any other error yields None.
    """
    data = getattr(error.response, "data", None)
    errors = getattr(error.response, "errors", None) or []
    if not isinstance(data, dict) or not errors:
        return None
    for e in errors:
        path = getattr(e, "path", None) or []
        if getattr(e, "type", None) != NOT_FOUND_ERROR_TYPE or not path or path[0] != "nodes":
            return None
    return data


class Query:
    """A single GraphQL query and the nodes it produced."""

    def __init__(
        self,
        name: str,
        selection: tuple[Element, ...],
        variables: dict[str, Any] | None = None,
        variable_declarations: str = "",
        per_node_callback: NodeCallback | None = None,
        ingest: bool = True,
        ingest_roots: bool = True,
    ) -> None:
        """Initialize a query.

        Args:
            name: Human readable name, also used as the GraphQL operation name.
            selection: Root selection, rendered inside the query body.
            variables: GraphQL variables sent with the root request.
            variable_declarations: Declarations matching ``variables``, e.g. ``($ids: [ID!]!)``.
            per_node_callback: Invoked once for every root entity node, including follow-up pages.
            ingest: Collect entity nodes for merging into the store.
            ingest_roots: Collect the root entity nodes themselves, not only their descendants.
        """
        self.name = name
        self.selection = selection
        self.variables = variables or {}
        self.variable_declarations = variable_declarations
        self.per_node_callback = per_node_callback
        self.ingest = ingest
        self.ingest_roots = ingest_roots
        self.fragments: list[Fragment] = fragments_in(selection)
        self.nodes: list[tuple[dict[str, Any], Parent | None]] = []
        self.request_count = 0

    def render(self, page_size: int) -> str:
        """Render the root request."""
        return (
            f"query {operation_name(self.name)}{self.variable_declarations} "
            f"{{ {RATE_LIMIT_SELECTION} {render_elements(self.selection, page_size)} }}"
        )

    def render_follow_up(self, fragment: Fragment, group: Group, after: str, page_size: int) -> str:
        """Render the request for the next page of a connection under an entity."""
        return (
            f"query {operation_name(self.name)}Page($id: ID!) "
            f"{{ {RATE_LIMIT_SELECTION} node(id: $id) {{ {fragment.render_page(group, page_size, after)} }} }}"
        )

    async def run(self, service: "QueryService") -> bool:
        """Execute the query and every follow-up page. Returns False if any request failed."""
        page_size = service.context.query_page_size
        pending: list[tuple[str, dict[str, Any]]] = [(self.render(page_size), self.variables)]
        start_time = time.time()

        while pending:
            text, variables = pending.pop(0)
            try:
                data = await service.execute(text, variables)
            except GraphQLFailed as e:
                partial = data_without_missing_nodes(e)
                if partial is None:
                    logger.error("Query failed", query=self.name, error=str(e), error_type=type(e).__name__)
                    return False
                logger.warning("Skipping ids that no longer resolve", query=self.name, missing=len(e.response.errors or []))
                data = partial
            except GitHubException as e:
                logger.error("Query failed", query=self.name, error=str(e), error_type=type(e).__name__)
                return False
            self.request_count += 1

            rate_limit = data.get("rateLimit") or {}
            service.context.record_query_cost(rate_limit.get("cost"), rate_limit.get("remaining"))

            for key, value in data.items():
                if key == "rateLimit":
                    continue
                follow_up = key == "node"
                for root in value if isinstance(value, list) else [value]:
                    if is_entity_node(root):
                        self._walk_root(root, follow_up, pending, page_size)

        logger.debug(
            "Query complete",
            query=self.name,
            requests=self.request_count,
            nodes=len(self.nodes),
            duration=round(time.time() - start_time, 2),
        )
        return True

    def _walk_root(self, node: dict[str, Any], follow_up: bool, pending: list[tuple[str, dict[str, Any]]], page_size: int) -> None:
        if self.per_node_callback is not None:
            self.per_node_callback(node)
        # A follow-up root only carries its id and the requested connection.
        self._walk_entity(node, None, self.ingest_roots and not follow_up, pending, page_size)

    def _walk_entity(
        self,
        node: dict[str, Any],
        parent: Parent | None,
        collect: bool,
        pending: list[tuple[str, dict[str, Any]]],
        page_size: int,
    ) -> None:
        if collect and self.ingest:
            self.nodes.append((node, parent))

        typename = node["__typename"]
        kind = ENTITY_TYPES_BY_TYPENAME[typename].kind
        for key, value in node.items():
            if not isinstance(value, (dict, list)):
                continue
            child_parent = Parent(id=node["id"], kind=kind, field=key)
            self._walk_value(value, child_parent, pending, page_size)

            page_info = value.get("pageInfo") if isinstance(value, dict) else None
            if page_info and page_info.get("hasNextPage"):
                self._queue_next_page(node, typename, key, page_info.get("endCursor"), pending, page_size)

    def _walk_value(self, value: Any, parent: Parent, pending: list[tuple[str, dict[str, Any]]], page_size: int) -> None:
        if isinstance(value, list):
            for element in value:
                self._walk_value(element, parent, pending, page_size)
        elif is_entity_node(value):
            self._walk_entity(value, parent, True, pending, page_size)
        elif isinstance(value, dict):
            for element in value.values():
                if isinstance(element, (dict, list)):
                    self._walk_value(element, parent, pending, page_size)

    def _queue_next_page(
        self,
        node: dict[str, Any],
        typename: str,
        field: str,
        cursor: str | None,
        pending: list[tuple[str, dict[str, Any]]],
        page_size: int,
    ) -> None:
        for fragment in self.fragments:
            if fragment.on_type != typename:
                continue
            group = fragment.paging_group(field)
            if group is None or cursor is None:
                continue
            logger.debug("Queueing next page", query=self.name, id=node["id"], field=field)
            pending.append((self.render_follow_up(fragment, group, cursor, page_size), {"id": node["id"]}))
            return
        logger.warning("Connection has more pages but no paging selection was found", query=self.name, typename=typename, field=field)


class QueryService:
    """Executes queries against the GitHub GraphQL API for one update pass."""

    def __init__(self, context: RunContext, client: GitHub[Any] | None = None) -> None:
        """Initialize the service, creating an authenticated client from the run context if none is given."""
        self.context = context
        self._client = client

    @property
    def client(self) -> GitHub[Any]:
        """The authenticated githubkit client, created on first use."""
        if self._client is None:
            self._client = get_github_pat_client(self.context.github_pat_token or "", self.context.github_api_url)
        return self._client

    @retry_on_rate_limit()
    async def execute(self, text: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Execute one GraphQL request and return its data."""
        logger.debug("Executing GraphQL request", text=text, variables=variables)
        return await self.client.async_graphql(text, variables or None)

    def query(
        self,
        name: str,
        root: Group,
        per_node_callback: NodeCallback | None = None,
        ingest: bool = True,
    ) -> Query:
        """Build a query over a single root selection such as ``viewer``."""
        return Query(name, (root,), per_node_callback=per_node_callback, ingest=ingest)

    def batching(
        self,
        name: str,
        fragments: list[Fragment],
        id_list: list[str],
        per_node_callback: NodeCallback | None = None,
        ingest: bool = True,
        ingest_roots: bool = True,
    ) -> list[Query]:
        """Partition an id list into ``nodes(ids:)`` queries of at most ``query_batch_size`` ids each."""
        batch_size = self.context.query_batch_size
        selection = (Group("nodes(ids: $ids)", tuple(fragments)),)
        queries = []
        for start in range(0, len(id_list), batch_size):
            batch = id_list[start : start + batch_size]
            queries.append(
                Query(
                    name,
                    selection,
                    variables={"ids": batch},
                    variable_declarations="($ids: [ID!]!)",
                    per_node_callback=per_node_callback,
                    ingest=ingest,
                    ingest_roots=ingest_roots,
                )
            )
        logger.debug("Built batched queries", query=name, ids=len(id_list), queries=len(queries))
        return queries

    async def run_all(self, queries: list[Query]) -> bool:
        """Run queries concurrently, wait for all of them and return the aggregate success flag."""
        if not queries:
            return True
        results = await asyncio.gather(*(query.run(self) for query in queries))
        return all(results)
