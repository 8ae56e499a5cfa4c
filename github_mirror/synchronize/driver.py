"""Orchestrates an update pass of the local GitHub mirror.

A pass is a fixed sequence of stages. Each stage fans out a batch of queries,
waits for all of them, and merges what they fetched into the store before the
next stage starts. A failed query aborts the pass before anything is written,
so the persisted store only ever reflects complete passes.
"""

import time

import structlog

from github_mirror.configuration.config import RunContext
from github_mirror.github import fragments
from github_mirror.github.graphql import Fragment
from github_mirror.github.query import Query, QueryService
from github_mirror.notifications.models import Announcement
from github_mirror.notifications.queue import NotificationQueue
from github_mirror.store.models import Comment, Entity, Issue, ListableItem, PullRequest, Repo, RepoVisibility, Review
from github_mirror.store.store import EntityStore
from github_mirror.synchronize.classifier import needs_comments, needs_reactions
from github_mirror.synchronize.discovery import ItemIdRegistry
from github_mirror.synchronize.exceptions import QueryFailureError, UnresolvedParentError
from github_mirror.synchronize.repair import repair
from github_mirror.synchronize.results import UpdateResult

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class UpdateOrchestrator:
    """Runs the stages of one update pass against a store and a query service."""

    def __init__(
        self,
        context: RunContext,
        store: EntityStore | None = None,
        service: QueryService | None = None,
        queue: NotificationQueue | None = None,
    ) -> None:
        """Initialize the orchestrator, building default collaborators from the run context."""
        self.context = context
        self.store = store or EntityStore(context)
        self.service = service or QueryService(context)
        self.queue = queue or NotificationQueue(context.notification_mode)
        self.registry = ItemIdRegistry(self.store)
        self.unresolved: list[UnresolvedParentError] = []

    async def run(self) -> UpdateResult:
        """Run every stage and commit the store."""
        self.store.load_all()
        self.store.reset_touched()
        self.context.total_query_costs = 0
        logger.info("Starting update")
        start_time = time.time()

        await self.discover_repositories()
        self.registry.seed()
        await self.discover_item_ids()
        await self.fetch_pull_requests()
        await self.fetch_issues()
        await self.fetch_comments()
        await self.fetch_reactions()
        announcements = self.commit()

        logger.info("Update done", duration=round(time.time() - start_time, 2))
        logger.info("Total update API cost", cost=self.context.total_query_costs, requests=self.context.query_count)
        logger.info("Remaining API limit", remaining=self.context.total_api_remaining)
        return UpdateResult(
            announcements=announcements,
            unresolved=self.unresolved,
            total_query_costs=self.context.total_query_costs,
            total_api_remaining=self.context.total_api_remaining,
            entity_count=len(self.store),
        )

    async def _run_stage(self, stage: str, queries: list[Query]) -> None:
        """Run a stage's queries concurrently, abort on any failure, then merge the results."""
        start_time = time.time()
        logger.info("Running stage", stage=stage, queries=len(queries))
        if not await self.service.run_all(queries):
            logger.error("Stage failed, aborting update", stage=stage)
            raise QueryFailureError(stage)
        merged = self.store.ingest(node for query in queries for node in query.nodes)
        logger.info("Completed stage", stage=stage, merged=len(merged), duration=round(time.time() - start_time, 2))

    async def discover_repositories(self) -> None:
        """Stage 1: fetch the viewer, its organizations and every repository it owns or watches."""
        queries = [
            self.service.query("Repos", fragments.VIEWER_WITH_ORGS),
            self.service.query("Owned Repos", fragments.VIEWER_REPOSITORIES),
            self.service.query("Watched Repos", fragments.VIEWER_WATCHING),
        ]
        await self._run_stage("Repos", queries)
        self.store.identify_me()

    async def discover_item_ids(self) -> None:
        """Stage 3: list the open pull request and issue ids of every repository that is not hidden."""
        repo_ids = [repo.id for repo in self.store.collection(Repo) if repo.visibility != RepoVisibility.HIDDEN]
        queries = self.service.batching(
            "Item IDs",
            [fragments.REPO_PR_AND_ISSUE_IDS],
            repo_ids,
            per_node_callback=self.registry.register_node,
            ingest=False,
        )
        await self._run_stage("Item IDs", queries)
        logger.info("Discovered item ids", pull_requests=len(self.registry.pr_ids), issues=len(self.registry.issue_ids))

    async def _fetch_items(self, stage: str, model: type[ListableItem], fragment: Fragment, id_map: dict[str, str], field: str) -> None:
        if not id_map:
            logger.debug("No items to fetch", stage=stage)
            return
        # Shared labels and milestones take their parent from the last item listing them,
        # so items are fetched in id order whatever order they were discovered in.
        queries = self.service.batching(stage, [fragment], sorted(id_map))
        await self._run_stage(stage, queries)
        unresolved = repair(self.store, model, id_map, field)
        if unresolved:
            logger.info("Items left without a repository", kind=model.kind, count=len(unresolved))
        self.unresolved.extend(unresolved)

    async def fetch_pull_requests(self) -> None:
        """Stage 4: fetch full pull request records and attach new ones to their repository."""
        await self._fetch_items("PRs", PullRequest, fragments.PULL_REQUEST, self.registry.pr_ids, "pullRequests")

    async def fetch_issues(self) -> None:
        """Stage 5: fetch full issue records and attach new ones to their repository."""
        await self._fetch_items("Issues", Issue, fragments.ISSUE, self.registry.issue_ids, "issues")

    def _has_repo(self, item: ListableItem) -> bool:
        return item.repo_id is not None and item.repo_id in self.store.collection(Repo)

    def _parent_resolves(self, item: Entity) -> bool:
        """Return True if the item's parent is in the store and, for pull requests and issues, has a repository."""
        if item.parent is None:
            return False
        parent = self.store.get(item.parent.kind, item.parent.id)
        if isinstance(parent, ListableItem):
            return self._has_repo(parent)
        return parent is not None

    async def fetch_comments(self) -> None:
        """Stage 6: fetch comments of every review, pull request and issue that needs them."""
        item_ids = sorted(
            [review.id for review in self.store.collection(Review) if needs_comments(review) and self._parent_resolves(review)]
            + [pr.id for pr in self.store.collection(PullRequest) if needs_comments(pr) and self._has_repo(pr)]
            + [issue.id for issue in self.store.collection(Issue) if needs_comments(issue) and self._has_repo(issue)]
        )
        queries = self.service.batching(
            "Comments",
            [fragments.REVIEW_COMMENTS, fragments.PULL_REQUEST_COMMENTS, fragments.ISSUE_COMMENTS],
            item_ids,
            ingest_roots=False,
        )
        await self._run_stage("Comments", queries)

    async def fetch_reactions(self) -> None:
        """Stage 7: fetch reactions of every comment, pull request and issue that needs them."""
        item_ids = sorted(
            [comment.id for comment in self.store.collection(Comment) if needs_reactions(comment) and self._parent_resolves(comment)]
            + [pr.id for pr in self.store.collection(PullRequest) if needs_reactions(pr) and self._has_repo(pr)]
            + [issue.id for issue in self.store.collection(Issue) if needs_reactions(issue) and self._has_repo(issue)]
        )
        queries = self.service.batching(
            "Reactions",
            [
                fragments.REVIEW_COMMENT_REACTIONS,
                fragments.ISSUE_COMMENT_REACTIONS,
                fragments.PULL_REQUEST_REACTIONS,
                fragments.ISSUE_REACTIONS,
            ],
            item_ids,
            ingest_roots=False,
        )
        await self._run_stage("Reactions", queries)

    def commit(self) -> list[Announcement]:
        """Stage 8: purge, persist and deliver announcements."""
        self.store.save(purge_untouched_items=True, queue=self.queue)
        return self.queue.process_queue()


async def run_update_workflow(context: RunContext, service: QueryService | None = None) -> UpdateResult:
    """Run one full update pass for the given run context."""
    orchestrator = UpdateOrchestrator(context, service=service)
    return await orchestrator.run()
