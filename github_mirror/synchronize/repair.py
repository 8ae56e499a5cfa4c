"""Attach fetched pull requests and issues to the repositories they were discovered in."""

import structlog

from github_mirror.store.models import ListableItem, Parent, Repo
from github_mirror.store.store import EntityStore
from github_mirror.synchronize.exceptions import UnresolvedParentError

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def repair(
    store: EntityStore,
    model: type[ListableItem],
    id_to_parent_id: dict[str, str],
    parent_field: str,
) -> list[UnresolvedParentError]:
    """Give every item of ``model`` without a repository the repository it was discovered in.

    Items whose id is not in ``id_to_parent_id``, or whose mapped repository is
    not in the store, are left as they are and returned as unresolved.
    """
    unresolved: list[UnresolvedParentError] = []
    for item in store.collection(model):
        if item.repo_id is not None:
            continue
        logger.debug("Detected missing parent", kind=model.kind, id=item.id)

        repo_id = id_to_parent_id.get(item.id)
        repo = store.collection(Repo).get(repo_id) if repo_id is not None else None
        if repo is None:
            error = UnresolvedParentError(model.kind, item.id, repo_id)
            logger.debug("Could not resolve parent", kind=model.kind, id=item.id, reason=str(error))
            unresolved.append(error)
            continue

        logger.debug("Determined parent", kind=model.kind, id=item.id, repo_id=repo.id)
        store.update(item.model_copy(update={"parent": Parent(id=repo.id, kind=Repo.kind, field=parent_field)}))
    return unresolved
