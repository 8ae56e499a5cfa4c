"""The entity store: every entity kind, its persistence and its per-pass lifecycle."""

import os
from pathlib import Path
from typing import Any, Iterable, TypeVar

import structlog

from github_mirror.configuration.config import RunContext
from github_mirror.notifications.queue import NotificationQueue
from github_mirror.store.collection import EntityCollection
from github_mirror.store.exceptions import PersistError
from github_mirror.store.models import ENTITY_TYPES, ENTITY_TYPES_BY_TYPENAME, Entity, Parent, SyncState, User
from github_mirror.utils.constants import BACKUP_FILE_SUFFIX

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

T = TypeVar("T", bound=Entity)

ParentedNode = tuple[dict[str, Any], Parent | None]


class EntityStore:
    """Registry of per-kind entity collections.

    Every operation that applies to all kinds (load, save, announce, purge)
    iterates the registry, so adding a kind only means adding its model to
    ``ENTITY_TYPES``.
    """

    def __init__(self, context: RunContext, entity_types: Iterable[type[Entity]] = ENTITY_TYPES) -> None:
        """Initialize empty collections for every entity kind."""
        self.context = context
        self.collections: dict[str, EntityCollection[Any]] = {model.kind: EntityCollection(model) for model in entity_types}

    def collection(self, model: type[T]) -> EntityCollection[T]:
        """Return the collection holding entities of the given model."""
        return self.collections[model.kind]

    def get(self, kind: str, item_id: str) -> Entity | None:
        """Look up an entity by kind and id."""
        collection = self.collections.get(kind)
        if collection is None:
            return None
        return collection.get(item_id)

    def update(self, item: Entity) -> None:
        """Replace the stored snapshot of an entity under its id."""
        self.collections[item.kind].update(item)

    def children_of(self, parent_id: str, model: type[T], field: str | None = None) -> list[T]:
        """Return the entities of a kind whose parent is the given id, optionally restricted to one field."""
        return [
            item
            for item in self.collection(model)
            if item.parent is not None and item.parent.id == parent_id and (field is None or item.parent.field == field)
        ]

    def __len__(self) -> int:
        return sum(len(collection) for collection in self.collections.values())

    # Persistence

    def load_all(self) -> None:
        """Restore every collection from the save location and identify the authenticated user."""
        logger.debug("Loading entity store", save_location=str(self.context.save_location))
        for collection in self.collections.values():
            collection.load(self.context.save_location)
        logger.info("Loaded entity store", save_location=str(self.context.save_location), count=len(self))
        self.identify_me()

    def save_all(self) -> None:
        """Persist every collection.

        Each kind is written to a temporary file first. The previous record files
        are only replaced once every kind has been written successfully, and are
        restored if any of the replacements fails.
        """
        directory = self.context.save_location
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistError(directory, str(e)) from e

        temporary_paths = []
        try:
            for collection in self.collections.values():
                temporary_paths.append((collection.save(directory), collection.path(directory)))
        except PersistError:
            for temporary_path, _ in temporary_paths:
                temporary_path.unlink(missing_ok=True)
            raise

        # Previous record files are kept as backups until every kind is in place.
        swapped: list[tuple[Path, Path | None]] = []
        for temporary_path, path in temporary_paths:
            try:
                backup_path = None
                if path.exists():
                    backup_path = path.with_name(path.name + BACKUP_FILE_SUFFIX)
                    os.replace(path, backup_path)
                swapped.append((path, backup_path))
                os.replace(temporary_path, path)
            except OSError as e:
                logger.error("Failed to swap record file, restoring previous records", path=str(path), error=str(e))
                self._restore(swapped)
                for remaining_path, _ in temporary_paths:
                    remaining_path.unlink(missing_ok=True)
                raise PersistError(path, str(e)) from e

        for _, backup_path in swapped:
            if backup_path is not None:
                backup_path.unlink(missing_ok=True)
        logger.info("Saved entity store", save_location=str(directory), count=len(self))

    def _restore(self, swapped: list[tuple[Path, Path | None]]) -> None:
        """Put the previous record files back after a failed swap."""
        for path, backup_path in reversed(swapped):
            try:
                if backup_path is None:
                    path.unlink(missing_ok=True)
                elif backup_path.exists():
                    os.replace(backup_path, path)
            except OSError as e:
                logger.error("Failed to restore record file", path=str(path), backup_path=str(backup_path), error=str(e))

    def identify_me(self) -> User | None:
        """Find the authenticated user among the stored users and record it on the run context."""
        me = next((user for user in self.collection(User) if user.is_me), None)
        self.context.my_user = me
        if me is not None:
            logger.info("Identified API user", login=me.login)
        return me

    # Merging remote data

    def merge(self, node: dict[str, Any], parent: Parent | None = None) -> Entity | None:
        """Merge one remote node into the store and return the stored snapshot.

        Returns None for nodes that do not describe a known entity kind.
        """
        model = ENTITY_TYPES_BY_TYPENAME.get(node.get("__typename", ""))
        if model is None or "id" not in node:
            return None

        collection = self.collection(model)
        incoming = model.from_node(node, parent)
        existing = collection.get(incoming.id)
        update: dict[str, Any] = {"touched": True}

        if existing is None:
            incoming = incoming.with_local_defaults(self.context)
            state = SyncState.NEW
        else:
            update.update({name: getattr(existing, name) for name in model.local_fields})
            if incoming.parent is None:
                update["parent"] = existing.parent
            if existing.sync_state == SyncState.NONE:
                state = SyncState.NONE
            elif existing.remote_content() == incoming.remote_content():
                state = existing.sync_state
            elif existing.sync_state == SyncState.NEW:
                state = SyncState.NEW
            else:
                state = SyncState.UPDATED

        update["sync_state"] = state
        for flag in model.sync_flags:
            update[flag] = state in (SyncState.NEW, SyncState.UPDATED) or bool(existing is not None and getattr(existing, flag))

        merged = incoming.model_copy(update=update)
        collection.update(merged)
        return merged

    def ingest(self, nodes: Iterable[ParentedNode]) -> list[Entity]:
        """Merge a sequence of fetched nodes in order."""
        merged = []
        for node, parent in nodes:
            item = self.merge(node, parent)
            if item is not None:
                merged.append(item)
        return merged

    # Per-pass lifecycle

    def reset_touched(self) -> None:
        """Clear the touched flag of every entity at the start of a pass."""
        for collection in self.collections.values():
            for item in collection:
                if item.touched:
                    collection.update(item.model_copy(update={"touched": False}))

    def touch_protected_children(self) -> int:
        """Mark untouched children as touched when their parent did not re-fetch that child collection.

        Runs to a fixed point so that protection propagates down several levels
        (for example reactions of comments of an unchanged pull request).
        """
        protected = 0
        changed = True
        while changed:
            changed = False
            for collection in self.collections.values():
                for item in collection:
                    if item.touched or item.parent is None:
                        continue
                    parent = self.get(item.parent.kind, item.parent.id)
                    if parent is not None and parent.touched and parent.retains_children(item.parent.field):
                        collection.update(item.model_copy(update={"touched": True}))
                        protected += 1
                        changed = True
        return protected

    def process_announcements(self, queue: NotificationQueue) -> int:
        """Derive announcements for every kind. Failures are logged, never raised."""
        count = 0
        for collection in self.collections.values():
            try:
                count += collection.process_announcements(self, queue)
            except Exception as e:
                logger.error("Failed to process announcements", kind=collection.kind, error=str(e), error_type=type(e).__name__)
        return count

    def purge_untouched_items(self) -> int:
        """Remove every untouched entity of every kind."""
        return sum(collection.purge_untouched_items() for collection in self.collections.values())

    def purge_stale_relationships(self) -> int:
        """Remove or detach entities whose parent is gone, until no dangling reference remains."""
        total = 0
        while True:
            changed = sum(collection.purge_stale_relationships(self) for collection in self.collections.values())
            if changed == 0:
                return total
            total += changed

    def settle(self) -> None:
        """Collapse per-pass new/updated states to existing and clear the sync flags."""
        for collection in self.collections.values():
            for item in collection:
                if item.sync_state not in (SyncState.NEW, SyncState.UPDATED):
                    continue
                update: dict[str, Any] = {"sync_state": SyncState.EXISTING}
                update.update({flag: False for flag in item.sync_flags})
                collection.update(item.model_copy(update=update))

    def save(self, purge_untouched_items: bool, queue: NotificationQueue) -> None:
        """Commit the pass: announce, optionally purge, settle and persist."""
        logger.debug("Processing announcements")
        announcements = self.process_announcements(queue)

        if purge_untouched_items:
            logger.debug("Purging stale items")
            protected = self.touch_protected_children()
            purged = self.purge_untouched_items()
            detached = self.purge_stale_relationships()
            logger.info("Purged stale items", protected=protected, purged=purged, stale_relationships=detached)

        self.settle()
        logger.debug("Saving entity store")
        self.save_all()
        logger.info("Committed entity store", announcements=announcements, count=len(self))
