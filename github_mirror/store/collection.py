"""Keyed collection of one entity kind and its persistence lifecycle."""

from pathlib import Path
from typing import TYPE_CHECKING, Generic, Iterator, TypeVar

import structlog
from pydantic import ValidationError
from ruamel.yaml.error import YAMLError

from github_mirror.notifications.queue import NotificationQueue
from github_mirror.store.announcements import derive_announcement
from github_mirror.store.exceptions import DecodeError, PersistError
from github_mirror.store.models import Entity
from github_mirror.utils.constants import STORE_FILE_SUFFIX, TEMPORARY_FILE_SUFFIX
from github_mirror.utils.yaml import dump_yaml_to_file, load_yaml_file

if TYPE_CHECKING:
    from github_mirror.store.store import EntityStore

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

T = TypeVar("T", bound=Entity)


class EntityCollection(Generic[T]):
    """All entities of one kind, keyed by id.

    Every kind is handled through the same operations: load, save,
    process_announcements, purge_untouched_items and purge_stale_relationships.
    """

    def __init__(self, model: type[T]) -> None:
        """Initialize an empty collection for the given entity model."""
        self.model = model
        self.items: dict[str, T] = {}

    @property
    def kind(self) -> str:
        """Entity kind stored in this collection."""
        return self.model.kind

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self.items

    def __iter__(self) -> Iterator[T]:
        return iter(list(self.items.values()))

    def get(self, item_id: str) -> T | None:
        """Return the entity with the given id, if present."""
        return self.items.get(item_id)

    def update(self, item: T) -> None:
        """Replace the stored snapshot under the item's id."""
        self.items[item.id] = item

    def remove(self, item_id: str) -> None:
        """Remove the entity with the given id."""
        del self.items[item_id]

    def path(self, directory: Path) -> Path:
        """Path of the persisted records for this kind."""
        return directory / f"{self.kind}{STORE_FILE_SUFFIX}"

    def load(self, directory: Path) -> None:
        """Restore the collection from its persisted records.

        A missing record file means the kind has never been saved and yields an
        empty collection. Anything else that cannot be decoded raises DecodeError.
        """
        path = self.path(directory)
        if not path.exists():
            logger.debug("No persisted records found", kind=self.kind, path=str(path))
            self.items = {}
            return

        try:
            records = load_yaml_file(path)
        except (OSError, YAMLError) as e:
            raise DecodeError(self.kind, path, str(e)) from e
        if not isinstance(records, list):
            raise DecodeError(self.kind, path, f"expected a list of records, found {type(records).__name__}")

        items: dict[str, T] = {}
        for index, record in enumerate(records):
            try:
                item = self.model.model_validate(record)
            except ValidationError as e:
                raise DecodeError(self.kind, path, f"record {index} is invalid: {e}") from e
            items[item.id] = item
        self.items = items
        logger.debug("Loaded persisted records", kind=self.kind, count=len(items))

    def save(self, directory: Path) -> Path:
        """Write the collection to a temporary file next to its record file and return that path."""
        path = self.path(directory)
        temporary_path = path.with_name(path.name + TEMPORARY_FILE_SUFFIX)
        records = [item.model_dump(mode="json") for item in sorted(self.items.values(), key=lambda i: i.id)]
        try:
            dump_yaml_to_file(records, temporary_path)
        except OSError as e:
            raise PersistError(temporary_path, str(e)) from e
        return temporary_path

    def process_announcements(self, store: "EntityStore", queue: NotificationQueue) -> int:
        """Enqueue announcements for the items of this kind and return how many were queued."""
        count = 0
        for item in self:
            announcement = derive_announcement(item, store)
            if announcement is not None:
                queue.enqueue(announcement)
                count += 1
        return count

    def purge_untouched_items(self) -> int:
        """Remove every item that was not touched during the pass."""
        untouched = [item.id for item in self if not item.touched]
        for item_id in untouched:
            self.remove(item_id)
        if untouched:
            logger.debug("Purged untouched items", kind=self.kind, count=len(untouched))
        return len(untouched)

    def purge_stale_relationships(self, store: "EntityStore") -> int:
        """Remove or detach items whose parent is no longer in the store.

        Kinds that cannot exist without a parent are removed; the others only
        lose their parent reference.
        """
        changed = 0
        for item in self:
            if item.parent is None:
                if self.model.parent_required:
                    logger.debug("Removing item without parent", kind=self.kind, id=item.id)
                    self.remove(item.id)
                    changed += 1
                continue
            if store.get(item.parent.kind, item.parent.id) is not None:
                continue
            if self.model.parent_required:
                logger.debug("Removing item with missing parent", kind=self.kind, id=item.id, parent_id=item.parent.id)
                self.remove(item.id)
            else:
                logger.debug("Clearing missing parent", kind=self.kind, id=item.id, parent_id=item.parent.id)
                self.update(item.model_copy(update={"parent": None}))
            changed += 1
        return changed
