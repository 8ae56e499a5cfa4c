"""Custom exceptions for the synchronize module."""


class QueryFailureError(Exception):
    """Raised when any query of an update stage fails, aborting the whole pass."""

    def __init__(self, stage: str) -> None:
        """Initializes the exception with the name of the failed stage."""
        super().__init__(f"Update aborted: one or more queries failed during stage '{stage}'")
        self.stage = stage


class UnresolvedParentError(Exception):
    """Describes an item that could not be attached to a parent after repair.

    This is reported rather than raised: the item is left out of the stages
    that need its parent and is dropped when the store is committed.
    """

    def __init__(self, kind: str, item_id: str, parent_id: str | None) -> None:
        """Initializes the error with the item and the parent id it was mapped to, if any."""
        if parent_id is None:
            message = f"No parent known for {kind} '{item_id}'"
        else:
            message = f"Parent '{parent_id}' of {kind} '{item_id}' is not in the store"
        super().__init__(message)
        self.kind = kind
        self.item_id = item_id
        self.parent_id = parent_id
