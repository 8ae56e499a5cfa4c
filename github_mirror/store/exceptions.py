"""Contains exceptions raised when loading or saving the entity store."""

from pathlib import Path


class DecodeError(Exception):
    """Raised when persisted records cannot be decoded into entities."""

    def __init__(self, kind: str, path: Path, reason: str) -> None:
        """Initializes the exception with the entity kind and file that failed to decode."""
        super().__init__(f"Failed to decode persisted {kind} records from {path}: {reason}")
        self.kind = kind
        self.path = path
        self.reason = reason


class PersistError(Exception):
    """Raised when the entity store cannot be written to disk."""

    def __init__(self, path: Path, reason: str) -> None:
        """Initializes the exception with the path that could not be written."""
        super().__init__(f"Failed to persist entity store to {path}: {reason}")
        self.path = path
        self.reason = reason
