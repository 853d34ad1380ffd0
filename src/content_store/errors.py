"""Exceptions raised by the content store."""

from __future__ import annotations

from pathlib import Path


class ContentStoreError(Exception):
    """Base class for content store errors."""


class ValidationError(ContentStoreError, ValueError):
    """Raised when input is rejected before anything is persisted."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(ContentStoreError, LookupError):
    """Raised when a mutation targets an entity that does not exist."""

    def __init__(self, entity: str, key: object) -> None:
        super().__init__(f"{entity} not found: {key!r}")
        self.entity = entity
        self.key = key


class StoreCorruptedError(ContentStoreError):
    """Raised in strict mode when the storage file cannot be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Storage file {path} is unreadable: {reason}")
        self.path = path
        self.reason = reason


class WriteQueueClosedError(ContentStoreError, RuntimeError):
    """Raised when a mutation is submitted to a closed write queue."""
