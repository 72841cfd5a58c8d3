"""Errors raised across the collection and reconciliation core."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class OppsyncError(Exception):
    """Base class for domain-level failures."""


class AdapterError(OppsyncError):
    """Raised by a source adapter when a whole collection call fails."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class ValidationError(OppsyncError):
    """Raised when a candidate lacks a required field."""

    def __init__(
        self,
        message: str,
        *,
        source_url: str | None = None,
        missing_fields: Sequence[str] = (),
    ) -> None:
        super().__init__(message)
        self.source_url = source_url
        self.missing_fields = tuple(missing_fields)


class PersistenceError(OppsyncError):
    """Base class for persistence gateway failures."""


class PersistenceLookupError(PersistenceError):
    """Raised when existing state cannot be read; fatal to a reconciliation run."""


class PersistenceWriteError(PersistenceError):
    """Raised when a single create or update fails."""

    def __init__(self, message: str, *, source_url: str | None = None) -> None:
        super().__init__(message)
        self.source_url = source_url


class DuplicateKeyError(PersistenceWriteError):
    """Raised when a create collides with an opportunity already stored under the key."""
