"""Ports for collecting candidates from external sources."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from oppsync.domain.model import CandidateRecord


@runtime_checkable
class SourceAdapter(Protocol):
    """Contract implemented by every opportunity source.

    ``collect`` produces a finite, ordered batch of normalized candidates for one
    invocation. A failure covering the whole call raises
    :class:`~oppsync.domain.errors.AdapterError`; a single malformed record is
    dropped by the adapter with a warning instead. Timeouts and retries are the
    adapter's own business.
    """

    name: str

    async def collect(self) -> Sequence[CandidateRecord]: ...


__all__ = ["SourceAdapter"]
