"""Ports for persisting opportunities."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping, Sequence

    from oppsync.domain.model import CandidateRecord, ExactKey, Opportunity


@runtime_checkable
class OpportunityRepository(Protocol):
    """Key-based gateway over stored opportunities.

    Implementations enforce uniqueness of the source URL. Lookup failures raise
    ``PersistenceLookupError``; create/update failures raise
    ``PersistenceWriteError`` (``DuplicateKeyError`` when a create hits an
    existing key).
    """

    def find_by_source_urls(self, source_urls: Collection[ExactKey]) -> Sequence[Opportunity]: ...

    def create(self, candidate: CandidateRecord) -> Opportunity: ...

    def update(self, source_url: ExactKey, fields: Mapping[str, object]) -> Opportunity: ...
