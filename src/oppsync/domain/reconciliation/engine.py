"""Classify deduplicated candidates against stored state and persist the delta.

The engine performs one batched lookup for every candidate key, then walks the
candidates in order:

- no stored opportunity -> NEW, created;
- stored and the whitelisted fields differ -> UPDATED, only changed fields written;
- stored and identical -> UNCHANGED, nothing written.

Every write is committed on its own so one failing record never takes the
others down with it. Only an unavailable lookup aborts the run, because no
classification is safe without seeing existing state.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from oppsync.domain.errors import DuplicateKeyError, PersistenceLookupError, PersistenceWriteError
from oppsync.domain.model import exact_key

from .contracts import (
    CandidateResolution,
    ReconciliationResult,
    ReconciliationStatus,
)
from .diff import changed_values, diff_candidate

if TYPE_CHECKING:
    from collections.abc import Sequence

    from oppsync.domain.model import CandidateRecord, ExactKey, Opportunity
    from oppsync.domain.ports.persistence import OpportunityRepository
    from oppsync.domain.ports.unit_of_work import OpportunityUnitOfWork


log = getLogger(__name__)


def classify(candidate: CandidateRecord, existing: Opportunity | None) -> CandidateResolution:
    """Decide NEW / UPDATED / UNCHANGED for ``candidate`` without touching storage."""

    if existing is None:
        return CandidateResolution(candidate=candidate, status=ReconciliationStatus.NEW)
    diff = diff_candidate(candidate, existing)
    status = ReconciliationStatus.UPDATED if diff else ReconciliationStatus.UNCHANGED
    return CandidateResolution(
        candidate=candidate,
        status=status,
        existing=existing,
        changed_fields=diff,
    )


@dataclass(slots=True)
class ReconciliationEngine:
    """Run reconciliation for one batch inside an open unit of work."""

    uow: OpportunityUnitOfWork

    @property
    def repository(self) -> OpportunityRepository:
        return self.uow.repositories.opportunities

    def reconcile(self, candidates: Sequence[CandidateRecord]) -> ReconciliationResult:
        existing_by_key = self._lookup({exact_key(candidate) for candidate in candidates})
        log.info(
            "Found %d existing opportunities for %d candidates",
            len(existing_by_key),
            len(candidates),
        )

        result = ReconciliationResult()
        for candidate in candidates:
            resolution = classify(candidate, existing_by_key.get(exact_key(candidate)))
            result.resolutions.append(resolution)
            if resolution.status is ReconciliationStatus.NEW:
                self._create(resolution)
            elif resolution.status is ReconciliationStatus.UPDATED:
                self._update(resolution)
            else:
                resolution.mark_skipped()

        log.info(
            "Reconciled %d candidates: new=%d (created %d), updated=%d (applied %d), "
            "unchanged=%d, failed=%d",
            len(result.resolutions),
            len(result.new),
            len(result.created),
            len(result.updated),
            len(result.applied_updates),
            len(result.unchanged),
            len(result.failed),
        )
        return result

    def _lookup(self, keys: set[ExactKey]) -> dict[ExactKey, Opportunity]:
        if not keys:
            return {}
        try:
            found = self.repository.find_by_source_urls(keys)
        except PersistenceLookupError:
            log.exception("Existing opportunity lookup failed; aborting reconciliation")
            raise
        return {opportunity.source_url: opportunity for opportunity in found}

    def _create(self, resolution: CandidateResolution) -> None:
        try:
            stored = self.repository.create(resolution.candidate)
            self.uow.commit()
        except DuplicateKeyError as exc:
            self.uow.rollback()
            log.info(
                "Opportunity %s was stored concurrently; reconciling as an update",
                resolution.source_url,
            )
            self._reconcile_duplicate(resolution, exc)
            return
        except PersistenceWriteError as exc:
            self.uow.rollback()
            log.exception("Failed to save opportunity %s: %s", resolution.source_url, exc)
            resolution.mark_failed(exc)
            return
        resolution.mark_written(stored)

    def _update(self, resolution: CandidateResolution) -> None:
        changes = changed_values(resolution.candidate, resolution.changed_fields)
        try:
            stored = self.repository.update(resolution.source_url, changes)
            self.uow.commit()
        except PersistenceWriteError as exc:
            self.uow.rollback()
            log.exception("Failed to update opportunity %s: %s", resolution.source_url, exc)
            resolution.mark_failed(exc)
            return
        resolution.mark_written(stored)

    def _reconcile_duplicate(
        self, resolution: CandidateResolution, conflict: DuplicateKeyError
    ) -> None:
        try:
            matches = self.repository.find_by_source_urls({resolution.source_url})
        except PersistenceLookupError as exc:
            log.error("Could not re-read opportunity %s: %s", resolution.source_url, exc)
            resolution.mark_failed(exc)
            return

        existing = next((m for m in matches if m.source_url == resolution.source_url), None)
        if existing is None:
            log.error(
                "Opportunity %s rejected as duplicate but not found on re-read",
                resolution.source_url,
            )
            resolution.mark_failed(conflict)
            return

        diff = diff_candidate(resolution.candidate, existing)
        resolution.existing = existing
        resolution.changed_fields = diff
        if not diff:
            resolution.status = ReconciliationStatus.UNCHANGED
            resolution.mark_skipped()
            return
        resolution.status = ReconciliationStatus.UPDATED
        self._update(resolution)
