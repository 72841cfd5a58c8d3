"""Reconciliation outcome types.

Each candidate ends up with exactly one ``CandidateResolution``; the
classification is recorded before any write is attempted and the write status
after it, so a failed write never erases what the engine decided.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from oppsync.domain.model import CandidateRecord, Opportunity

    from .diff import DiffResult


class ReconciliationStatus(StrEnum):
    NEW = "new"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


class WriteStatus(StrEnum):
    PENDING = "pending"
    WRITTEN = "written"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(slots=True, kw_only=True)
class CandidateResolution:
    """Classification and persistence outcome for one deduplicated candidate."""

    candidate: CandidateRecord
    status: ReconciliationStatus
    existing: Opportunity | None = None
    changed_fields: DiffResult = ()
    write_status: WriteStatus = WriteStatus.PENDING
    stored: Opportunity | None = None
    error: str | None = None

    @property
    def source_url(self) -> str:
        return self.candidate.source_url

    def mark_written(self, stored: Opportunity) -> None:
        self.stored = stored
        self.write_status = WriteStatus.WRITTEN
        self.error = None

    def mark_failed(self, error: BaseException | str) -> None:
        self.write_status = WriteStatus.FAILED
        self.error = str(error)

    def mark_skipped(self) -> None:
        self.write_status = WriteStatus.SKIPPED


@dataclass(slots=True)
class ReconciliationResult:
    """Per-candidate resolutions of one run, in deduplicated candidate order."""

    resolutions: list[CandidateResolution] = field(default_factory=list[CandidateResolution])

    def _with_status(self, status: ReconciliationStatus) -> list[CandidateResolution]:
        return [resolution for resolution in self.resolutions if resolution.status is status]

    @property
    def new(self) -> list[CandidateResolution]:
        return self._with_status(ReconciliationStatus.NEW)

    @property
    def updated(self) -> list[CandidateResolution]:
        return self._with_status(ReconciliationStatus.UPDATED)

    @property
    def unchanged(self) -> list[CandidateResolution]:
        return self._with_status(ReconciliationStatus.UNCHANGED)

    @property
    def failed(self) -> list[CandidateResolution]:
        return [r for r in self.resolutions if r.write_status is WriteStatus.FAILED]

    @property
    def created(self) -> list[CandidateResolution]:
        return [r for r in self.new if r.write_status is WriteStatus.WRITTEN]

    @property
    def applied_updates(self) -> list[CandidateResolution]:
        return [r for r in self.updated if r.write_status is WriteStatus.WRITTEN]
