"""Delta report for one reconciliation run.

The report lists what was actually written: new opportunities, updated ones
with their changed fields, and, separately, the writes that failed. Unchanged
candidates only show up in the summary count.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

from oppsync.domain.model import DeltaType
from oppsync.domain.reconciliation import ReconciliationStatus

if TYPE_CHECKING:
    from uuid import UUID

    from oppsync.domain.reconciliation import CandidateResolution, ReconciliationResult

DELTA_COLUMNS: Final[tuple[str, ...]] = ("type", "id", "title", "sourceUrl", "changedFields")
CHANGED_FIELDS_DELIMITER: Final[str] = ";"
# changedFields uses the artifact's camelCase vocabulary
FIELD_LABELS: Final[dict[str, str]] = {
    "title": "title",
    "description": "description",
    "agency": "agency",
    "budget": "budget",
    "status": "status",
    "posted_date": "postedDate",
    "due_date": "dueDate",
    "naics_codes": "naicsCodes",
    "set_aside": "setAside",
}


def field_labels(names: tuple[str, ...]) -> list[str]:
    return [FIELD_LABELS.get(name, name) for name in names]


@dataclass(frozen=True, slots=True)
class NewOpportunityEntry:
    id: UUID
    title: str
    source_url: str
    agency: str
    source_type: str

    def to_dict(self) -> dict[str, object]:
        return {
            "id": str(self.id),
            "title": self.title,
            "sourceUrl": self.source_url,
            "agency": self.agency,
            "sourceType": self.source_type,
        }


@dataclass(frozen=True, slots=True)
class UpdatedOpportunityEntry:
    id: UUID
    title: str
    source_url: str
    changed_fields: tuple[str, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "id": str(self.id),
            "title": self.title,
            "sourceUrl": self.source_url,
            "changedFields": field_labels(self.changed_fields),
        }


@dataclass(frozen=True, slots=True)
class FailedWriteEntry:
    type: DeltaType
    title: str
    source_url: str
    error: str

    def to_dict(self) -> dict[str, object]:
        return {
            "type": str(self.type),
            "title": self.title,
            "sourceUrl": self.source_url,
            "error": self.error,
        }


@dataclass(slots=True)
class ReconciliationReport:
    """Serializable delta of one run."""

    generated_at: datetime
    new: list[NewOpportunityEntry] = field(default_factory=list[NewOpportunityEntry])
    updated: list[UpdatedOpportunityEntry] = field(default_factory=list[UpdatedOpportunityEntry])
    failed: list[FailedWriteEntry] = field(default_factory=list[FailedWriteEntry])
    unchanged_count: int = 0

    @property
    def is_empty(self) -> bool:
        return not (self.new or self.updated or self.failed)

    def summary(self) -> dict[str, int]:
        return {
            "totalNew": len(self.new),
            "totalUpdated": len(self.updated),
            "totalUnchanged": self.unchanged_count,
            "totalFailed": len(self.failed),
        }

    def to_document(self) -> dict[str, object]:
        """JSON-ready document: ``date``, ``summary`` and one list per outcome."""

        return {
            "date": self.generated_at.isoformat(),
            "summary": self.summary(),
            "newOpportunities": [entry.to_dict() for entry in self.new],
            "updatedOpportunities": [entry.to_dict() for entry in self.updated],
            "failedWrites": [entry.to_dict() for entry in self.failed],
        }

    def to_rows(self) -> list[dict[str, str]]:
        """Flat rows keyed by ``DELTA_COLUMNS``; new entries first, then updates."""

        rows = [
            {
                "type": str(DeltaType.NEW),
                "id": str(entry.id),
                "title": entry.title,
                "sourceUrl": entry.source_url,
                "changedFields": "",
            }
            for entry in self.new
        ]
        rows.extend(
            {
                "type": str(DeltaType.UPDATED),
                "id": str(entry.id),
                "title": entry.title,
                "sourceUrl": entry.source_url,
                "changedFields": CHANGED_FIELDS_DELIMITER.join(field_labels(entry.changed_fields)),
            }
            for entry in self.updated
        )
        return rows


def build_report(
    result: ReconciliationResult,
    *,
    generated_at: datetime | None = None,
) -> ReconciliationReport:
    report = ReconciliationReport(
        generated_at=generated_at or datetime.now(UTC),
        unchanged_count=len(result.unchanged),
    )
    for resolution in result.created:
        stored = resolution.stored
        if stored is None:
            continue
        report.new.append(
            NewOpportunityEntry(
                id=stored.id,
                title=stored.title,
                source_url=stored.source_url,
                agency=stored.agency,
                source_type=stored.source_type,
            )
        )
    for resolution in result.applied_updates:
        stored = resolution.stored
        if stored is None:
            continue
        report.updated.append(
            UpdatedOpportunityEntry(
                id=stored.id,
                title=stored.title,
                source_url=stored.source_url,
                changed_fields=resolution.changed_fields,
            )
        )
    report.failed.extend(_failed_entry(resolution) for resolution in result.failed)
    return report


def _failed_entry(resolution: CandidateResolution) -> FailedWriteEntry:
    delta = (
        DeltaType.UPDATED
        if resolution.status is ReconciliationStatus.UPDATED
        else DeltaType.NEW
    )
    return FailedWriteEntry(
        type=delta,
        title=resolution.candidate.title,
        source_url=resolution.source_url,
        error=resolution.error or "unknown error",
    )
