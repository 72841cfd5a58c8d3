from __future__ import annotations

import csv
import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from oppsync.adapters.report_files import write_csv_report, write_json_report
from oppsync.domain.model import DeltaType
from oppsync.domain.report import (
    FailedWriteEntry,
    NewOpportunityEntry,
    ReconciliationReport,
    UpdatedOpportunityEntry,
)

if TYPE_CHECKING:
    from pathlib import Path

GENERATED_AT = datetime(2024, 3, 2, 23, 59, tzinfo=UTC)


def _report() -> ReconciliationReport:
    return ReconciliationReport(
        generated_at=GENERATED_AT,
        new=[
            NewOpportunityEntry(
                id=uuid4(),
                title="Fresh, with comma",
                source_url="https://example.gov/opp/fresh",
                agency="GSA",
                source_type="Test",
            )
        ],
        updated=[
            UpdatedOpportunityEntry(
                id=uuid4(),
                title="Changed",
                source_url="https://example.gov/opp/changed",
                changed_fields=("title", "budget"),
            )
        ],
        failed=[
            FailedWriteEntry(
                type=DeltaType.NEW,
                title="Broken",
                source_url="https://example.gov/opp/broken",
                error="disk full",
            )
        ],
        unchanged_count=3,
    )


def test_json_report_is_named_by_date(tmp_path: Path) -> None:
    path = write_json_report(_report(), tmp_path / "reports")

    assert path.name == "opportunity-delta-2024-03-02.json"
    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["summary"] == {
        "totalNew": 1,
        "totalUpdated": 1,
        "totalUnchanged": 3,
        "totalFailed": 1,
    }
    assert document["updatedOpportunities"][0]["changedFields"] == ["title", "budget"]
    assert document["failedWrites"][0]["error"] == "disk full"


def test_csv_report_rows(tmp_path: Path) -> None:
    path = write_csv_report(_report(), tmp_path)

    assert path is not None
    assert path.name == "opportunity-delta-2024-03-02.csv"
    with path.open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        assert reader.fieldnames == ["type", "id", "title", "sourceUrl", "changedFields"]
        rows = list(reader)
    assert [row["type"] for row in rows] == ["new", "updated"]
    assert rows[0]["title"] == "Fresh, with comma"
    assert rows[1]["changedFields"] == "title;budget"


def test_csv_report_skipped_without_rows(tmp_path: Path) -> None:
    report = ReconciliationReport(generated_at=GENERATED_AT, unchanged_count=4)

    assert write_csv_report(report, tmp_path / "out") is None
    assert not (tmp_path / "out").exists()


def test_json_report_written_even_when_empty(tmp_path: Path) -> None:
    report = ReconciliationReport(generated_at=GENERATED_AT)

    path = write_json_report(report, tmp_path)

    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["newOpportunities"] == []
    assert document["updatedOpportunities"] == []
