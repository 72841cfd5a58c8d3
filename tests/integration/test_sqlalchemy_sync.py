from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from oppsync.adapters.csv_export import CsvExportSource
from oppsync.app import sync_opportunities as app_sync
from oppsync.domain.data_integration import sync_opportunities
from tests.helpers.opportunities import FIXED_NOW, FailingSource, FakeSource, make_candidate

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from oppsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork

pytestmark = pytest.mark.integration

CSV_HEADER = "NoticeId,Title,DepartmentIndAgency,PostedDate,Award$,Link\n"


def _write_csv(path: Path, *rows: str) -> Path:
    path.write_text(CSV_HEADER + "".join(f"{row}\n" for row in rows), encoding="utf-8")
    return path


def test_two_runs_produce_incremental_delta(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
    tmp_path: Path,
) -> None:
    csv_path = _write_csv(
        tmp_path / "export.csv",
        "N1,Cloud Hosting,GSA,2024-02-15,\"$100,000\",https://sam.gov/opp/N1/view",
        "N2,Data Platform,NASA,2024-02-16,75000,https://sam.gov/opp/N2/view",
    )
    mirror = FakeSource(
        name="mirror",
        records=[
            make_candidate(
                "mirror",
                title="cloud hosting",
                agency="gsa",
                source_url="https://mirror.example/cloud",
            )
        ],
    )

    first = sync_opportunities(
        adapters=[CsvExportSource(path=csv_path), mirror],
        unit_of_work_factory=sqlite_unit_of_work,
        now_provider=lambda: FIXED_NOW,
    )

    assert first.collected == 3
    assert first.context.fuzzy_collapsed == 1
    assert first.report.summary() == {
        "totalNew": 2,
        "totalUpdated": 0,
        "totalUnchanged": 0,
        "totalFailed": 0,
    }
    assert {entry.source_url for entry in first.report.new} == {
        "https://sam.gov/opp/N1/view",
        "https://sam.gov/opp/N2/view",
    }

    _write_csv(
        csv_path,
        "N1,Cloud Hosting,GSA,2024-02-15,\"$120,000\",https://sam.gov/opp/N1/view",
        "N2,Data Platform,NASA,2024-02-16,75000,https://sam.gov/opp/N2/view",
        "N3,Edge Compute,DOE,2024-02-20,,https://sam.gov/opp/N3/view",
    )

    second = sync_opportunities(
        adapters=[CsvExportSource(path=csv_path), mirror],
        unit_of_work_factory=sqlite_unit_of_work,
        now_provider=lambda: FIXED_NOW,
    )

    assert second.report.summary() == {
        "totalNew": 1,
        "totalUpdated": 1,
        "totalUnchanged": 1,
        "totalFailed": 0,
    }
    (updated,) = second.report.updated
    assert updated.source_url == "https://sam.gov/opp/N1/view"
    assert updated.changed_fields == ("budget",)
    assert updated.id == next(
        entry.id for entry in first.report.new if entry.source_url == updated.source_url
    )

    third = sync_opportunities(
        adapters=[CsvExportSource(path=csv_path), mirror],
        unit_of_work_factory=sqlite_unit_of_work,
    )

    assert third.report.is_empty
    assert third.report.unchanged_count == 3

    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.opportunities.get_by_source_url("https://sam.gov/opp/N1/view")
        assert stored is not None
        assert stored.budget == 120_000.0


def test_failed_source_does_not_block_the_run(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
    tmp_path: Path,
) -> None:
    result = app_sync(
        adapters=[FailingSource(name="broken"), FakeSource(name="ok", records=[make_candidate()])],
        unit_of_work_factory=sqlite_unit_of_work,
        report_dir=tmp_path,
    )

    assert result.collection.failed_sources == ("broken",)
    assert len(result.report.new) == 1
    (json_report,) = tmp_path.glob("opportunity-delta-*.json")
    document = json.loads(json_report.read_text(encoding="utf-8"))
    assert document["summary"]["totalNew"] == 1
    assert len(list(tmp_path.glob("opportunity-delta-*.csv"))) == 1


def test_failed_write_is_isolated_within_a_real_session(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    kept = make_candidate("kept", budget=10.0)
    sync_opportunities(
        adapters=[FakeSource(name="seed", records=[kept])],
        unit_of_work_factory=sqlite_unit_of_work,
    )

    fresh = make_candidate("fresh")
    broken = make_candidate("broken", posted_date=None)
    changed = make_candidate("kept", budget=20.0)

    # the broken create rolls back after fresh was committed and kept was loaded
    result = sync_opportunities(
        adapters=[FakeSource(name="mixed", records=[fresh, broken, changed])],
        unit_of_work_factory=sqlite_unit_of_work,
    )

    report = result.report
    assert [entry.source_url for entry in report.new] == [fresh.source_url]
    assert [entry.title for entry in report.new] == [fresh.title]
    (updated,) = report.updated
    assert updated.source_url == kept.source_url
    assert updated.changed_fields == ("budget",)
    (failed,) = report.failed
    assert failed.source_url == broken.source_url
    assert "posted_date" in failed.error

    with sqlite_unit_of_work() as uow:
        repository = uow.repositories.opportunities
        assert repository.get_by_source_url(broken.source_url) is None
        assert repository.get_by_source_url(fresh.source_url) is not None
        stored = repository.get_by_source_url(kept.source_url)
        assert stored is not None
        assert stored.budget == 20.0
