from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from oppsync import app as app_module
from oppsync.adapters.csv_export import CsvExportSource
from oppsync.adapters.usaspending import UsaSpendingSource
from oppsync.domain.ingest_pipeline import CollectionResult
from oppsync.ui import cli as cli_module
from tests.helpers.opportunities import (
    FakeOpportunityUnitOfWork,
    FakeSource,
    InMemoryOpportunityRepository,
    make_candidate,
)


def _fake_result() -> SimpleNamespace:
    return SimpleNamespace(collection=CollectionResult())


def test_cli_sync_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_sync(**kwargs: object) -> SimpleNamespace:
        captured.update(kwargs)
        return _fake_result()

    monkeypatch.setattr(cli_module, "sync_opportunities", fake_sync)

    cli_module.main(["sync"])

    assert captured == {
        "csv_path": None,
        "max_records": None,
        "include_usaspending": True,
        "lookback_days": None,
        "report_dir": None,
        "write_reports": True,
    }


def test_cli_sync_with_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_sync(**kwargs: object) -> SimpleNamespace:
        captured.update(kwargs)
        return _fake_result()

    monkeypatch.setattr(cli_module, "sync_opportunities", fake_sync)

    cli_module.main(
        [
            "sync",
            "--csv",
            "exports/opps.csv",
            "--max-records",
            "5",
            "--no-usaspending",
            "--lookback-days",
            "14",
            "--report-dir",
            "out",
            "--no-report",
        ]
    )

    assert captured["csv_path"] == Path("exports/opps.csv")
    assert captured["max_records"] == 5
    assert captured["include_usaspending"] is False
    assert captured["lookback_days"] == 14
    assert captured["report_dir"] == Path("out")
    assert captured["write_reports"] is False


@pytest.mark.parametrize(
    "argv",
    [
        ["sync", "--max-records", "0"],
        ["sync", "--lookback-days", "-1"],
        ["sync", "--max-records", "many"],
        [],
    ],
)
def test_cli_rejects_invalid_arguments(monkeypatch: pytest.MonkeyPatch, argv: list[str]) -> None:
    def fake_sync(**_: object) -> SimpleNamespace:
        raise AssertionError("sync must not run")

    monkeypatch.setattr(cli_module, "sync_opportunities", fake_sync)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(argv)

    assert excinfo.value.code == 2


def test_cli_exits_with_error_on_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_sync(**_: object) -> SimpleNamespace:
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(cli_module, "sync_opportunities", fake_sync)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync"])

    assert excinfo.value.code == 1


def test_build_default_adapters_respects_arguments(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("OPPSYNC_CSV_PATH", raising=False)
    monkeypatch.delenv("OPPSYNC_CSV_MAX_RECORDS", raising=False)

    assert app_module.build_default_adapters(include_usaspending=False) == []

    adapters = app_module.build_default_adapters(
        csv_path=tmp_path / "export.csv",
        max_records=3,
        lookback_days=5,
    )

    csv_source, usaspending = adapters
    assert isinstance(csv_source, CsvExportSource)
    assert csv_source.max_records == 3
    assert isinstance(usaspending, UsaSpendingSource)
    assert usaspending.config.lookback_days == 5


def test_app_sync_writes_reports(tmp_path: Path) -> None:
    repository = InMemoryOpportunityRepository()
    uow = FakeOpportunityUnitOfWork(repository)
    source = FakeSource(name="fake", records=[make_candidate("a"), make_candidate("b")])

    result = app_module.sync_opportunities(
        adapters=[source],
        unit_of_work_factory=lambda: uow,
        report_dir=tmp_path,
    )

    assert len(result.report.new) == 2
    assert uow.commits == 2
    assert len(list(tmp_path.glob("opportunity-delta-*.json"))) == 1
    assert len(list(tmp_path.glob("opportunity-delta-*.csv"))) == 1


def test_app_sync_can_skip_reports(tmp_path: Path) -> None:
    uow = FakeOpportunityUnitOfWork(InMemoryOpportunityRepository())

    result = app_module.sync_opportunities(
        adapters=[],
        unit_of_work_factory=lambda: uow,
        report_dir=tmp_path / "reports",
        write_reports=False,
    )

    assert result.report.is_empty
    assert not (tmp_path / "reports").exists()
