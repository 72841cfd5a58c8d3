"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from oppsync.adapters.csv_export import CsvExportSource
from oppsync.adapters.report_files import write_csv_report, write_json_report
from oppsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from oppsync.adapters.usaspending import UsaSpendingSource
from oppsync.config import (
    get_csv_source_config,
    get_storage_config,
    get_usaspending_config,
)
from oppsync.domain.data_integration import SyncOpportunitiesResult
from oppsync.domain.data_integration import sync_opportunities as run_sync
from oppsync.domain.ports.unit_of_work import OpportunityUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from oppsync.domain.ports.fetching import SourceAdapter

UnitOfWorkFactory = Callable[[], OpportunityUnitOfWork]


log = getLogger(__name__)


def build_default_adapters(
    *,
    csv_path: Path | None = None,
    max_records: int | None = None,
    include_usaspending: bool = True,
    lookback_days: int | None = None,
) -> list[SourceAdapter]:
    """Adapters enabled by arguments and environment, in registration order."""

    adapters: list[SourceAdapter] = []
    csv_config = get_csv_source_config()
    if csv_path is not None:
        csv_config = replace(csv_config, path=csv_path)
    if max_records is not None:
        csv_config = replace(csv_config, max_records=max_records)
    if csv_config.enabled:
        adapters.append(CsvExportSource.from_config(csv_config))
    if include_usaspending:
        usaspending_config = get_usaspending_config(lookback_days=lookback_days)
        adapters.append(UsaSpendingSource(config=usaspending_config))
    return adapters


def sync_opportunities(
    *,
    adapters: Sequence[SourceAdapter] | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    csv_path: Path | None = None,
    max_records: int | None = None,
    include_usaspending: bool = True,
    lookback_days: int | None = None,
    report_dir: Path | None = None,
    write_reports: bool = True,
) -> SyncOpportunitiesResult:
    """Collect, reconcile and report opportunities using the configured adapters."""

    if unit_of_work_factory is None:
        if not is_started():
            startup()
        unit_of_work_factory = SqlAlchemyUnitOfWork
    effective_adapters = (
        list(adapters)
        if adapters is not None
        else build_default_adapters(
            csv_path=csv_path,
            max_records=max_records,
            include_usaspending=include_usaspending,
            lookback_days=lookback_days,
        )
    )
    if not effective_adapters:
        log.warning("No sources configured; nothing will be collected")
    log.info(
        "Starting opportunity sync: sources=%s",
        ", ".join(adapter.name for adapter in effective_adapters) or "-",
    )

    result = run_sync(adapters=effective_adapters, unit_of_work_factory=unit_of_work_factory)

    summary = result.report.summary()
    log.info(
        "Finished opportunity sync: collected=%d, kept=%d, new=%d, updated=%d, "
        "unchanged=%d, failed=%d",
        result.collected,
        result.deduplicated,
        summary["totalNew"],
        summary["totalUpdated"],
        summary["totalUnchanged"],
        summary["totalFailed"],
    )

    if write_reports:
        directory = report_dir or get_storage_config().reports_path()
        write_json_report(result.report, directory)
        write_csv_report(result.report, directory)

    return result
