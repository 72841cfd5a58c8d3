"""Write delta reports to disk as JSON documents and CSV rows."""

from __future__ import annotations

import csv
import json
from logging import getLogger
from typing import TYPE_CHECKING, Final

from oppsync.domain.report import DELTA_COLUMNS

if TYPE_CHECKING:
    from pathlib import Path

    from oppsync.domain.report import ReconciliationReport

log = getLogger(__name__)

REPORT_PREFIX: Final[str] = "opportunity-delta"


def report_filename(report: ReconciliationReport, suffix: str) -> str:
    return f"{REPORT_PREFIX}-{report.generated_at.date().isoformat()}.{suffix}"


def write_json_report(report: ReconciliationReport, directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    destination = directory / report_filename(report, "json")
    destination.write_text(
        json.dumps(report.to_document(), indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    log.info("JSON report saved to %s", destination)
    return destination


def write_csv_report(report: ReconciliationReport, directory: Path) -> Path | None:
    """Write the delta rows; returns ``None`` without creating a file when there are none."""

    rows = report.to_rows()
    if not rows:
        log.info("No new or updated opportunities; skipping CSV report")
        return None
    directory.mkdir(parents=True, exist_ok=True)
    destination = directory / report_filename(report, "csv")
    with destination.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=list(DELTA_COLUMNS))
        writer.writeheader()
        writer.writerows(rows)
    log.info("CSV report saved to %s (%d rows)", destination, len(rows))
    return destination
