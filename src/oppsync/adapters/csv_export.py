"""SAM.gov contract-opportunities CSV export as a candidate source."""

from __future__ import annotations

import asyncio
import csv
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from oppsync.domain.errors import AdapterError
from oppsync.domain.model import CandidateRecord, OpportunityStatus, PointOfContact

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path

    from oppsync.config.sources import CsvSourceConfig

log = getLogger(__name__)

SOURCE_NAME: Final[str] = "SAM.gov CSV"
SAM_OPPORTUNITY_URL: Final[str] = "https://sam.gov/opp/{notice_id}/view"
REQUIRED_COLUMNS: Final[tuple[str, ...]] = ("NoticeId", "Title", "PostedDate")

DEFAULT_TITLE: Final[str] = "Untitled Contract"
DEFAULT_DESCRIPTION: Final[str] = "No description available"
DEFAULT_AGENCY: Final[str] = "Unknown Agency"

_DATE_FORMATS: Final[tuple[str, ...]] = ("%m/%d/%Y", "%m/%d/%Y %H:%M")
# SAM.gov writes offsets as "-05"
_SHORT_OFFSET = re.compile(r"(\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?)([+-]\d{2})$")


class MalformedRowError(ValueError):
    """A CSV row that cannot be turned into a candidate."""


def parse_date(value: str | None) -> datetime | None:
    """Parse the export's date strings; naive values are taken as UTC."""

    if value is None or not value.strip():
        return None
    text = _SHORT_OFFSET.sub(r"\1\2:00", value.strip())
    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)  # noqa: DTZ007
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def parse_budget(value: str | None) -> float | None:
    if value is None:
        return None
    cleaned = value.replace("$", "").replace(",", "").strip()
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def determine_status(notice_type: str | None, active: str | None) -> str:
    if active == "No":
        return OpportunityStatus.CLOSED
    if notice_type and "award" in notice_type.lower():
        return OpportunityStatus.AWARDED
    return OpportunityStatus.NEW


def extract_contact(row: Mapping[str, str]) -> PointOfContact | None:
    """Primary contact if named, else the secondary one."""

    for prefix in ("Primary", "Secondary"):
        name = _cell(row, f"{prefix}ContactFullname")
        if name:
            return PointOfContact(
                name=name,
                email=_cell(row, f"{prefix}ContactEmail"),
                phone=_cell(row, f"{prefix}ContactPhone"),
            )
    return None


def _cell(row: Mapping[str, str | None], column: str) -> str | None:
    value = row.get(column)
    if value is None:
        return None
    value = value.strip()
    return value or None


def translate_row(row: Mapping[str, str]) -> CandidateRecord:
    """Map one export row to a candidate; raises ``MalformedRowError`` when unusable."""

    missing = [column for column in REQUIRED_COLUMNS if not _cell(row, column)]
    if missing:
        raise MalformedRowError(f"missing {', '.join(missing)}")

    notice_id = _cell(row, "NoticeId")
    posted_date = parse_date(_cell(row, "PostedDate"))
    if posted_date is None:
        raise MalformedRowError(f"unparseable PostedDate {row.get('PostedDate')!r}")

    naics = _cell(row, "NaicsCode")
    return CandidateRecord(
        title=_cell(row, "Title") or DEFAULT_TITLE,
        description=_cell(row, "Description") or DEFAULT_DESCRIPTION,
        agency=_cell(row, "DepartmentIndAgency") or _cell(row, "Department") or DEFAULT_AGENCY,
        source_url=_cell(row, "Link") or SAM_OPPORTUNITY_URL.format(notice_id=notice_id),
        source_type=SOURCE_NAME,
        posted_date=posted_date,
        budget=parse_budget(_cell(row, "Award$") or _cell(row, "EstimatedValue")),
        due_date=parse_date(_cell(row, "ResponseDeadLine")),
        status=determine_status(_cell(row, "Type"), _cell(row, "Active")),
        naics_codes=(naics,) if naics else (),
        set_aside=_cell(row, "SetAside"),
        point_of_contact=extract_contact(row),
    )


def translate_rows(
    rows: Iterable[Mapping[str, str]],
    *,
    max_records: int | None = None,
) -> list[CandidateRecord]:
    candidates: list[CandidateRecord] = []
    for line_number, row in enumerate(rows, start=2):
        if max_records is not None and len(candidates) >= max_records:
            break
        try:
            candidates.append(translate_row(row))
        except MalformedRowError as exc:
            log.warning("Skipping CSV row %d: %s", line_number, exc)
    return candidates


@dataclass(slots=True)
class CsvExportSource:
    """Reads a local SAM.gov export; a missing or unreadable file fails the whole call."""

    path: Path
    max_records: int | None = None
    name: str = SOURCE_NAME

    @classmethod
    def from_config(cls, config: CsvSourceConfig) -> CsvExportSource:
        if config.path is None:
            raise AdapterError("CSV source is not configured", source=SOURCE_NAME)
        return cls(path=config.path, max_records=config.max_records)

    async def collect(self) -> list[CandidateRecord]:
        log.info("Starting CSV data collection from: %s", self.path)
        candidates = await asyncio.to_thread(self._read)
        log.info("Collected %d opportunities from CSV file", len(candidates))
        return candidates

    def _read(self) -> list[CandidateRecord]:
        if not self.path.is_file():
            raise AdapterError(f"CSV file not found: {self.path}", source=self.name)
        try:
            with self.path.open(newline="", encoding="utf-8-sig", errors="replace") as handle:
                return translate_rows(csv.DictReader(handle), max_records=self.max_records)
        except (OSError, csv.Error) as exc:
            msg = f"Could not read CSV file {self.path}: {exc}"
            raise AdapterError(msg, source=self.name) from exc
