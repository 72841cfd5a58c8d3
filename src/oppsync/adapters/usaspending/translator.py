"""Translate USA Spending award results into candidate records."""

from __future__ import annotations

from datetime import UTC, datetime, time
from typing import TYPE_CHECKING, Final

from oppsync.domain.model import CandidateRecord, OpportunityStatus, PointOfContact

if TYPE_CHECKING:
    from datetime import date

    from .schema import AwardResult

SOURCE_NAME: Final[str] = "USA Spending"
AWARD_URL: Final[str] = "https://www.usaspending.gov/award/{award_id}"

DEFAULT_TITLE: Final[str] = "Untitled Contract"
DEFAULT_DESCRIPTION: Final[str] = "No description available"
DEFAULT_AGENCY: Final[str] = "Unknown Agency"


def _as_datetime(value: date) -> datetime:
    return datetime.combine(value, time.min, tzinfo=UTC)


def translate_award(result: AwardResult) -> CandidateRecord:
    contact = PointOfContact(name=result.recipient_name) if result.recipient_name else None
    end_date = result.period_of_performance_end_date
    return CandidateRecord(
        title=result.award_title or DEFAULT_TITLE,
        description=result.award_description or DEFAULT_DESCRIPTION,
        agency=result.awarding_agency_name or DEFAULT_AGENCY,
        source_url=AWARD_URL.format(award_id=result.award_id),
        source_type=SOURCE_NAME,
        posted_date=_as_datetime(result.period_of_performance_start_date),
        budget=result.total_obligation,
        due_date=_as_datetime(end_date) if end_date is not None else None,
        status=OpportunityStatus.NEW,
        naics_codes=(result.naics_code,) if result.naics_code else (),
        point_of_contact=contact,
    )
