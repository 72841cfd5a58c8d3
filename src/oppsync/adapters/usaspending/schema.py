"""Pydantic models describing the USA Spending award search payloads."""

from __future__ import annotations

from datetime import date
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

AWARD_FIELDS: Final[tuple[str, ...]] = (
    "award_id",
    "award_title",
    "award_description",
    "awarding_agency_name",
    "awarding_sub_agency_name",
    "total_obligation",
    "period_of_performance_start_date",
    "period_of_performance_end_date",
    "recipient_name",
    "naics_code",
)
CONTRACT_AWARD_TYPE_CODES: Final[tuple[str, ...]] = ("A", "B", "C", "D")


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class UsaSpendingBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TimePeriod(UsaSpendingBaseModel):
    start_date: date
    end_date: date


class AwardSearchFilters(UsaSpendingBaseModel):
    time_period: list[TimePeriod]
    award_type_codes: list[str] = Field(default_factory=lambda: list(CONTRACT_AWARD_TYPE_CODES))
    place_of_performance_scope: str = "domestic"


class AwardSearchRequest(UsaSpendingBaseModel):
    filters: AwardSearchFilters
    fields: list[str] = Field(default_factory=lambda: list(AWARD_FIELDS))
    page: int = 1
    limit: int = 100
    sort: str = "total_obligation"
    order: str = "desc"


class AwardResult(UsaSpendingBaseModel):
    award_id: str
    award_title: str | None = None
    award_description: str | None = None
    awarding_agency_name: str | None = None
    total_obligation: float | None = None
    period_of_performance_start_date: date
    period_of_performance_end_date: date | None = None
    recipient_name: str | None = None
    naics_code: str | None = None

    _normalize_text = field_validator(
        "award_title",
        "award_description",
        "awarding_agency_name",
        "recipient_name",
        mode="before",
    )(_blank_to_none)

    @field_validator("award_id", mode="before")
    @classmethod
    def _coerce_award_id(cls, value: object) -> object:
        if isinstance(value, int):
            return str(value)
        if isinstance(value, str) and not value.strip():
            raise ValueError("award_id must not be blank")
        return value

    @field_validator("total_obligation", mode="before")
    @classmethod
    def _parse_amount(cls, value: object) -> object:
        if isinstance(value, str):
            cleaned = value.replace("$", "").replace(",", "").strip()
            return cleaned or None
        return value

    @field_validator("naics_code", mode="before")
    @classmethod
    def _coerce_naics(cls, value: object) -> object:
        if isinstance(value, int):
            return str(value)
        return _blank_to_none(value)


class PageMetadata(UsaSpendingBaseModel):
    page: int = 1
    has_next: bool = Field(default=False, alias="hasNext")


class AwardSearchResponse(UsaSpendingBaseModel):
    """Response envelope; results stay raw so one bad row cannot sink the page."""

    results: list[object]
    page_metadata: PageMetadata = Field(default_factory=PageMetadata)


class ErrorResponse(UsaSpendingBaseModel):
    detail: str
