"""HTTP client for the USA Spending award search API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx
from pydantic import ValidationError

from oppsync.adapters.http_resilience import ResilientClient
from oppsync.config.sources import get_usaspending_config
from oppsync.domain.errors import AdapterError

from .schema import (
    AwardResult,
    AwardSearchFilters,
    AwardSearchRequest,
    AwardSearchResponse,
    ErrorResponse,
    TimePeriod,
)
from .translator import SOURCE_NAME, translate_award

if TYPE_CHECKING:
    from collections.abc import Callable

    from oppsync.config.http_resilience import ResilienceConfig
    from oppsync.config.sources import UsaSpendingConfig
    from oppsync.domain.model import CandidateRecord
    from oppsync.domain.ports.fetching import SourceAdapter

log = getLogger(__name__)

SPENDING_BY_AWARD_PATH: Final[str] = "search/spending_by_award/"
DEFAULT_MIN_BUDGET: Final[float] = 10_000.0


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class UsaSpendingAPIError(AdapterError):
    """Raised when the award search fails or returns an unusable envelope."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message, source=SOURCE_NAME)
        self.status_code = status_code


@dataclass(slots=True)
class UsaSpendingSource:
    """Recent contract awards from USA Spending.

    Awards whose obligation is at or below ``min_budget`` are left out; pass
    ``min_budget=None`` to keep everything.
    """

    config: UsaSpendingConfig = field(default_factory=get_usaspending_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    now_provider: Callable[[], datetime] = field(default=_utcnow)
    min_budget: float | None = DEFAULT_MIN_BUDGET
    max_pages: int = 1
    name: str = SOURCE_NAME

    def build_request(self, *, page: int = 1) -> AwardSearchRequest:
        end = self.now_provider().astimezone(UTC).date()
        start = end - timedelta(days=self.config.lookback_days)
        return AwardSearchRequest(
            filters=AwardSearchFilters(time_period=[TimePeriod(start_date=start, end_date=end)]),
            page=page,
            limit=self.config.page_size,
        )

    async def collect(self) -> list[CandidateRecord]:
        log.info("Starting USA Spending data collection")
        candidates: list[CandidateRecord] = []
        async with self.client_factory(self.config.resilience) as client:
            page = 1
            while True:
                response = await self._request_page(client, page=page)
                log.info(
                    "Received %d results from USA Spending API (page %d)",
                    len(response.results),
                    page,
                )
                candidates.extend(self._translate_results(response.results))
                if not response.page_metadata.has_next or page >= self.max_pages:
                    break
                page += 1
        log.info("Collected %d opportunities from USA Spending", len(candidates))
        return candidates

    def _translate_results(self, results: list[object]) -> list[CandidateRecord]:
        candidates: list[CandidateRecord] = []
        for index, raw in enumerate(results):
            try:
                award = AwardResult.model_validate(raw)
            except ValidationError as exc:
                log.warning(
                    "Skipping malformed USA Spending result %d: %s",
                    index,
                    exc.errors(include_url=False),
                )
                continue
            if self.min_budget is not None and (award.total_obligation or 0.0) <= self.min_budget:
                continue
            candidates.append(translate_award(award))
        return candidates

    async def _request_page(self, client: ResilientClient, *, page: int) -> AwardSearchResponse:
        body = self.build_request(page=page).model_dump(mode="json")
        try:
            response = await client.post(SPENDING_BY_AWARD_PATH, json=body)
        except httpx.HTTPError as exc:
            raise UsaSpendingAPIError(f"USA Spending request failed: {exc}") from exc

        if response.is_error:
            raise UsaSpendingAPIError(
                f"USA Spending API error {response.status_code}: {_error_detail(response)}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UsaSpendingAPIError("USA Spending returned a non-JSON body") from exc
        try:
            return AwardSearchResponse.model_validate(payload)
        except ValidationError as exc:
            raise UsaSpendingAPIError("Invalid response from USA Spending API") from exc


def _error_detail(response: httpx.Response) -> str:
    try:
        return ErrorResponse.model_validate(response.json()).detail
    except (ValueError, ValidationError):
        return response.text[:200] or response.reason_phrase


if TYPE_CHECKING:
    _source_check: SourceAdapter = UsaSpendingSource()
