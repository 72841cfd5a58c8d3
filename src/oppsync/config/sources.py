"""Source adapter configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env, optional_int_env
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

USASPENDING_BASE_URL: Final[str] = "https://api.usaspending.gov/api/v2/"
USASPENDING_TIMEOUT_SECONDS: Final[float] = 30.0
DEFAULT_LOOKBACK_DAYS: Final[int] = 30
DEFAULT_PAGE_SIZE: Final[int] = 100


@dataclass(frozen=True, slots=True)
class CsvSourceConfig:
    """SAM.gov CSV export location; ``path=None`` disables the source."""

    path: Path | None = None
    max_records: int | None = None

    @property
    def enabled(self) -> bool:
        return self.path is not None


@dataclass(frozen=True, slots=True)
class UsaSpendingConfig:
    resilience: ResilienceConfig
    lookback_days: int = DEFAULT_LOOKBACK_DAYS
    page_size: int = DEFAULT_PAGE_SIZE
    enabled: bool = True


def get_csv_source_config() -> CsvSourceConfig:
    raw_path = optional_env("OPPSYNC_CSV_PATH")
    return CsvSourceConfig(
        path=Path(raw_path).expanduser() if raw_path else None,
        max_records=optional_int_env("OPPSYNC_CSV_MAX_RECORDS", minimum=1),
    )


def get_usaspending_config(
    *,
    lookback_days: int | None = None,
    cache_path: Path | None = None,
) -> UsaSpendingConfig:
    base_url = os.getenv("OPPSYNC_USASPENDING_URL") or USASPENDING_BASE_URL
    # award search is a POST; only cache when a persistent store is requested
    cache = (
        CacheConfig(path=str(cache_path), ttl_seconds=3600.0)
        if cache_path is not None
        else None
    )
    return UsaSpendingConfig(
        resilience=ResilienceConfig(
            name="usaspending",
            base_url=base_url,
            timeout_seconds=USASPENDING_TIMEOUT_SECONDS,
            rate_limit=RateLimit(calls=2, period_seconds=1.0),
            cache=cache,
            headers={"Content-Type": "application/json"},
        ),
        lookback_days=lookback_days if lookback_days is not None else DEFAULT_LOOKBACK_DAYS,
    )
