"""Public interface for the USA Spending adapter."""

from __future__ import annotations

from .client import UsaSpendingAPIError, UsaSpendingSource
from .schema import AwardResult, AwardSearchRequest, AwardSearchResponse
from .translator import translate_award

__all__ = [
    "AwardResult",
    "AwardSearchRequest",
    "AwardSearchResponse",
    "UsaSpendingAPIError",
    "UsaSpendingSource",
    "translate_award",
]
