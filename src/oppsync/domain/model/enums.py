"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class OpportunityStatus(StrEnum):
    NEW = "new"
    UPDATED = "updated"
    CLOSED = "closed"
    AWARDED = "awarded"


class DeltaType(StrEnum):
    """Kind of change a reconciled opportunity contributes to the delta report."""

    NEW = "new"
    UPDATED = "updated"
