"""Public domain model surface."""

from __future__ import annotations

from oppsync.domain.model.entity import Entity
from oppsync.domain.model.enums import DeltaType, OpportunityStatus
from oppsync.domain.model.opportunity import (
    DEFAULT_STATUS,
    CandidateRecord,
    Category,
    ExactKey,
    FuzzyKey,
    Opportunity,
    OpportunityNotification,
    PointOfContact,
    exact_key,
    fuzzy_key,
)

__all__ = [
    "DEFAULT_STATUS",
    "CandidateRecord",
    "Category",
    "DeltaType",
    "Entity",
    "ExactKey",
    "FuzzyKey",
    "Opportunity",
    "OpportunityNotification",
    "OpportunityStatus",
    "PointOfContact",
    "exact_key",
    "fuzzy_key",
]
