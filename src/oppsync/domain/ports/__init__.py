"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import SourceAdapter
from .persistence import OpportunityRepository
from .unit_of_work import (
    OpportunityRepositories,
    OpportunityUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "OpportunityRepositories",
    "OpportunityRepository",
    "OpportunityUnitOfWork",
    "RepositoryCollection",
    "SourceAdapter",
    "UnitOfWork",
]
