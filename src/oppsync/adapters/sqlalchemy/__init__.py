"""SQLAlchemy adapter package for oppsync."""

from __future__ import annotations

from .mappings import (
    PointOfContactType,
    UTCDateTime,
    mapper_registry,
    start_mappers,
)
from .repositories import SqlAlchemyOpportunityRepository

__all__ = [
    "PointOfContactType",
    "SqlAlchemyOpportunityRepository",
    "UTCDateTime",
    "mapper_registry",
    "start_mappers",
]
