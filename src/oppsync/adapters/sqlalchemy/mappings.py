"""SQLAlchemy mapping metadata for the opportunity model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import Any, cast

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Dialect,
    Float,
    ForeignKey,
    String,
    Table,
    Text,
    TypeDecorator,
    Uuid,
    orm,
)
from sqlalchemy.orm import relationship

from oppsync.domain.model import Category, Opportunity, OpportunityNotification, PointOfContact

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class PointOfContactType(TypeDecorator[PointOfContact]):
    """Stores a contact as a small JSON object."""

    impl = JSON
    cache_ok = True

    def process_bind_param(
        self, value: PointOfContact | None, dialect: Dialect
    ) -> dict[str, str | None] | None:
        _ = dialect
        if value is None:
            return None
        return value.to_dict()

    def process_result_value(self, value: object, dialect: Dialect) -> PointOfContact | None:
        _ = dialect
        if not isinstance(value, dict):
            return None
        return PointOfContact.from_mapping(cast(dict[str, Any], value))


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

opportunity_table = Table(
    "opportunity",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("title", String(1024), nullable=False),
    Column("description", Text, nullable=False),
    Column("agency", String(512), nullable=False),
    Column("source_url", String(2048), nullable=False, unique=True),
    Column("source_type", String(128), nullable=False),
    Column("posted_date", UTCDateTime(), nullable=False),
    Column("budget", Float, nullable=True),
    Column("due_date", UTCDateTime(), nullable=True),
    Column("status", String(32), nullable=False),
    Column("naics_codes", JSON, nullable=False),
    Column("set_aside", String(255), nullable=True),
    Column("point_of_contact", PointOfContactType(), nullable=True),
    Column("created_at", UTCDateTime(), nullable=True),
    Column("updated_at", UTCDateTime(), nullable=True),
)

category_table = Table(
    "category",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("name", String(255), nullable=False, unique=True),
    Column("description", Text, nullable=True),
    Column("keywords", JSON, nullable=False),
)

opportunity_category_table = Table(
    "opportunity_category",
    mapper_registry.metadata,
    Column(
        "opportunity_id",
        UUIDColumnType,
        ForeignKey("opportunity.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "category_id",
        UUIDColumnType,
        ForeignKey("category.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

opportunity_notification_table = Table(
    "opportunity_notification",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column(
        "opportunity_id",
        UUIDColumnType,
        ForeignKey("opportunity.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("recipient", String(320), nullable=False),
    Column("notified_at", UTCDateTime(), nullable=False),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model (idempotent)."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Category, category_table)
    mapper_registry.map_imperatively(OpportunityNotification, opportunity_notification_table)
    mapper_registry.map_imperatively(
        Opportunity,
        opportunity_table,
        properties={
            "categories": relationship(
                Category,
                secondary=opportunity_category_table,
                lazy="selectin",
            ),
            "notifications": relationship(
                OpportunityNotification,
                cascade="all, delete-orphan",
                lazy="selectin",
            ),
        },
    )
    orm.configure_mappers()
    return mapper_registry
