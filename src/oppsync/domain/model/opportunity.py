"""Opportunity listings: incoming candidates and their persisted counterparts."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Final

from oppsync.domain.model.entity import Entity
from oppsync.domain.model.enums import OpportunityStatus

if TYPE_CHECKING:
    from datetime import datetime

type ExactKey = str
type FuzzyKey = str

DEFAULT_STATUS: Final[str] = OpportunityStatus.NEW


@dataclass(frozen=True, slots=True)
class PointOfContact:
    name: str
    email: str | None = None
    phone: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {"name": self.name, "email": self.email, "phone": self.phone}

    @classmethod
    def from_mapping(cls, value: Mapping[str, object]) -> PointOfContact | None:
        name = value.get("name")
        if not isinstance(name, str) or not name.strip():
            return None
        email = value.get("email")
        phone = value.get("phone")
        return cls(
            name=name,
            email=email if isinstance(email, str) and email else None,
            phone=phone if isinstance(phone, str) and phone else None,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class CandidateRecord:
    """A normalized, not-yet-persisted opportunity produced by a source adapter.

    ``source_url``, ``title``, ``description`` and ``agency`` must be non-empty;
    the ingest pipeline's validation phase drops records that violate this.
    """

    title: str
    description: str
    agency: str
    source_url: str
    source_type: str
    posted_date: datetime
    budget: float | None = None
    due_date: datetime | None = None
    status: str = DEFAULT_STATUS
    naics_codes: tuple[str, ...] = ()
    set_aside: str | None = None
    point_of_contact: PointOfContact | None = None


def exact_key(candidate: CandidateRecord) -> ExactKey:
    """Identity of a listing within and across runs: the source URL, verbatim."""

    return candidate.source_url


def fuzzy_key(candidate: CandidateRecord) -> FuzzyKey | None:
    """Case-insensitive ``title-agency`` composite used to merge cross-source mirrors.

    Returns ``None`` when either part is blank; an unkeyed candidate never collides
    with another one.
    """

    title = candidate.title.strip()
    agency = candidate.agency.strip()
    if not title or not agency:
        return None
    return f"{candidate.title.lower()}-{candidate.agency.lower()}"


@dataclass(eq=False, kw_only=True)
class Category(Entity):
    """Technology category an opportunity can be filed under."""

    name: str
    description: str | None = None
    keywords: list[str] = field(default_factory=list[str])


@dataclass(eq=False, kw_only=True)
class OpportunityNotification(Entity):
    """Record that a recipient has already been told about an opportunity."""

    recipient: str
    notified_at: datetime


@dataclass(eq=False, kw_only=True)
class Opportunity(Entity):
    """Persisted opportunity.

    Created from a candidate the first time its source URL is seen, then mutated
    field by field whenever a later run detects changes. The reconciliation core
    never deletes opportunities.
    """

    UPDATABLE_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {
            "title",
            "description",
            "agency",
            "budget",
            "status",
            "posted_date",
            "due_date",
            "naics_codes",
            "set_aside",
            "point_of_contact",
            "source_type",
        }
    )

    title: str
    description: str
    agency: str
    source_url: str
    source_type: str
    posted_date: datetime
    budget: float | None = None
    due_date: datetime | None = None
    status: str = DEFAULT_STATUS
    naics_codes: list[str] = field(default_factory=list[str])
    set_aside: str | None = None
    point_of_contact: PointOfContact | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    categories: list[Category] = field(default_factory=list[Category], repr=False)
    notifications: list[OpportunityNotification] = field(
        default_factory=list[OpportunityNotification], repr=False
    )

    @classmethod
    def from_candidate(cls, candidate: CandidateRecord, *, now: datetime) -> Opportunity:
        """Build a fresh opportunity with default status and no notification state."""

        return cls(
            title=candidate.title,
            description=candidate.description,
            agency=candidate.agency,
            source_url=candidate.source_url,
            source_type=candidate.source_type,
            posted_date=candidate.posted_date,
            budget=candidate.budget,
            due_date=candidate.due_date,
            status=candidate.status.strip() or DEFAULT_STATUS,
            naics_codes=list(candidate.naics_codes),
            set_aside=candidate.set_aside,
            point_of_contact=candidate.point_of_contact,
            created_at=now,
            updated_at=now,
        )

    def apply_changes(self, changes: Mapping[str, object], *, now: datetime) -> None:
        unknown = sorted(set(changes) - self.UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(unknown)}")
        for name, value in changes.items():
            if name == "naics_codes":
                if not isinstance(value, (list, tuple)):
                    raise ValueError("naics_codes must be a sequence of strings")
                value = [str(code) for code in value]  # noqa: PLW2901
            setattr(self, name, value)
        self.updated_at = now

    @property
    def is_notified(self) -> bool:
        return bool(self.notifications)

    def mark_notified(self, recipient: str, *, at: datetime) -> OpportunityNotification:
        for existing in self.notifications:
            if existing.recipient == recipient:
                return existing
        notification = OpportunityNotification(recipient=recipient, notified_at=at)
        self.notifications.append(notification)
        return notification

    def add_category(self, category: Category) -> None:
        if category not in self.categories:
            self.categories.append(category)
