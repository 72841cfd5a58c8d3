"""Field-level change detection between a candidate and its stored opportunity."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

from oppsync.domain.model import DEFAULT_STATUS

if TYPE_CHECKING:
    from oppsync.domain.model import CandidateRecord, Opportunity

type DiffResult = tuple[str, ...]

# Flat, comparable fields only. Timestamps, identity, contact details and the
# category/notification relations are never compared.
COMPARABLE_FIELDS: Final[tuple[str, ...]] = (
    "title",
    "description",
    "agency",
    "budget",
    "status",
    "posted_date",
    "due_date",
    "naics_codes",
    "set_aside",
)


def _comparable(value: object) -> object:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return value


def incoming_value(candidate: CandidateRecord, name: str) -> object:
    """Value ``candidate`` would store for ``name`` (blank status means the default)."""

    value = getattr(candidate, name)
    if name == "status":
        return value.strip() or DEFAULT_STATUS
    return value


def diff_candidate(candidate: CandidateRecord, existing: Opportunity) -> DiffResult:
    """Return the whitelisted fields whose values differ, in whitelist order."""

    return tuple(
        name
        for name in COMPARABLE_FIELDS
        if _comparable(incoming_value(candidate, name)) != _comparable(getattr(existing, name))
    )


def changed_values(candidate: CandidateRecord, diff: DiffResult) -> dict[str, object]:
    """Incoming values for the fields named in ``diff``."""

    return {name: incoming_value(candidate, name) for name in diff}
