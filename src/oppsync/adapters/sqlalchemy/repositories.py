"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from oppsync.adapters.sqlalchemy.mappings import opportunity_table
from oppsync.domain.errors import DuplicateKeyError, PersistenceLookupError, PersistenceWriteError
from oppsync.domain.model import Opportunity

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Mapping, Sequence

    from sqlalchemy.orm import Session

    from oppsync.domain.model import CandidateRecord, ExactKey

log = getLogger(__name__)

DEFAULT_LOOKUP_CHUNK_SIZE = 500
SOURCE_URL_CONSTRAINT: Final[str] = "uq_opportunity_source_url"
# SQLite reports the column rather than the constraint name
_SQLITE_SOURCE_URL_CONFLICT: Final[str] = "UNIQUE constraint failed: opportunity.source_url"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def is_source_url_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return SOURCE_URL_CONSTRAINT in message or _SQLITE_SOURCE_URL_CONFLICT in message


class SqlAlchemyOpportunityRepository:
    """Opportunity gateway over one session.

    Writes are flushed immediately so constraint violations surface on the call
    that caused them; committing is left to the unit of work.
    """

    def __init__(
        self,
        session: Session,
        *,
        now_provider: Callable[[], datetime] = _utcnow,
        chunk_size: int = DEFAULT_LOOKUP_CHUNK_SIZE,
    ) -> None:
        self.session = session
        self._now = now_provider
        self._chunk_size = chunk_size

    def find_by_source_urls(self, source_urls: Collection[ExactKey]) -> Sequence[Opportunity]:
        keys = sorted(set(source_urls))
        found: list[Opportunity] = []
        try:
            for start in range(0, len(keys), self._chunk_size):
                chunk = keys[start : start + self._chunk_size]
                stmt = select(Opportunity).where(opportunity_table.c.source_url.in_(chunk))
                found.extend(self.session.execute(stmt).scalars())
        except SQLAlchemyError as exc:
            raise PersistenceLookupError(f"Could not look up opportunities: {exc}") from exc
        log.debug("Looked up %d source urls, found %d stored", len(keys), len(found))
        return found

    def get_by_source_url(self, source_url: ExactKey) -> Opportunity | None:
        stmt = select(Opportunity).where(opportunity_table.c.source_url == source_url)
        try:
            return self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceLookupError(f"Could not look up {source_url}: {exc}") from exc

    def create(self, candidate: CandidateRecord) -> Opportunity:
        opportunity = Opportunity.from_candidate(candidate, now=self._now())
        self.session.add(opportunity)
        try:
            self.session.flush()
        except IntegrityError as exc:
            if is_source_url_conflict(exc):
                raise DuplicateKeyError(
                    f"Opportunity already stored for {candidate.source_url}",
                    source_url=candidate.source_url,
                ) from exc
            raise PersistenceWriteError(
                f"Could not create {candidate.source_url}: {exc.orig}",
                source_url=candidate.source_url,
            ) from exc
        except SQLAlchemyError as exc:
            raise PersistenceWriteError(
                f"Could not create {candidate.source_url}: {exc}",
                source_url=candidate.source_url,
            ) from exc
        return opportunity

    def update(self, source_url: ExactKey, fields: Mapping[str, object]) -> Opportunity:
        try:
            opportunity = self.get_by_source_url(source_url)
        except PersistenceLookupError as exc:
            raise PersistenceWriteError(str(exc), source_url=source_url) from exc
        if opportunity is None:
            msg = f"No opportunity stored for {source_url}"
            raise PersistenceWriteError(msg, source_url=source_url)
        try:
            opportunity.apply_changes(fields, now=self._now())
        except ValueError as exc:
            raise PersistenceWriteError(str(exc), source_url=source_url) from exc
        try:
            self.session.flush()
        except SQLAlchemyError as exc:
            raise PersistenceWriteError(
                f"Could not update {source_url}: {exc}",
                source_url=source_url,
            ) from exc
        return opportunity
