"""Concurrent fan-out over every registered source adapter."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from oppsync.domain.errors import AdapterError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from oppsync.domain.model import CandidateRecord
    from oppsync.domain.ports.fetching import SourceAdapter


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CollectionOutcome:
    """Result of one adapter invocation: its records or the captured failure."""

    source: str
    records: tuple[CandidateRecord, ...] = ()
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class CollectionResult:
    """Outcomes of one collection round, in adapter registration order."""

    outcomes: tuple[CollectionOutcome, ...] = ()

    @property
    def candidates(self) -> list[CandidateRecord]:
        """Records of every fulfilled outcome, registration order then emission order."""

        return [
            record
            for outcome in self.outcomes
            if outcome.succeeded
            for record in outcome.records
        ]

    @property
    def failed_sources(self) -> tuple[str, ...]:
        return tuple(outcome.source for outcome in self.outcomes if not outcome.succeeded)

    @property
    def succeeded_sources(self) -> tuple[str, ...]:
        return tuple(outcome.source for outcome in self.outcomes if outcome.succeeded)


def _source_name(adapter: SourceAdapter) -> str:
    return getattr(adapter, "name", None) or type(adapter).__name__


@dataclass(slots=True)
class CollectionOrchestrator:
    """Invoke all adapters concurrently and gather every outcome.

    One adapter failing never cancels or delays the others. No retries happen
    here; retry policy belongs to each adapter.
    """

    adapters: Sequence[SourceAdapter] = field(default_factory=tuple)

    async def collect(self) -> CollectionResult:
        log.info("Starting collection from %d sources", len(self.adapters))
        outcomes = await asyncio.gather(*(self._collect_one(adapter) for adapter in self.adapters))
        for outcome in outcomes:
            if outcome.succeeded:
                log.info(
                    "Successfully collected %d opportunities from %s",
                    len(outcome.records),
                    outcome.source,
                )
            else:
                log.error("Failed to collect from %s: %s", outcome.source, outcome.error)
        result = CollectionResult(outcomes=tuple(outcomes))
        log.info(
            "Collection finished: %d candidates from %d/%d sources",
            len(result.candidates),
            len(result.succeeded_sources),
            len(outcomes),
        )
        return result

    async def _collect_one(self, adapter: SourceAdapter) -> CollectionOutcome:
        source = _source_name(adapter)
        try:
            records = await adapter.collect()
            return CollectionOutcome(source=source, records=tuple(records))
        except AdapterError as exc:
            return CollectionOutcome(source=source, error=exc)
        except Exception as exc:
            log.exception("Unexpected error collecting from %s", source)
            return CollectionOutcome(source=source, error=exc)
