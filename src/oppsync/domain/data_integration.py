"""Application services for synchronising opportunity listings."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from oppsync.domain.ingest_pipeline import (
    CollectionOrchestrator,
    PipelineContext,
    run_ingest_pipeline,
)
from oppsync.domain.reconciliation import ReconciliationEngine
from oppsync.domain.report import build_report

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from oppsync.domain.ingest_pipeline import CollectionResult, IngestionPipeline
    from oppsync.domain.ports.fetching import SourceAdapter
    from oppsync.domain.ports.unit_of_work import OpportunityUnitOfWork
    from oppsync.domain.reconciliation import ReconciliationResult
    from oppsync.domain.report import ReconciliationReport


log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class SyncOpportunitiesResult:
    """Outcome of one collect -> dedup -> reconcile -> report run."""

    collection: CollectionResult
    context: PipelineContext
    reconciliation: ReconciliationResult
    report: ReconciliationReport

    @property
    def collected(self) -> int:
        return self.context.collected

    @property
    def deduplicated(self) -> int:
        return len(self.reconciliation.resolutions)


async def reconcile_sources(
    *,
    adapters: Sequence[SourceAdapter],
    unit_of_work_factory: Callable[[], OpportunityUnitOfWork],
    pipeline: IngestionPipeline | None = None,
    now_provider: Callable[[], datetime] = _utcnow,
) -> SyncOpportunitiesResult:
    """Collect from every adapter, then validate, deduplicate and reconcile.

    A lookup failure in the persistence gateway propagates; every other failure
    is captured per source or per record in the returned result.
    """

    collection = await CollectionOrchestrator(adapters=adapters).collect()
    candidates, context = run_ingest_pipeline(collection.candidates, pipeline=pipeline)
    log.info(
        "Pipeline kept %d of %d candidates (invalid=%d, exact dupes=%d, fuzzy dupes=%d)",
        len(candidates),
        context.collected,
        context.invalid_dropped,
        context.exact_collapsed,
        context.fuzzy_collapsed,
    )

    with unit_of_work_factory() as uow:
        reconciliation = ReconciliationEngine(uow=uow).reconcile(candidates)
        # a rollback expires stored rows; read them before the session closes
        report = build_report(reconciliation, generated_at=now_provider())

    return SyncOpportunitiesResult(
        collection=collection,
        context=context,
        reconciliation=reconciliation,
        report=report,
    )


def sync_opportunities(
    *,
    adapters: Sequence[SourceAdapter],
    unit_of_work_factory: Callable[[], OpportunityUnitOfWork],
    pipeline: IngestionPipeline | None = None,
    now_provider: Callable[[], datetime] = _utcnow,
) -> SyncOpportunitiesResult:
    """Blocking wrapper around :func:`reconcile_sources`."""

    return asyncio.run(
        reconcile_sources(
            adapters=adapters,
            unit_of_work_factory=unit_of_work_factory,
            pipeline=pipeline,
            now_provider=now_provider,
        )
    )
