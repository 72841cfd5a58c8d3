"""Entry points for running the ingest pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .context import CandidateBatch, PipelineContext
from .deduplication import ExactDeduplicationPhase, FuzzyDeduplicationPhase
from .orchestrator import IngestionPipeline
from .validation import ValidationPhase

if TYPE_CHECKING:
    from collections.abc import Iterable

    from oppsync.domain.model import CandidateRecord


def default_pipeline() -> IngestionPipeline:
    return IngestionPipeline(
        phases=(ValidationPhase(), ExactDeduplicationPhase(), FuzzyDeduplicationPhase())
    )


def run_ingest_pipeline(
    candidates: Iterable[CandidateRecord],
    *,
    context: PipelineContext | None = None,
    pipeline: IngestionPipeline | None = None,
) -> tuple[list[CandidateRecord], PipelineContext]:
    """Validate and deduplicate ``candidates``; return survivors and run counters."""

    active_context = context or PipelineContext()
    batch = CandidateBatch.of(candidates)
    (pipeline or default_pipeline()).run(batch, context=active_context)
    return batch.candidates, active_context
