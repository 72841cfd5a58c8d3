"""Phase-based orchestrator for the candidate ingest pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from oppsync.domain.ingest_pipeline.context import CandidateBatch, PipelineContext

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


class PipelinePhase(Protocol):
    """Contract implemented by each ingestion phase."""

    name: str

    def run(self, batch: CandidateBatch, *, context: PipelineContext) -> None: ...


@dataclass(slots=True)
class IngestionPipeline:
    """Compose and execute the ordered pipeline phases.

    Phases run one after another on a single thread. The first-occurrence-wins
    dedup passes depend on that: a concurrent scan would make the surviving
    candidate depend on scheduling.
    """

    phases: Sequence[PipelinePhase] = field(default_factory=tuple)

    def with_phase(self, phase: PipelinePhase) -> IngestionPipeline:
        """Return a new pipeline appending ``phase`` at the end."""

        return IngestionPipeline(phases=(*self.phases, phase))

    def extend(self, phases: Iterable[PipelinePhase]) -> IngestionPipeline:
        """Return a new pipeline with the provided ``phases`` concatenated."""

        return IngestionPipeline(phases=(*self.phases, *tuple(phases)))

    def run(
        self, batch: CandidateBatch, *, context: PipelineContext | None = None
    ) -> CandidateBatch:
        """Execute the configured phases in-order against ``batch``."""

        active_context = context or PipelineContext()
        for phase in self.phases:
            phase.run(batch, context=active_context)
        return batch
