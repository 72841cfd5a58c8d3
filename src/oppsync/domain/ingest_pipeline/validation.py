"""Validation phase: reject candidates missing a required field."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

from oppsync.domain.errors import ValidationError
from oppsync.domain.ingest_pipeline.orchestrator import PipelinePhase

if TYPE_CHECKING:
    from oppsync.domain.ingest_pipeline.context import CandidateBatch, PipelineContext
    from oppsync.domain.model import CandidateRecord


log = getLogger(__name__)

REQUIRED_FIELDS: Final[tuple[str, ...]] = ("source_url", "title", "description", "agency")


def validate_candidate(candidate: CandidateRecord) -> CandidateRecord:
    """Return ``candidate`` unchanged or raise ``ValidationError``."""

    missing = [
        name
        for name in REQUIRED_FIELDS
        if not isinstance(getattr(candidate, name), str) or not getattr(candidate, name).strip()
    ]
    if missing:
        raise ValidationError(
            f"Candidate is missing required fields: {', '.join(missing)}",
            source_url=candidate.source_url or None,
            missing_fields=missing,
        )
    return candidate


class ValidationPhase(PipelinePhase):
    """Drop invalid candidates before they reach deduplication."""

    name: str = "validation"

    def run(self, batch: CandidateBatch, *, context: PipelineContext) -> None:
        context.collected += len(batch)
        survivors: list[CandidateRecord] = []
        for candidate in batch.candidates:
            try:
                survivors.append(validate_candidate(candidate))
            except ValidationError as exc:
                context.invalid_dropped += 1
                log.warning(
                    "Dropping invalid candidate %r from %s: %s",
                    candidate.title,
                    candidate.source_type,
                    exc,
                )
        batch.candidates[:] = survivors
