"""Intra-run deduplication phases.

Two sequential passes, each a single order-preserving scan where the first
occurrence of a key wins:

1. exact pass keyed on the source URL;
2. fuzzy pass keyed on ``lower(title)-lower(agency)``, which merges the same
   real-world opportunity mirrored by different sources under different URLs.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from oppsync.domain.ingest_pipeline.orchestrator import PipelinePhase
from oppsync.domain.model import exact_key, fuzzy_key

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable

    from oppsync.domain.ingest_pipeline.context import CandidateBatch, PipelineContext
    from oppsync.domain.model import CandidateRecord


log = getLogger(__name__)


def keep_first[TKey: Hashable](
    candidates: list[CandidateRecord],
    *,
    key_for: Callable[[CandidateRecord], TKey | None],
    seen: set[TKey],
) -> int:
    """Filter ``candidates`` in place, keeping the first candidate per key.

    Candidates whose key is ``None`` are always kept. ``seen`` is updated with
    every key kept. Returns the number of dropped candidates.
    """

    survivors: list[CandidateRecord] = []
    dropped = 0
    for candidate in candidates:
        key = key_for(candidate)
        if key is None:
            survivors.append(candidate)
            continue
        if key in seen:
            dropped += 1
            log.debug("Dropping duplicate %s (key=%r)", candidate.source_url, key)
            continue
        seen.add(key)
        survivors.append(candidate)

    candidates[:] = survivors
    return dropped


class ExactDeduplicationPhase(PipelinePhase):
    """Remove candidates repeating a source URL already seen in this run."""

    name: str = "exact-deduplication"

    def run(self, batch: CandidateBatch, *, context: PipelineContext) -> None:
        dropped = keep_first(batch.candidates, key_for=exact_key, seen=context.seen_source_urls)
        context.exact_collapsed += dropped
        if dropped:
            log.info("Exact deduplication dropped %d candidates", dropped)


class FuzzyDeduplicationPhase(PipelinePhase):
    """Remove candidates whose title and agency match one already kept."""

    name: str = "fuzzy-deduplication"

    def run(self, batch: CandidateBatch, *, context: PipelineContext) -> None:
        dropped = keep_first(batch.candidates, key_for=fuzzy_key, seen=context.seen_fuzzy_keys)
        context.fuzzy_collapsed += dropped
        if dropped:
            log.info("Cross-source deduplication dropped %d candidates", dropped)
