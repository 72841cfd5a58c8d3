"""Shared context structures for the ingest pipeline (batch + run state)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from oppsync.domain.model import CandidateRecord

if TYPE_CHECKING:
    from collections.abc import Iterable

    from oppsync.domain.model import ExactKey, FuzzyKey


@dataclass(slots=True)
class PipelineContext:
    """Mutable state for one run, shared across pipeline phases.

    The dedup key sets live here rather than at module level so that two runs
    never see each other's keys.
    """

    run_id: str | None = None
    collected: int = 0
    invalid_dropped: int = 0
    exact_collapsed: int = 0
    fuzzy_collapsed: int = 0
    seen_source_urls: set[ExactKey] = field(default_factory=set["ExactKey"])
    seen_fuzzy_keys: set[FuzzyKey] = field(default_factory=set["FuzzyKey"])

    @property
    def dedup_collapsed(self) -> int:
        return self.exact_collapsed + self.fuzzy_collapsed


@dataclass(slots=True)
class CandidateBatch:
    """Ordered candidates flowing through one pipeline run.

    Phases filter ``candidates`` in place; order always matches adapter
    registration order, then emission order within an adapter.
    """

    candidates: list[CandidateRecord] = field(default_factory=list[CandidateRecord])

    @classmethod
    def of(cls, candidates: Iterable[CandidateRecord]) -> CandidateBatch:
        return cls(candidates=list(candidates))

    def __len__(self) -> int:
        return len(self.candidates)
