"""Candidate ingestion pipeline.

Collection fans out over every source adapter; the resulting batch then flows
through explicit, testable phases (validation, exact dedup, fuzzy dedup) that
share a per-run ``PipelineContext``.
"""

from __future__ import annotations

from .collection import CollectionOrchestrator, CollectionOutcome, CollectionResult
from .context import CandidateBatch, PipelineContext
from .deduplication import ExactDeduplicationPhase, FuzzyDeduplicationPhase
from .orchestrator import IngestionPipeline, PipelinePhase
from .runner import default_pipeline, run_ingest_pipeline
from .validation import ValidationPhase, validate_candidate

__all__ = [
    "CandidateBatch",
    "CollectionOrchestrator",
    "CollectionOutcome",
    "CollectionResult",
    "ExactDeduplicationPhase",
    "FuzzyDeduplicationPhase",
    "IngestionPipeline",
    "PipelineContext",
    "PipelinePhase",
    "ValidationPhase",
    "default_pipeline",
    "run_ingest_pipeline",
    "validate_candidate",
]
