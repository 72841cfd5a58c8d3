"""Reconciliation of deduplicated candidates against persisted opportunities.

Flow:
1) batch-look up stored opportunities by exact key
2) classify each candidate as new, updated (with changed fields) or unchanged
3) create/update per record, each write isolated from the others
"""

from __future__ import annotations

from .contracts import (
    CandidateResolution,
    ReconciliationResult,
    ReconciliationStatus,
    WriteStatus,
)
from .diff import COMPARABLE_FIELDS, DiffResult, changed_values, diff_candidate
from .engine import ReconciliationEngine, classify

__all__ = [
    "COMPARABLE_FIELDS",
    "CandidateResolution",
    "DiffResult",
    "ReconciliationEngine",
    "ReconciliationResult",
    "ReconciliationStatus",
    "WriteStatus",
    "changed_values",
    "classify",
    "diff_candidate",
]
