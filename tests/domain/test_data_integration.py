from __future__ import annotations

import pytest

from oppsync.domain.data_integration import SyncOpportunitiesResult, sync_opportunities
from oppsync.domain.errors import PersistenceLookupError
from oppsync.domain.reconciliation import ReconciliationStatus
from tests.helpers.opportunities import (
    FIXED_NOW,
    FailingSource,
    FakeOpportunityUnitOfWork,
    FakeSource,
    InMemoryOpportunityRepository,
    make_candidate,
)


def _run(
    repository: InMemoryOpportunityRepository,
    *sources: FakeSource | FailingSource,
) -> SyncOpportunitiesResult:
    return sync_opportunities(
        adapters=list(sources),
        unit_of_work_factory=lambda: FakeOpportunityUnitOfWork(repository),
        now_provider=lambda: FIXED_NOW,
    )


def test_two_runs_report_new_then_only_the_change() -> None:
    repository = InMemoryOpportunityRepository()
    first_batch = [make_candidate("a"), make_candidate("b")]

    first = _run(repository, FakeSource("src", first_batch))

    assert first.report.summary()["totalNew"] == 2
    assert first.report.summary()["totalUpdated"] == 0

    second = _run(
        repository,
        FakeSource("src", [make_candidate("a"), make_candidate("b", budget=75_000.0)]),
    )

    summary = second.report.summary()
    assert summary == {"totalNew": 0, "totalUpdated": 1, "totalUnchanged": 1, "totalFailed": 0}
    (updated,) = second.report.updated
    assert updated.source_url == make_candidate("b").source_url
    assert updated.changed_fields == ("budget",)


def test_repeating_identical_input_is_idempotent() -> None:
    repository = InMemoryOpportunityRepository()
    source = FakeSource("src", [make_candidate("a"), make_candidate("b")])

    _run(repository, source)
    again = _run(repository, source)

    assert again.report.is_empty
    assert again.report.unchanged_count == 2
    assert len(repository.items) == 2


def test_cross_source_mirror_is_created_once() -> None:
    repository = InMemoryOpportunityRepository()
    sam = FakeSource("sam", [make_candidate("sam-1", title="Data Platform", agency="NASA")])
    mirror = FakeSource("fbo", [make_candidate("fbo-9", title="data platform", agency="nasa")])

    result = _run(repository, sam, mirror)

    assert list(repository.items) == ["https://example.gov/opp/sam-1"]
    assert result.context.fuzzy_collapsed == 1
    assert result.collected == 2
    assert result.deduplicated == 1


def test_failed_source_still_lets_others_reconcile() -> None:
    repository = InMemoryOpportunityRepository()

    result = _run(repository, FailingSource("down"), FakeSource("up", [make_candidate("a")]))

    assert result.collection.failed_sources == ("down",)
    assert [r.status for r in result.reconciliation.resolutions] == [ReconciliationStatus.NEW]


def test_lookup_failure_propagates_to_caller() -> None:
    repository = InMemoryOpportunityRepository(fail_lookup=True)

    with pytest.raises(PersistenceLookupError):
        _run(repository, FakeSource("src", [make_candidate("a")]))


def test_report_is_stamped_with_now_provider() -> None:
    result = _run(InMemoryOpportunityRepository(), FakeSource("src", []))

    assert result.report.generated_at == FIXED_NOW
