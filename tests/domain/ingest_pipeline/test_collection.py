from __future__ import annotations

import asyncio
import logging

import pytest

from oppsync.domain.errors import AdapterError
from oppsync.domain.ingest_pipeline import CollectionOrchestrator
from tests.helpers.opportunities import FailingSource, FakeSource, make_candidate


def test_candidates_follow_registration_order_not_completion_order() -> None:
    slow = FakeSource("slow", [make_candidate("s1"), make_candidate("s2")], delay=0.05)
    fast = FakeSource("fast", [make_candidate("f1")])

    result = asyncio.run(CollectionOrchestrator(adapters=[slow, fast]).collect())

    assert [c.source_url.rsplit("/", 1)[-1] for c in result.candidates] == ["s1", "s2", "f1"]
    assert result.succeeded_sources == ("slow", "fast")


def test_failing_adapter_does_not_affect_others(caplog: pytest.LogCaptureFixture) -> None:
    ok = FakeSource("ok", [make_candidate("a")])
    failing = FailingSource("failing", AdapterError("timeout", source="failing"))

    with caplog.at_level(logging.INFO):
        result = asyncio.run(CollectionOrchestrator(adapters=[failing, ok]).collect())

    assert [c.source_url for c in result.candidates] == [make_candidate("a").source_url]
    assert result.failed_sources == ("failing",)
    failed = result.outcomes[0]
    assert failed.succeeded is False
    assert isinstance(failed.error, AdapterError)
    assert "Failed to collect from failing: timeout" in caplog.text
    assert "Successfully collected 1 opportunities from ok" in caplog.text


def test_unexpected_exception_is_captured_like_adapter_error() -> None:
    broken = FailingSource("broken", RuntimeError("bug"))
    ok = FakeSource("ok", [make_candidate("a")])

    result = asyncio.run(CollectionOrchestrator(adapters=[broken, ok]).collect())

    assert result.failed_sources == ("broken",)
    assert isinstance(result.outcomes[0].error, RuntimeError)
    assert len(result.candidates) == 1


def test_all_adapters_failing_yields_empty_result() -> None:
    adapters = [FailingSource("a"), FailingSource("b")]

    result = asyncio.run(CollectionOrchestrator(adapters=adapters).collect())

    assert result.candidates == []
    assert result.failed_sources == ("a", "b")


def test_no_adapters_yields_empty_result() -> None:
    result = asyncio.run(CollectionOrchestrator().collect())

    assert result.outcomes == ()
    assert result.candidates == []


def test_every_adapter_is_invoked_once() -> None:
    sources = [FakeSource(f"s{i}", [make_candidate(str(i))]) for i in range(3)]

    asyncio.run(CollectionOrchestrator(adapters=sources).collect())

    assert [source.calls for source in sources] == [1, 1, 1]
