from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from oppsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from tests.helpers.opportunities import make_candidate

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_sqlalchemy_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b


def test_repositories_unavailable_outside_context(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    uow = SqlAlchemyUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_commit_persists_across_units_of_work(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    candidate = make_candidate("kept")

    with SqlAlchemyUnitOfWork() as uow:
        uow.repositories.opportunities.create(candidate)
        uow.commit()

    with SqlAlchemyUnitOfWork() as uow:
        stored = uow.repositories.opportunities.find_by_source_urls([candidate.source_url])
        assert [o.title for o in stored] == [candidate.title]


def test_rollback_discards_pending_writes(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    kept = make_candidate("kept")
    dropped = make_candidate("dropped")

    with SqlAlchemyUnitOfWork() as uow:
        uow.repositories.opportunities.create(kept)
        uow.commit()
        uow.repositories.opportunities.create(dropped)
        uow.rollback()

    with SqlAlchemyUnitOfWork() as uow:
        stored = uow.repositories.opportunities.find_by_source_urls(
            [kept.source_url, dropped.source_url]
        )
        assert [o.source_url for o in stored] == [kept.source_url]


def test_exception_inside_context_rolls_back(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    candidate = make_candidate("aborted")

    with pytest.raises(RuntimeError), SqlAlchemyUnitOfWork() as uow:
        uow.repositories.opportunities.create(candidate)
        raise RuntimeError("abort")

    with SqlAlchemyUnitOfWork() as uow:
        assert uow.repositories.opportunities.get_by_source_url(candidate.source_url) is None
