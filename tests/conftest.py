"""Pytest fixtures for tracker tests."""

from __future__ import annotations

import itertools
from datetime import datetime
from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskpay.database import create_schema, get_engine, make_session_factory
from taskpay.domain import AccountStatus, ActorContext, Snapshot, User, UserRole
from taskpay.persistence import InMemoryRepository, SqlAlchemyRepository, demo_snapshot
from taskpay.persistence.fixtures import ADMIN_ID, EMPLOYEE_ID
from taskpay.services import TrackerService

from factories import NOW


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def id_factory() -> Callable[[str], str]:
    """Deterministic ids: t-1, r-2, ..."""
    counter = itertools.count(1)
    return lambda prefix: f"{prefix}-{next(counter)}"


@pytest.fixture
def base_snapshot(now) -> Snapshot:
    return demo_snapshot(now)


@pytest.fixture
def admin(base_snapshot) -> User:
    return base_snapshot.find_user(ADMIN_ID)


@pytest.fixture
def employee(base_snapshot) -> User:
    return base_snapshot.find_user(EMPLOYEE_ID)


@pytest.fixture
def admin_ctx(admin, now) -> ActorContext:
    return ActorContext.for_user(admin, now=now)


@pytest.fixture
def employee_ctx(employee, now) -> ActorContext:
    return ActorContext.for_user(employee, now=now)


@pytest.fixture
def pending_employee() -> User:
    return User(
        id="u-pending",
        name="Pat Pending",
        email="pat@fnds.com",
        role=UserRole.EMPLOYEE,
        contact="+63 900 000 0000",
        account_status=AccountStatus.PENDING,
    )


@pytest.fixture
def repository(base_snapshot) -> InMemoryRepository:
    return InMemoryRepository(base_snapshot)


@pytest.fixture
def tracker(repository, id_factory) -> TrackerService:
    service = TrackerService(repository, id_factory=id_factory)
    yield service
    service.close()


@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory over a fresh SQLite file database."""
    engine = get_engine(f"sqlite+aiosqlite:///{tmp_path / 'taskpay.db'}")
    await create_schema(engine)
    yield make_session_factory(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def sql_repository(session_factory, base_snapshot) -> SqlAlchemyRepository:
    repo = SqlAlchemyRepository(session_factory)
    for collection in (base_snapshot.users, base_snapshot.profiles, base_snapshot.tasks):
        for entity in collection:
            await repo.save(entity)
    return repo
