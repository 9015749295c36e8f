"""Shared pytest fixtures for all test suites."""

from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from sqlalchemy import Engine, create_engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from backend.app.db.engine import (
    TenantSession,
    create_async_session_factory,
    create_session_factory,
)
from backend.app.db.models import Activity, Base, Course, Environment, Template
from backend.app.db.scoping import TenantScope
from backend.app.models.enums import ActivityType, CourseStatus

ENV_A = 1
ENV_B = 2


class RecordingMetrics:
    """Stand-in for PrometheusScopeMetrics that records calls."""

    def __init__(self) -> None:
        self.applied: list[tuple[str, str]] = []
        self.bypassed: list[str] = []
        self.detections: list[str] = []

    def inc_applied(self, entity: str, mode: str) -> None:
        self.applied.append((entity, mode))

    def inc_bypassed(self, entity: str) -> None:
        self.bypassed.append(entity)

    def inc_detection(self, outcome: str) -> None:
        self.detections.append(outcome)


def seed_catalog(session: Session) -> None:
    """Two environments, one course and template each, plus global rows.

    Courses: 1 -> env A, 2 -> env B, 3 -> global.
    Templates: 1 -> global, 2 -> env A, 3 -> env B.
    """
    session.add_all(
        [
            Environment(
                id=ENV_A,
                name="Acme Academy",
                primary_domain="learn.acme.test",
                additional_domains=["edu.acme.test"],
            ),
            Environment(id=ENV_B, name="Beta School", primary_domain="beta.test"),
        ]
    )
    session.flush()
    session.add_all(
        [
            Template(id=1, name="Starter", slug="starter", environment_id=None),
            Template(id=2, name="Acme Blueprint", slug="acme-blueprint-1", environment_id=ENV_A),
            Template(id=3, name="Beta Blueprint", slug="beta-blueprint-2", environment_id=ENV_B),
            Course(
                id=1,
                title="Onboarding",
                slug="onboarding-1",
                status=CourseStatus.published,
                environment_id=ENV_A,
            ),
            Course(id=2, title="Compliance", slug="compliance-2", environment_id=ENV_B),
            Course(
                id=3,
                title="Platform Tour",
                slug="platform-tour",
                status=CourseStatus.published,
                environment_id=None,
            ),
        ]
    )
    session.flush()
    session.add_all(
        [
            Activity(id=1, course_id=1, title="Welcome", type=ActivityType.video, order=0),
            Activity(id=2, course_id=1, title="Check-in", type=ActivityType.quiz, order=1),
            Activity(id=3, course_id=2, title="Policy", type=ActivityType.documentation, order=0),
            Activity(id=4, course_id=3, title="Tour", type=ActivityType.lesson, order=0),
        ]
    )
    session.commit()


@pytest.fixture
def metrics() -> RecordingMetrics:
    return RecordingMetrics()


@pytest.fixture
def scope(metrics: RecordingMetrics) -> TenantScope:
    """Scope over every model with an environment_id column."""
    return TenantScope.for_base(Base, "environment_id", metrics=metrics)  # type: ignore[arg-type]


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine with the schema and seed data."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        seed_catalog(session)

    yield engine

    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine, scope: TenantScope) -> sessionmaker[Session]:
    """Session factory with automatic tenant scoping installed."""
    return create_session_factory(engine, scope)


@pytest_asyncio.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory aiosqlite engine with the schema and seed data."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSession(engine) as session:
        await session.run_sync(seed_catalog)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def async_session_factory(
    async_engine: AsyncEngine, scope: TenantScope
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Async session factory whose sessions are tenant scoped."""
    factory = create_async_session_factory(async_engine, scope)

    yield factory

    scope.uninstall(TenantSession)
