"""Integration tests for environment-scoped catalog routes."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.app.api.tenant import get_resolver
from backend.app.config import Settings
from backend.app.db.engine import get_session
from backend.app.main import app
from backend.app.tenancy.detection import EnvironmentResolver
from backend.app.tenancy.domains import DomainRegistry

ACME = {"Origin": "https://learn.acme.test"}
BETA = {"Origin": "https://beta.test"}


@pytest_asyncio.fixture
async def client(
    async_session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Client whose requests use the seeded test database."""

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with async_session_factory() as session:
            yield session

    def override_resolver() -> EnvironmentResolver:
        return EnvironmentResolver(Settings(), DomainRegistry(ttl_seconds=300))

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_resolver] = override_resolver

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_courses_are_scoped_to_detected_environment(client: AsyncClient) -> None:
    acme = await client.get("/courses", headers=ACME)
    beta = await client.get("/courses", headers=BETA)

    assert acme.status_code == 200
    assert {c["id"] for c in acme.json()} == {1, 3}
    assert {c["id"] for c in beta.json()} == {2, 3}


@pytest.mark.asyncio
async def test_undetected_environment_sees_all_courses(client: AsyncClient) -> None:
    response = await client.get("/courses")

    assert {c["id"] for c in response.json()} == {1, 2, 3}


@pytest.mark.asyncio
async def test_courses_status_filter(client: AsyncClient) -> None:
    response = await client.get("/courses", params={"status": "draft"}, headers=BETA)

    assert [c["id"] for c in response.json()] == [2]


@pytest.mark.asyncio
async def test_courses_rejects_bad_query(client: AsyncClient) -> None:
    assert (await client.get("/courses", params={"status": "gone"})).status_code == 422
    assert (await client.get("/courses", params={"limit": 0})).status_code == 422


@pytest.mark.asyncio
async def test_course_of_other_environment_is_not_found(client: AsyncClient) -> None:
    response = await client.get("/courses/2", headers=ACME)

    assert response.status_code == 404
    assert response.json()["detail"] == "Course not found"


@pytest.mark.asyncio
async def test_course_detail(client: AsyncClient) -> None:
    response = await client.get("/courses/1", headers={"Referer": "https://edu.acme.test/x"})

    assert response.status_code == 200
    body = response.json()
    assert body["slug"] == "onboarding-1"
    assert body["display_slug"] == "onboarding"
    assert body["environment_id"] == 1


@pytest.mark.asyncio
async def test_course_activities(client: AsyncClient) -> None:
    response = await client.get("/courses/1/activities", headers=ACME)

    assert response.status_code == 200
    assert [(a["title"], a["type"]) for a in response.json()] == [
        ("Welcome", "video"),
        ("Check-in", "quiz"),
    ]
    assert (await client.get("/courses/1/activities", headers=BETA)).status_code == 404


@pytest.mark.asyncio
async def test_templates_are_scoped(client: AsyncClient) -> None:
    response = await client.get("/templates", headers=ACME)

    assert [t["name"] for t in response.json()] == ["Acme Blueprint", "Starter"]


@pytest.mark.asyncio
async def test_environment_endpoint(client: AsyncClient) -> None:
    response = await client.get("/environment", headers=BETA)

    assert response.json() == {
        "id": 2,
        "name": "Beta School",
        "primary_domain": "beta.test",
        "detected_domain": "beta.test",
        "outcome": "matched",
    }


@pytest.mark.asyncio
async def test_environment_endpoint_without_match(client: AsyncClient) -> None:
    response = await client.get("/environment", headers={"Origin": "https://unknown.test"})

    assert response.status_code == 200
    assert response.json() is None
