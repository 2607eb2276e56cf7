import pytest
from httpx import ASGITransport, AsyncClient

from config import ApplicationConfig
from iam_core.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from iam_core.api.app import create_app
from iam_core.app.services.rate_limit_store import (
    IRateLimitStore,
    RateLimitStoreUnavailable,
)
from iam_core.app.services.rate_limiter import RateLimiter
from iam_core.depends import get_rate_limiter, get_unit_of_work
from tests.utils.json_compare import error_code


class UnavailableStore(IRateLimitStore):
    async def consume(self, key, capacity, refill_tokens, refill_period_ms, cost=1):
        raise RateLimitStoreUnavailable("connection refused")


@pytest.mark.asyncio
async def test_login_is_limited_per_ip(client: AsyncClient, alice):
    payload = {"email": "a@x.com", "password": "wrong"}

    statuses = [
        (await client.post("/auth/login", json=payload)).status_code for _ in range(5)
    ]
    limited = await client.post("/auth/login", json=payload)

    assert statuses == [401] * 5
    assert limited.status_code == 429
    assert error_code(limited.json()) == "RATE_LIMIT_EXCEEDED"
    assert int(limited.headers["Retry-After"]) >= 1


@pytest.mark.asyncio
async def test_forwarded_header_does_not_split_the_budget(client: AsyncClient, alice):
    payload = {"email": "a@x.com", "password": "wrong"}

    statuses = [
        (
            await client.post(
                "/auth/login", json=payload, headers={"X-Forwarded-For": f"10.0.0.{i}"}
            )
        ).status_code
        for i in range(6)
    ]

    assert statuses == [401] * 5 + [429]


@pytest.mark.asyncio
async def test_limits_are_per_client_ip_behind_trusted_proxy(
    client: AsyncClient, alice, monkeypatch
):
    monkeypatch.setattr(ApplicationConfig, "RATE_LIMIT_TRUSTED_PROXIES", ["127.0.0.1"])
    payload = {"email": "a@x.com", "password": "wrong"}
    for _ in range(5):
        await client.post("/auth/login", json=payload, headers={"X-Forwarded-For": "1.1.1.1"})

    blocked = await client.post(
        "/auth/login", json=payload, headers={"X-Forwarded-For": "1.1.1.1"}
    )
    other = await client.post(
        "/auth/login", json=payload, headers={"X-Forwarded-For": "2.2.2.2"}
    )

    assert blocked.status_code == 429
    assert other.status_code == 401


@pytest.mark.asyncio
async def test_allowlisted_ip_gets_larger_budget(client: AsyncClient, alice, monkeypatch):
    monkeypatch.setattr(ApplicationConfig, "RATE_LIMIT_WHITELIST", ["127.0.0.1"])
    payload = {"email": "a@x.com", "password": "wrong"}

    statuses = [
        (await client.post("/auth/login", json=payload)).status_code for _ in range(8)
    ]

    assert 429 not in statuses


@pytest.mark.asyncio
async def test_allowlist_cannot_be_claimed_through_forwarded_header(
    client: AsyncClient, alice, monkeypatch
):
    monkeypatch.setattr(ApplicationConfig, "RATE_LIMIT_WHITELIST", ["9.9.9.9"])
    payload = {"email": "a@x.com", "password": "wrong"}

    statuses = [
        (
            await client.post(
                "/auth/login", json=payload, headers={"X-Forwarded-For": "9.9.9.9"}
            )
        ).status_code
        for _ in range(6)
    ]

    assert statuses[-1] == 429


@pytest.mark.asyncio
async def test_store_outage_fails_closed_on_sensitive_routes_and_open_globally(
    db_session,
):
    app = create_app(ApplicationConfig)
    app.dependency_overrides[get_unit_of_work] = lambda: SqlAlchemyUnitOfWork(db_session)
    app.dependency_overrides[get_rate_limiter] = lambda: RateLimiter(UnavailableStore())

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as degraded:
        login = await degraded.post(
            "/auth/login", json={"email": "a@x.com", "password": "pw123"}
        )
        whoami = await degraded.get("/auth/whoami")

    assert login.status_code == 503
    assert error_code(login.json()) == "SERVICE_UNAVAILABLE"
    assert "Retry-After" not in login.headers
    assert whoami.status_code == 401


@pytest.mark.asyncio
async def test_global_budget_applies_to_every_route(monkeypatch, rate_limiter, db_session):
    monkeypatch.setattr(ApplicationConfig, "RATE_LIMIT_DEFAULT_CAPACITY", 2)
    monkeypatch.setattr(ApplicationConfig, "RATE_LIMIT_DEFAULT_REFILL", 2)
    app = create_app(ApplicationConfig)
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_unit_of_work] = lambda: SqlAlchemyUnitOfWork(db_session)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        statuses = [(await ac.get("/auth/whoami")).status_code for _ in range(3)]
        health = await ac.get("/health")

    assert statuses == [401, 401, 429]
    assert health.status_code == 200
