import pytest
from httpx import AsyncClient
from sqlmodel import select

from iam_core.api.utils.jwt import parse_jwt
from iam_core.domain.entities import AuditEvent, LoginTicket
from tests.fixtures.auth_flow import bearer, login, request_ticket
from tests.fixtures.seed import seed_account
from tests.utils.json_compare import error_code, exclude_keys


@pytest.mark.asyncio
async def test_two_step_login_end_to_end(client: AsyncClient, alice):
    """
    Given a@x.com / pw123 is an ADMIN of active company C1
    When the user logs in and picks C1
    Then the access token carries companyId=C1 and role=ADMIN
    """
    step_one = await request_ticket(client, "a@x.com", "pw123")

    assert step_one["user"]["email"] == "a@x.com"
    assert [c["business_name"] for c in step_one["companies"]] == ["C1"]
    assert step_one["companies"][0]["role"] == "ADMIN"
    assert step_one["login_ticket"]

    response = await client.post(
        "/auth/login-with-company",
        json={
            "email": "a@x.com",
            "company_id": alice.company_id("C1"),
            "login_ticket": step_one["login_ticket"],
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "Bearer"
    assert data["refresh_token"]
    assert data["role"] == "ADMIN"

    claims = parse_jwt(data["access_token"])
    assert claims is not None
    assert str(claims.user_id) == alice.user_id
    assert str(claims.company_id) == alice.company_id("C1")
    assert claims.role == "ADMIN"
    assert claims.email == "a@x.com"

    whoami = await client.get("/auth/whoami", headers=bearer(data["access_token"]))
    assert whoami.status_code == 200
    assert exclude_keys(whoami.json(), {"user_id", "company_id"}) == {
        "full_name": "Alice Example",
        "email": "a@x.com",
        "email_validated": True,
        "status": "active",
        "company_name": "C1",
        "role": "ADMIN",
    }


@pytest.mark.asyncio
async def test_ticket_cannot_be_reused(client: AsyncClient, alice):
    step_one = await request_ticket(client, "a@x.com", "pw123")
    payload = {
        "email": "a@x.com",
        "company_id": alice.company_id("C1"),
        "login_ticket": step_one["login_ticket"],
    }

    first = await client.post("/auth/login-with-company", json=payload)
    second = await client.post("/auth/login-with-company", json=payload)

    assert first.status_code == 200
    assert second.status_code == 401
    assert error_code(second.json()) == "INVALID_TICKET"


@pytest.mark.asyncio
async def test_ticket_bound_to_email(client: AsyncClient, alice, bob):
    step_one = await request_ticket(client, "a@x.com", "pw123")

    response = await client.post(
        "/auth/login-with-company",
        json={
            "email": "bob@x.com",
            "company_id": bob.company_id("Acme"),
            "login_ticket": step_one["login_ticket"],
        },
    )

    assert response.status_code == 401
    assert error_code(response.json()) == "INVALID_TICKET"


@pytest.mark.asyncio
async def test_rejected_company_leaves_ticket_unconsumed(
    client: AsyncClient, alice, db_session
):
    step_one = await request_ticket(client, "a@x.com", "pw123")
    payload = {"email": "a@x.com", "login_ticket": step_one["login_ticket"]}

    inactive = await client.post(
        "/auth/login-with-company", json={**payload, "company_id": alice.company_id("C2")}
    )
    blocked = await client.post(
        "/auth/login-with-company", json={**payload, "company_id": alice.company_id("C3")}
    )
    assert inactive.status_code == 401
    assert error_code(inactive.json()) == "INVALID_CREDENTIALS"
    assert blocked.status_code == 401

    ticket = (
        await db_session.exec(
            select(LoginTicket)
            .where(LoginTicket.id == step_one["login_ticket"])
            .execution_options(populate_existing=True)
        )
    ).one()
    assert ticket.used is False

    ok = await client.post(
        "/auth/login-with-company", json={**payload, "company_id": alice.company_id("C1")}
    )
    assert ok.status_code == 200


@pytest.mark.asyncio
async def test_invalid_credentials_do_not_enumerate(client: AsyncClient, alice, db_session):
    await seed_account(db_session, "suspended")

    unknown = await client.post(
        "/auth/login", json={"email": "nobody@x.com", "password": "pw123"}
    )
    wrong = await client.post("/auth/login", json={"email": "a@x.com", "password": "nope"})
    suspended = await client.post(
        "/auth/login", json={"email": "suspended@x.com", "password": "pw123"}
    )

    for response in (unknown, wrong, suspended):
        assert response.status_code == 401
    assert unknown.json() == wrong.json() == suspended.json()

    failures = (
        await db_session.exec(select(AuditEvent).where(AuditEvent.action == "login_failure"))
    ).all()
    assert sorted(e.event_metadata["reason"] for e in failures) == [
        "password mismatch",
        "user status suspended",
    ]


@pytest.mark.asyncio
async def test_email_lookup_is_case_insensitive(client: AsyncClient, alice):
    step_one = await request_ticket(client, "A@X.com", "pw123")

    assert step_one["companies"][0]["business_name"] == "C1"


@pytest.mark.asyncio
async def test_whoami_requires_valid_token(client: AsyncClient, alice):
    missing = await client.get("/auth/whoami")
    garbage = await client.get("/auth/whoami", headers=bearer("not-a-jwt"))

    assert missing.status_code == 401
    assert garbage.status_code == 401
    assert error_code(garbage.json()) == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_login_returns_companies_for_second_account(client: AsyncClient, bob):
    data = await login(client, bob, "Acme")

    assert data["role"] == "OWNER"
