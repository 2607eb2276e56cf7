import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from iam_core.adapter.services.memory_rate_limit_store import InMemoryRateLimitStore
from iam_core.adapter.services.bcrypt_credential_verifier import BcryptCredentialVerifier
from iam_core.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from iam_core.app.services.rate_limiter import RateLimiter
from iam_core.depends import (
    get_credential_verifier,
    get_email_notifier,
    get_rate_limiter,
    get_unit_of_work,
)
from tests.fixtures.seed import seed_account


class RecordingEmailNotifier:
    def __init__(self):
        self.outbox = []

    async def send(self, to: str, subject: str, body: str) -> None:
        self.outbox.append({"to": to, "subject": subject, "body": body})

    def last_token(self) -> str:
        return self.outbox[-1]["body"].split("token=")[1].split()[0]


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def alice(db_session):
    return await seed_account(db_session, "alice")


@pytest_asyncio.fixture
async def bob(db_session):
    return await seed_account(db_session, "bob")


@pytest.fixture
def rate_limiter():
    return RateLimiter(InMemoryRateLimitStore())


@pytest.fixture
def outbox():
    return RecordingEmailNotifier()


@pytest_asyncio.fixture
async def client(db_session, rate_limiter, outbox):
    from iam_core.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)
    verifier = BcryptCredentialVerifier(rounds=4)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_email_notifier] = lambda: outbox
    app.dependency_overrides[get_credential_verifier] = lambda: verifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
