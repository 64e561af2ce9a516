"""Pytest configuration and fixtures."""

import os
from pathlib import Path

# CONFIG must point at the test settings before rentora_backend is imported
os.environ["CONFIG"] = str(Path(__file__).resolve().parent / "resources" / "test.yaml")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from rentora_backend.core.notifications import get_notifier  # noqa: E402
from rentora_backend.database import Base, get_db  # noqa: E402
from rentora_backend.main import app  # noqa: E402
from rentora_backend.modules.auth import crud as auth_crud  # noqa: E402
from rentora_backend.modules.auth.models import UserRole  # noqa: E402
from rentora_backend.modules.property_management import (  # noqa: E402, F401
    models as property_models,
)
from rentora_backend.modules.reporting import models as reporting_models  # noqa: E402, F401
from rentora_backend.modules.tenant_management import (  # noqa: E402, F401
    models as tenant_models,
)

from helpers import DEFAULT_PASSWORD  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class RecordingNotifier:
    """Notifier that keeps every dispatch for assertions."""

    def __init__(self):
        self.notifications: list[dict] = []
        self.credentials: list[tuple[str, str]] = []

    async def notify(self, user_id, title, message, category, link=None):
        self.notifications.append(
            {
                "user_id": user_id,
                "title": title,
                "message": message,
                "category": category,
                "link": link,
            }
        )

    async def send_temporary_credentials(self, email, temporary_password):
        self.credentials.append((email, temporary_password))


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield test_engine
    finally:
        async with test_engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
async def client(session_factory, notifier):
    """HTTP client wired to the test database and recording notifier."""

    async def _get_test_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as http:
            yield http
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Factory creating committed users of any role."""
    counter = {"n": 0}

    async def _make_user(
        role: UserRole,
        created_by=None,
        must_change_password: bool = False,
        email: str | None = None,
    ):
        counter["n"] += 1
        creator_id = created_by.id if created_by is not None else None
        user = await auth_crud.create_user(
            db,
            email=email or f"{role.value}{counter['n']}@example.com",
            password=DEFAULT_PASSWORD,
            first_name=role.value.capitalize(),
            last_name=str(counter["n"]),
            role=role,
            created_by_id=creator_id,
            parent_user_id=creator_id if role == UserRole.EMPLOYEE else None,
            must_change_password=must_change_password,
        )
        await db.commit()
        return user

    return _make_user


@pytest.fixture
async def admin(make_user):
    return await make_user(UserRole.ADMIN)


@pytest.fixture
async def agent(make_user, admin):
    return await make_user(UserRole.AGENT, created_by=admin)


@pytest.fixture
async def other_agent(make_user, admin):
    return await make_user(UserRole.AGENT, created_by=admin)


@pytest.fixture
async def employee(make_user, agent):
    return await make_user(UserRole.EMPLOYEE, created_by=agent)


@pytest.fixture
async def seeker(make_user):
    return await make_user(UserRole.SEEKER)

