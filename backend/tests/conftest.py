import asyncio
import json
import os
import sys
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")


def ensure_event_loop() -> asyncio.AbstractEventLoop:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)

    if loop.is_closed():
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)

    return loop


ensure_event_loop()

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from foodbank.domain.organizations.db_models import Organization
from foodbank.domain.users.db_models import User, UserRole
from foodbank.infra.db import Base, get_db_session
from foodbank.main import app
from foodbank.settings import settings


@dataclass
class SeededOrg:
    org_id: uuid.UUID
    admin_id: uuid.UUID
    staff_id: uuid.UUID
    admin_email: str
    staff_email: str


def principal_headers(
    org_id: uuid.UUID,
    user_id: uuid.UUID | None = None,
    role: str = "admin",
) -> dict[str, str]:
    payload = {
        "id": str(user_id or uuid.uuid4()),
        "organization_id": str(org_id),
        "role": role,
    }
    return {"X-Test-User": json.dumps(payload)}


def admin_headers(org: SeededOrg) -> dict[str, str]:
    return principal_headers(org.org_id, org.admin_id, "admin")


def staff_headers(org: SeededOrg) -> dict[str, str]:
    return principal_headers(org.org_id, org.staff_id, "staff")


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session")
def test_engine():
    db_path = Path("test.db")
    if db_path.exists():
        db_path.unlink()
    engine = create_async_engine(
        "sqlite+aiosqlite:///./test.db",
        connect_args={"check_same_thread": False, "timeout": 30},
        poolclass=StaticPool,
    )

    async def init_models() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(init_models())
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture(scope="session")
def async_session_maker(test_engine):
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest.fixture(autouse=True)
def restore_settings():
    original_testing = settings.testing
    original_app_env = settings.app_env
    original_metrics_token = settings.metrics_token
    original_auth_secret_key = settings.auth_secret_key
    yield
    settings.testing = original_testing
    settings.app_env = original_app_env
    settings.metrics_token = original_metrics_token
    settings.auth_secret_key = original_auth_secret_key


@pytest.fixture(autouse=True)
def enable_test_mode():
    settings.testing = True
    settings.app_env = "dev"
    yield


@pytest.fixture(autouse=True)
def clean_database(test_engine):
    async def truncate_tables() -> None:
        async with test_engine.begin() as conn:
            for table in reversed(Base.metadata.sorted_tables):
                await conn.execute(table.delete())

    asyncio.run(truncate_tables())
    yield


async def seed_org(session_factory, name: str) -> SeededOrg:
    now = datetime.now(timezone.utc)
    org_id = uuid.uuid4()
    slug = name.lower().replace(" ", "-")
    async with session_factory() as session:
        session.add(Organization(id=org_id, name=name, created_at=now, updated_at=now))
        await session.flush()
        admin = User(
            id=uuid.uuid4(),
            organization_id=org_id,
            email=f"admin@{slug}.example.com",
            role=UserRole.ADMIN,
            first_name="Avery",
            last_name="Admin",
            created_at=now,
            updated_at=now,
        )
        staff = User(
            id=uuid.uuid4(),
            organization_id=org_id,
            email=f"staff@{slug}.example.com",
            role=UserRole.STAFF,
            first_name="Sam",
            last_name="Staff",
            created_at=now,
            updated_at=now,
        )
        session.add_all([admin, staff])
        await session.commit()
    return SeededOrg(
        org_id=org_id,
        admin_id=admin.id,
        staff_id=staff.id,
        admin_email=admin.email,
        staff_email=staff.email,
    )


@pytest.fixture()
def org_a(async_session_maker, clean_database) -> SeededOrg:
    return asyncio.run(seed_org(async_session_maker, "Org A"))


@pytest.fixture()
def org_b(async_session_maker, clean_database) -> SeededOrg:
    return asyncio.run(seed_org(async_session_maker, "Org B"))


@pytest.fixture()
def client(async_session_maker):
    ensure_event_loop()

    async def override_db_session():
        async with async_session_maker() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    original_factory = getattr(app.state, "db_session_factory", None)
    app.state.db_session_factory = async_session_maker
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    app.state.db_session_factory = original_factory


@pytest.fixture()
def client_no_raise(async_session_maker):
    """Test client that returns HTTP responses instead of raising server exceptions."""

    async def override_db_session():
        async with async_session_maker() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    original_factory = getattr(app.state, "db_session_factory", None)
    app.state.db_session_factory = async_session_maker
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    app.state.db_session_factory = original_factory
