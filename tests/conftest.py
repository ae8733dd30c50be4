"""
Pytest configuration for EventDesk backend tests.

Each test gets its own SQLite database file, so tests never share state.
"""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-at-least-32-chars")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import uuid
from datetime import UTC, datetime, timedelta

import httpx
import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from eventdesk.core.database import get_db
from eventdesk.core.dependencies import get_redis
from eventdesk.core.security import create_access_token, create_invitation_token, hash_password
from eventdesk.main import app
from eventdesk.models import (
    Base,
    Event,
    GlobalRole,
    Invitation,
    InvitationStatus,
    PricingPlan,
    Tenant,
    TenantKind,
    TenantMember,
    TenantRole,
    User,
)
from eventdesk.workers.email_tasks import send_invitation_email

BASE_URL = "http://testserver"
PASSWORD = "password123"


def pytest_configure(config):
    """Configure pytest-asyncio mode."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


def unique_email(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}@example.com"


def unique_slug(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:6]}"


def break_store(monkeypatch, session: AsyncSession) -> None:
    """Make every query on ``session`` fail the way a lost database connection does."""

    async def execute(*args, **kwargs):
        raise OperationalError("SELECT", {}, ConnectionError("database is unavailable"))

    monkeypatch.setattr(session, "execute", execute)


# ---------------------------------------------------------------------------
# Redis
# ---------------------------------------------------------------------------

class InMemoryRedis:
    """The handful of async Redis commands the auth flow uses."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}

    async def exists(self, key: str) -> int:
        return int(key in self.store)

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.store[key] = value
        return True

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def delete(self, key: str) -> int:
        return int(self.store.pop(key, None) is not None)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'eventdesk.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def redis():
    return InMemoryRedis()


@pytest.fixture(autouse=True)
def queued_emails(monkeypatch):
    """Capture invitation emails instead of talking to the Celery broker."""
    sent: list[dict] = []
    monkeypatch.setattr(send_invitation_email, "delay", lambda **kwargs: sent.append(kwargs))
    return sent


@pytest.fixture
async def client(session_factory, redis):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_get_redis():
        return redis

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL, timeout=30.0) as ac:
        yield ac
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

async def make_user(
    db: AsyncSession,
    email: str | None = None,
    roles: list[str] | None = None,
    pricing_plan: PricingPlan | None = PricingPlan.free,
    display_name: str = "Test User",
) -> User:
    user = User(
        email=email or unique_email("user"),
        password_hash=hash_password(PASSWORD),
        display_name=display_name,
        roles=roles if roles is not None else [GlobalRole.user.value],
        pricing_plan=pricing_plan,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_admin(db: AsyncSession, super_admin: bool = False) -> User:
    role = GlobalRole.super_admin if super_admin else GlobalRole.admin
    return await make_user(
        db, email=unique_email("admin"), roles=[role.value], pricing_plan=PricingPlan.unlimited
    )


async def make_tenant(
    db: AsyncSession,
    owner: User,
    kind: TenantKind = TenantKind.organization,
    name: str = "Acme Events",
) -> Tenant:
    tenant = Tenant(kind=kind, name=name, slug=unique_slug(kind.value), owner_id=owner.id)
    db.add(tenant)
    await db.commit()
    await db.refresh(tenant)
    return tenant


async def add_member(
    db: AsyncSession, tenant: Tenant, user: User, role: TenantRole = TenantRole.editor
) -> TenantMember:
    member = TenantMember(tenant_id=tenant.id, user_id=user.id, role=role)
    db.add(member)
    await db.commit()
    await db.refresh(member)
    return member


async def make_event(db: AsyncSession, tenant: Tenant, name: str = "Launch Party") -> Event:
    event = Event(
        tenant_id=tenant.id,
        name=name,
        slug=unique_slug("event"),
        start_date=datetime.now(UTC) + timedelta(days=30),
    )
    db.add(event)
    await db.commit()
    await db.refresh(event)
    return event


async def make_invitation(
    db: AsyncSession,
    tenant: Tenant,
    email: str,
    role: TenantRole = TenantRole.editor,
    expires_in: timedelta = timedelta(days=7),
    status: InvitationStatus = InvitationStatus.pending,
) -> Invitation:
    invitation = Invitation(
        tenant_id=tenant.id,
        email=email,
        role=role,
        status=status,
        token=create_invitation_token(),
        expires_at=datetime.now(UTC) + expires_in,
        created_at=datetime.now(UTC),
    )
    db.add(invitation)
    await db.commit()
    await db.refresh(invitation)
    return invitation


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}
