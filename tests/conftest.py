"""Shared test configuration and fixtures.

Every test gets its own in-memory SQLite database (aiosqlite), created from
``Base.metadata`` and thrown away afterwards, so tests never share state.
"""

import uuid
from collections.abc import AsyncGenerator
from datetime import datetime
from decimal import Decimal

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import bookit.models  # noqa: F401  register every table on Base.metadata
from bookit.auth.jwt import create_access_token
from bookit.database import Base, get_db
from bookit.main import app
from bookit.models.bookable import Bookable
from bookit.models.booking import Booking, BookingItem
from bookit.models.coupon import Coupon
from bookit.models.event import Event
from bookit.models.role import Role, RoleAssignment
from bookit.models.tenant import Tenant

TENANT_ID = "tenant-a"
OTHER_TENANT_ID = "tenant-b"


# ---------------------------------------------------------------------------
# Per-test: fresh in-memory database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: tenant, factories, auth
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def tenant(db_session: AsyncSession) -> Tenant:
    tenant = Tenant(id=TENANT_ID, name="Test Tenant", mail="office@test.com", active_locker_systems=[])
    db_session.add(tenant)
    await db_session.flush()
    await db_session.refresh(tenant)
    return tenant


@pytest_asyncio.fixture
async def make_bookable(db_session: AsyncSession, tenant: Tenant):
    """Factory: ``await make_bookable("room-1", amount=2, ...)``."""

    async def _make(bookable_id: str, **overrides) -> Bookable:
        values = {
            "id": bookable_id,
            "tenant_id": TENANT_ID,
            "type": "resource",
            "title": bookable_id.replace("-", " ").title(),
            "is_bookable": True,
            "amount": 1,
            "price_eur": Decimal("0"),
            "price_category": "per-item",
        }
        values.update(overrides)
        bookable = Bookable(**values)
        db_session.add(bookable)
        await db_session.flush()
        await db_session.refresh(bookable)
        return bookable

    return _make


@pytest_asyncio.fixture
async def make_booking(db_session: AsyncSession, tenant: Tenant):
    """Factory for existing bookings: ``await make_booking({"room-1": 2}, begin, end)``."""

    async def _make(
        items: dict[str, int],
        time_begin: datetime | None = None,
        time_end: datetime | None = None,
        **overrides,
    ) -> Booking:
        values = {
            "id": uuid.uuid4().hex[:9].upper(),
            "tenant_id": TENANT_ID,
            "time_begin": time_begin,
            "time_end": time_end,
            "time_created": datetime(2029, 12, 1, 12, 0),
        }
        values.update(overrides)
        booking = Booking(
            **values,
            bookable_items=[BookingItem(bookable_id=bid, amount=amount) for bid, amount in items.items()],
        )
        db_session.add(booking)
        await db_session.flush()
        return booking

    return _make


@pytest_asyncio.fixture
async def make_coupon(db_session: AsyncSession, tenant: Tenant):
    async def _make(coupon_id: str, **overrides) -> Coupon:
        values = {
            "id": coupon_id,
            "tenant_id": TENANT_ID,
            "type": "fixed",
            "discount": Decimal("5"),
            "used_amount": 0,
        }
        values.update(overrides)
        coupon = Coupon(**values)
        db_session.add(coupon)
        await db_session.flush()
        await db_session.refresh(coupon)
        return coupon

    return _make


@pytest_asyncio.fixture
async def make_event(db_session: AsyncSession, tenant: Tenant):
    async def _make(event_id: str, max_attendees: int | None = None) -> Event:
        event = Event(id=event_id, tenant_id=TENANT_ID, name=event_id.title(), max_attendees=max_attendees)
        db_session.add(event)
        await db_session.flush()
        return event

    return _make


@pytest_asyncio.fixture
async def grant_role(db_session: AsyncSession, tenant: Tenant):
    """Factory: give ``user_id`` a role with ``permissions`` in the test tenant."""

    async def _grant(user_id: str, role_id: str, permissions: dict | None = None) -> Role:
        role = Role(id=role_id, tenant_id=TENANT_ID, name=role_id, permissions=permissions or {})
        db_session.add(role)
        await db_session.flush()
        db_session.add(RoleAssignment(role_pk=role.pk, user_id=user_id, tenant_id=TENANT_ID))
        await db_session.flush()
        return role

    return _grant


@pytest_asyncio.fixture
async def auth_headers_for():
    """Factory: Authorization headers for an arbitrary user id."""

    def _headers(user_id: str, tenant_id: str | None = TENANT_ID) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id, tenant_id)}"}

    return _headers
