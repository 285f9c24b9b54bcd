"""Pytest configuration and fixtures."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from rentdesk.clock import FixedClock
from rentdesk.config import RentDeskConfig
from rentdesk.manager import RentalManager
from rentdesk.models import Property, PropertyStatus, PropertyType, Tenant
from rentdesk.store import EntityStore, MemoryBackend


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def now() -> datetime:
    """Reference instant: a week before rent falls due on Feb 1st."""
    return datetime(2024, 1, 25, 10, 30)


@pytest.fixture
def clock(now: datetime) -> FixedClock:
    return FixedClock(now)


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(backend: MemoryBackend, clock: FixedClock) -> EntityStore:
    """Unseeded store over an in-memory backend."""
    return EntityStore(backend, clock)


@pytest.fixture
def manager(store: EntityStore) -> RentalManager:
    return RentalManager(store, RentDeskConfig())


@pytest.fixture
def make_property():
    """Factory for property records."""

    def _make(prop_id: str = "p1", **overrides) -> Property:
        fields = dict(
            id=prop_id,
            address="12 Elm St",
            city="Springfield",
            state="IL",
            zip_code="62701",
            type=PropertyType.APARTMENT,
            rent_amount=Decimal("1200"),
            status=PropertyStatus.AVAILABLE,
        )
        fields.update(overrides)
        return Property(**fields)

    return _make


@pytest.fixture
def make_tenant():
    """Factory for tenant records."""

    def _make(tenant_id: str = "t1", **overrides) -> Tenant:
        fields = dict(
            id=tenant_id,
            first_name="Ada",
            last_name="Lovelace",
            email="ada@example.com",
            property_id="p1",
            lease_start_date=date(2023, 6, 1),
            lease_end_date=date(2024, 5, 31),
            rent_amount=Decimal("1200"),
        )
        fields.update(overrides)
        return Tenant(**fields)

    return _make
