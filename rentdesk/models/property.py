"""Rental property model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from rentdesk.models.enums import PropertyStatus, PropertyType


@dataclass
class Property:
    """A rentable unit.

    ``status`` is authoritative; ``is_available`` is derived from it. The
    ``tenant_id`` binding is maintained by the occupancy reconciler and is set
    exactly when ``status`` is ``OCCUPIED``.
    """

    id: str
    address: str
    city: str
    state: str
    zip_code: str
    type: PropertyType
    rent_amount: Decimal
    status: PropertyStatus = PropertyStatus.AVAILABLE
    tenant_id: str | None = None
    bedrooms: int | None = None
    bathrooms: float | None = None
    square_feet: float | None = None
    description: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_available(self) -> bool:
        return self.status is PropertyStatus.AVAILABLE

    @property
    def is_occupied(self) -> bool:
        return self.status is PropertyStatus.OCCUPIED

    @property
    def display_address(self) -> str:
        return f"{self.address}, {self.city}" if self.city else self.address
