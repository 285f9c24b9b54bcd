"""Tenant model."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal


@dataclass
class EmergencyContact:
    """Person to call on the tenant's behalf."""

    name: str = ""
    phone: str = ""
    relationship: str = ""


@dataclass
class Tenant:
    """A person leasing (or having leased) a property."""

    id: str
    first_name: str
    last_name: str
    email: str
    property_id: str | None
    lease_start_date: date
    lease_end_date: date
    rent_amount: Decimal
    phone: str = ""
    security_deposit: Decimal = Decimal("0")
    emergency_contact: EmergencyContact = field(default_factory=EmergencyContact)
    notes: str = ""
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
