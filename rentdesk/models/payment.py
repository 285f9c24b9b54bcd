"""Rent payment model."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from rentdesk.models.enums import PaymentMethod, PaymentStatus


@dataclass
class Payment:
    """Rent payment received (or expected) from a tenant.

    Only ``status`` changes after creation.
    """

    id: str
    tenant_id: str
    property_id: str | None
    amount: Decimal
    payment_date: date
    due_date: date
    payment_method: PaymentMethod
    status: PaymentStatus
    receipt_number: str
    notes: str = ""
    created_at: datetime | None = None
