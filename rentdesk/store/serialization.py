"""Conversion between entity dataclasses and stored JSON-compatible dicts.

Writing always produces snake_case keys. Reading goes through the
``*_from_dict`` functions, which are the single normalisation path for stored
records: they also accept the camelCase keys of older exports, the legacy
``isAvailable`` boolean for properties and the legacy ``fullName`` field for
tenants.
"""

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from dateutil.parser import isoparse

from rentdesk.exceptions import ValidationError
from rentdesk.models import (
    EmergencyContact,
    Notification,
    NotificationType,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Property,
    PropertyStatus,
    PropertyType,
    Tenant,
    User,
    UserRole,
)

_MISSING = object()


def to_dict(obj: Any) -> dict:
    """Convert object to dictionary."""
    if is_dataclass(obj):
        return dataclass_to_dict(obj)
    elif isinstance(obj, dict):
        return {k: serialize_value(v) for k, v in obj.items()}
    else:
        return {"value": str(obj)}


def dataclass_to_dict(obj: Any) -> dict:
    """Convert dataclass to dict with proper serialization."""
    result = {}
    for key, value in asdict(obj).items():
        result[key] = serialize_value(value)
    return result


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif is_dataclass(value) and not isinstance(value, type):
        return dataclass_to_dict(value)
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value


# -- reading -----------------------------------------------------------------


def _pick(data: dict, *names: str, default: Any = _MISSING) -> Any:
    """Return the first present key among ``names``."""
    for name in names:
        if name in data and data[name] is not None:
            return data[name]
    if default is _MISSING:
        raise ValidationError(f"Stored record {data.get('id')!r} is missing {names[0]!r}")
    return default


def parse_datetime(value: Any) -> datetime:
    """Parse a stored timestamp; timezone offsets are dropped."""
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return isoparse(str(value)).replace(tzinfo=None)
    except ValueError as exc:
        raise ValidationError(f"Invalid timestamp: {value!r}") from exc


def parse_date(value: Any) -> date:
    """Parse a stored calendar date (full timestamps keep their date part)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_datetime(value).date()


def parse_decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError(f"Invalid amount: {value!r}") from exc


def _optional_datetime(data: dict, *names: str) -> datetime | None:
    value = _pick(data, *names, default=None)
    return parse_datetime(value) if value is not None else None


def _optional_number(data: dict, *names: str) -> Any:
    value = _pick(data, *names, default=None)
    if value in (None, ""):
        return None
    return value


def property_from_dict(data: dict) -> Property:
    """Normalise a stored property record."""
    raw_status = _pick(data, "status", default=None)
    if raw_status in {s.value for s in PropertyStatus}:
        status = PropertyStatus(raw_status)
    else:
        is_available = _pick(data, "is_available", "isAvailable", default=True)
        status = PropertyStatus.AVAILABLE if is_available else PropertyStatus.OCCUPIED

    return Property(
        id=str(_pick(data, "id")),
        address=_pick(data, "address"),
        city=_pick(data, "city", default=""),
        state=_pick(data, "state", default=""),
        zip_code=_pick(data, "zip_code", "zipCode", default=""),
        type=PropertyType(str(_pick(data, "type")).lower()),
        rent_amount=parse_decimal(_pick(data, "rent_amount", "rentAmount")),
        status=status,
        tenant_id=_pick(data, "tenant_id", "tenantId", default=None),
        bedrooms=_optional_number(data, "bedrooms"),
        bathrooms=_optional_number(data, "bathrooms"),
        square_feet=_optional_number(data, "square_feet", "squareFeet", "squareFootage"),
        description=_pick(data, "description", default=""),
        created_at=_optional_datetime(data, "created_at", "createdAt"),
        updated_at=_optional_datetime(data, "updated_at", "updatedAt"),
    )


def tenant_from_dict(data: dict) -> Tenant:
    """Normalise a stored tenant record."""
    first_name = _pick(data, "first_name", "firstName", default=None)
    last_name = _pick(data, "last_name", "lastName", default=None)
    if first_name is None and last_name is None:
        full_name = _pick(data, "full_name", "fullName", default="")
        first_name, _, last_name = full_name.partition(" ")

    contact = _pick(data, "emergency_contact", "emergencyContact", default={})

    return Tenant(
        id=str(_pick(data, "id")),
        first_name=first_name or "",
        last_name=last_name or "",
        email=_pick(data, "email", default=""),
        phone=_pick(data, "phone", default=""),
        property_id=_pick(data, "property_id", "propertyId", default=None),
        lease_start_date=parse_date(_pick(data, "lease_start_date", "leaseStartDate")),
        lease_end_date=parse_date(_pick(data, "lease_end_date", "leaseEndDate")),
        rent_amount=parse_decimal(_pick(data, "rent_amount", "rentAmount", default="0")),
        security_deposit=parse_decimal(
            _pick(data, "security_deposit", "securityDeposit", default="0")
        ),
        emergency_contact=EmergencyContact(
            name=contact.get("name", ""),
            phone=contact.get("phone", ""),
            relationship=contact.get("relationship", ""),
        ),
        notes=_pick(data, "notes", default=""),
        is_active=bool(_pick(data, "is_active", "isActive", default=True)),
        created_at=_optional_datetime(data, "created_at", "createdAt"),
        updated_at=_optional_datetime(data, "updated_at", "updatedAt"),
    )


def payment_from_dict(data: dict) -> Payment:
    """Normalise a stored payment record."""
    payment_date = parse_date(_pick(data, "payment_date", "paymentDate"))
    return Payment(
        id=str(_pick(data, "id")),
        tenant_id=str(_pick(data, "tenant_id", "tenantId")),
        property_id=_pick(data, "property_id", "propertyId", default=None),
        amount=parse_decimal(_pick(data, "amount")),
        payment_date=payment_date,
        due_date=parse_date(_pick(data, "due_date", "dueDate", default=payment_date)),
        payment_method=PaymentMethod(_pick(data, "payment_method", "paymentMethod")),
        status=PaymentStatus(_pick(data, "status")),
        receipt_number=_pick(data, "receipt_number", "receiptNumber", default=""),
        notes=_pick(data, "notes", default=""),
        created_at=_optional_datetime(data, "created_at", "createdAt"),
    )


def notification_from_dict(data: dict) -> Notification:
    """Normalise a stored notification record."""
    return Notification(
        id=str(_pick(data, "id")),
        type=NotificationType(_pick(data, "type", default="general")),
        title=_pick(data, "title", default=""),
        message=_pick(data, "message", default=""),
        created_at=parse_datetime(_pick(data, "created_at", "createdAt")),
        is_read=bool(_pick(data, "is_read", "isRead", default=False)),
        recipient_id=_pick(data, "recipient_id", "recipientId", default="landlord"),
    )


def user_from_dict(data: dict) -> User:
    """Normalise a stored user record."""
    return User(
        id=str(_pick(data, "id")),
        email=_pick(data, "email"),
        name=_pick(data, "name", default=""),
        role=UserRole(_pick(data, "role", default="landlord")),
        is_active=bool(_pick(data, "is_active", "isActive", default=True)),
        created_at=_optional_datetime(data, "created_at", "createdAt"),
    )
