"""Domain models for rental management."""

from rentdesk.models.enums import (
    NotificationType,
    PaymentMethod,
    PaymentStatus,
    PropertyStatus,
    PropertyType,
    UserRole,
)
from rentdesk.models.notification import (
    SYSTEM_PREFIXES,
    Notification,
    is_system_notification_id,
)
from rentdesk.models.payment import Payment
from rentdesk.models.property import Property
from rentdesk.models.tenant import EmergencyContact, Tenant
from rentdesk.models.user import User

__all__ = [
    "SYSTEM_PREFIXES",
    "EmergencyContact",
    "Notification",
    "NotificationType",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "Property",
    "PropertyStatus",
    "PropertyType",
    "Tenant",
    "User",
    "UserRole",
    "is_system_notification_id",
]
