"""Enumeration types for rental entities."""

from enum import Enum


class PropertyType(str, Enum):
    APARTMENT = "apartment"
    HOUSE = "house"
    COMMERCIAL = "commercial"


class PropertyStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CHECK = "check"
    BANK_TRANSFER = "bank_transfer"
    ONLINE = "online"
    CREDIT_CARD = "credit_card"


class PaymentStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"
    PARTIAL = "partial"

    def can_transition_to(self, target: "PaymentStatus") -> bool:
        """Check whether a stored payment may move from this status to ``target``.

        Any status may become ``paid``; ``pending`` may also become ``overdue``
        or ``partial``. Re-applying the current status is allowed.
        """
        if target is self or target is PaymentStatus.PAID:
            return True
        return self is PaymentStatus.PENDING


class NotificationType(str, Enum):
    RENT_DUE = "rent_due"
    LEASE_EXPIRY = "lease_expiry"
    OVERDUE_PAYMENT = "overdue_payment"
    MAINTENANCE = "maintenance"
    GENERAL = "general"


class UserRole(str, Enum):
    LANDLORD = "landlord"
    MANAGER = "manager"
    ASSISTANT = "assistant"
