"""Notification model."""

from dataclasses import dataclass
from datetime import datetime

from rentdesk.models.enums import NotificationType

# Ids carrying one of these prefixes are synthesized from entity state and
# never persisted.
SYSTEM_PREFIXES = ("rent-due-", "lease-expiry-", "overdue-")


def is_system_notification_id(notification_id: str) -> bool:
    """Check whether an id belongs to a synthesized notification."""
    return notification_id.startswith(SYSTEM_PREFIXES)


@dataclass
class Notification:
    """Reminder or alert shown to the landlord."""

    id: str
    type: NotificationType
    title: str
    message: str
    created_at: datetime
    is_read: bool = False
    recipient_id: str = "landlord"

    @property
    def is_system(self) -> bool:
        return is_system_notification_id(self.id)
