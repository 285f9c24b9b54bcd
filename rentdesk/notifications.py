"""System notifications derived from entity state, merged with stored ones."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from rentdesk.aggregation import TemporalAggregator, days_between
from rentdesk.config import DueWindows
from rentdesk.models import (
    Notification,
    NotificationType,
    Payment,
    PaymentStatus,
    Tenant,
    is_system_notification_id,
)


class NotificationSynthesizer:
    """Build rent-due, lease-expiry and overdue notifications on demand.

    Output is a pure function of ``(now, tenants, payments)``. Ids are
    ``rent-due-<tenant id>``, ``lease-expiry-<tenant id>`` and
    ``overdue-<payment id>``, so regenerating yields the same ids.
    """

    def __init__(self, windows: DueWindows | None = None) -> None:
        self.windows = windows or DueWindows()
        self._aggregator = TemporalAggregator(self.windows)

    def generate(self, now: datetime, tenants: list[Tenant], payments: list[Payment]) -> list[Notification]:
        notifications: list[Notification] = []
        active = [t for t in tenants if t.is_active]

        due_date = self._aggregator.next_rent_due_date(now)
        days_until_due = days_between(now, due_date)
        if 0 <= days_until_due <= self.windows.rent_due_urgent_days:
            for tenant in active:
                notifications.append(
                    Notification(
                        id=f"rent-due-{tenant.id}",
                        type=NotificationType.RENT_DUE,
                        title="Rent Due Soon",
                        message=f"Rent payment for {tenant.full_name} is due in {days_until_due} days",
                        created_at=now,
                    )
                )

        for tenant in active:
            days = days_between(now, tenant.lease_end_date)
            if 0 <= days <= self.windows.lease_notice_days:
                notifications.append(
                    Notification(
                        id=f"lease-expiry-{tenant.id}",
                        type=NotificationType.LEASE_EXPIRY,
                        title="Lease Expiring Soon",
                        message=f"Lease for {tenant.full_name} expires in {days} days",
                        created_at=now,
                    )
                )

        tenants_by_id = {t.id: t for t in tenants}
        for payment in payments:
            if payment.status is not PaymentStatus.OVERDUE:
                continue
            tenant = tenants_by_id.get(payment.tenant_id)
            if tenant is None:
                continue
            notifications.append(
                Notification(
                    id=f"overdue-{payment.id}",
                    type=NotificationType.OVERDUE_PAYMENT,
                    title="Overdue Payment",
                    message=f"Payment of ${payment.amount:,} from {tenant.full_name} is overdue",
                    created_at=datetime.combine(payment.due_date, datetime.min.time()),
                )
            )

        return notifications


def merge_notifications(user: list[Notification], system: list[Notification]) -> list[Notification]:
    """Union of stored and synthesized notifications, newest first.

    Stored records carrying a system id are dropped so a synthesized
    notification never appears twice.
    """
    stored = [n for n in user if not is_system_notification_id(n.id)]
    return sorted(stored + list(system), key=lambda n: n.created_at, reverse=True)


class NotificationInbox:
    """Session-local read/dismissed state for synthesized notifications.

    System notifications are rebuilt on every load, so marking one read or
    deleting it is remembered here for the rest of the session only.
    """

    def __init__(self) -> None:
        self.read_ids: set[str] = set()
        self.dismissed_ids: set[str] = set()

    def mark_read(self, notification_id: str) -> None:
        self.read_ids.add(notification_id)

    def dismiss(self, notification_id: str) -> None:
        self.dismissed_ids.add(notification_id)

    def apply(self, system: list[Notification]) -> list[Notification]:
        """Drop dismissed notifications and flag read ones."""
        return [
            replace(n, is_read=True) if n.id in self.read_ids else n
            for n in system
            if n.id not in self.dismissed_ids
        ]
