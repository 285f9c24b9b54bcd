"""Date-driven classifications and rollups over tenants, properties and payments.

Nothing here reads the clock: every method that depends on the current date
takes ``now`` as an argument, so results are a pure function of the inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum

from dateutil.relativedelta import relativedelta

from rentdesk.config import DueWindows
from rentdesk.exceptions import ValidationError
from rentdesk.models import Payment, PaymentStatus, Property, PropertyStatus, PropertyType, Tenant

UNKNOWN_PROPERTY = "Unknown Property"
ZERO = Decimal("0")


class DueClass(str, Enum):
    OVERDUE = "overdue"
    URGENT = "urgent"
    UPCOMING = "upcoming"
    EXPIRED = "expired"
    ACTIVE = "active"


class ItemKind(str, Enum):
    RENT = "rent"
    LEASE = "lease"


@dataclass
class UpcomingItem:
    """A rent due date or lease expiry shown on the dashboard."""

    kind: ItemKind
    tenant_id: str
    tenant_name: str
    property_label: str
    due_date: date
    days_until: int
    classification: DueClass
    amount: Decimal | None = None

    @property
    def display_type(self) -> str:
        return "Rent Payment" if self.kind is ItemKind.RENT else "Lease Expiry"


@dataclass
class MonthlyIncome:
    """Paid income for one calendar month."""

    month_start: date
    month_end: date
    income: Decimal

    @property
    def label(self) -> str:
        return self.month_start.strftime("%b %Y")

    @property
    def short_label(self) -> str:
        return self.month_start.strftime("%b")


@dataclass
class StatusRollup:
    count: int = 0
    total: Decimal = ZERO


@dataclass
class PropertyTypeSummary:
    type: PropertyType
    count: int
    occupied_rent: Decimal


@dataclass
class DashboardStats:
    total_properties: int
    occupied_properties: int
    active_tenants: int
    occupancy_rate: float
    monthly_income: Decimal
    overdue_payments: int


def days_between(now: datetime | date, target: date) -> int:
    """Whole calendar days from ``now``'s date to ``target`` (negative if past)."""
    today = now.date() if isinstance(now, datetime) else now
    return (target - today).days


def month_bounds(day: date) -> tuple[date, date]:
    """First and last day of the month containing ``day``."""
    start = day.replace(day=1)
    end = start + relativedelta(months=1) - timedelta(days=1)
    return start, end


class TemporalAggregator:
    """Compute the dashboard and report aggregates.

    Parameters
    ----------
    windows : DueWindows
        Day thresholds for the urgent/expiring classifications.
    """

    def __init__(self, windows: DueWindows | None = None) -> None:
        self.windows = windows or DueWindows()

    # -- classification ------------------------------------------------------

    @staticmethod
    def next_rent_due_date(now: datetime | date) -> date:
        """Rent falls due on the first day of the month after ``now``."""
        today = now.date() if isinstance(now, datetime) else now
        return today.replace(day=1) + relativedelta(months=1)

    def classify_rent_due(self, now: datetime | date, due_date: date) -> tuple[int, DueClass]:
        days = days_between(now, due_date)
        if days < 0:
            return days, DueClass.OVERDUE
        if days <= self.windows.rent_due_urgent_days:
            return days, DueClass.URGENT
        return days, DueClass.UPCOMING

    def classify_lease_expiry(self, now: datetime | date, end_date: date) -> tuple[int, DueClass]:
        days = days_between(now, end_date)
        if days < 0:
            return days, DueClass.EXPIRED
        if days <= self.windows.lease_expiry_urgent_days:
            return days, DueClass.URGENT
        return days, DueClass.ACTIVE

    # -- upcoming items ------------------------------------------------------

    @staticmethod
    def _property_label(properties: list[Property], property_id: str | None) -> str:
        for prop in properties:
            if prop.id == property_id:
                return prop.display_address
        return UNKNOWN_PROPERTY

    def upcoming_rent_due(
        self, now: datetime, tenants: list[Tenant], properties: list[Property]
    ) -> list[UpcomingItem]:
        """One rent item per active tenant, due on the first of next month."""
        due_date = self.next_rent_due_date(now)
        days, classification = self.classify_rent_due(now, due_date)
        return [
            UpcomingItem(
                kind=ItemKind.RENT,
                tenant_id=tenant.id,
                tenant_name=tenant.full_name,
                property_label=self._property_label(properties, tenant.property_id),
                due_date=due_date,
                days_until=days,
                classification=classification,
                amount=tenant.rent_amount,
            )
            for tenant in tenants
            if tenant.is_active
        ]

    def upcoming_lease_expiries(
        self, now: datetime, tenants: list[Tenant], properties: list[Property]
    ) -> list[UpcomingItem]:
        """Active leases ending within the expiry window, already expired ones included."""
        items = []
        for tenant in tenants:
            if not tenant.is_active:
                continue
            days, classification = self.classify_lease_expiry(now, tenant.lease_end_date)
            if days > self.windows.lease_expiry_window_days:
                continue
            items.append(
                UpcomingItem(
                    kind=ItemKind.LEASE,
                    tenant_id=tenant.id,
                    tenant_name=tenant.full_name,
                    property_label=self._property_label(properties, tenant.property_id),
                    due_date=tenant.lease_end_date,
                    days_until=days,
                    classification=classification,
                )
            )
        return items

    def upcoming_items(
        self,
        now: datetime,
        tenants: list[Tenant],
        properties: list[Property],
        limit: int | None = None,
    ) -> list[UpcomingItem]:
        """Rent and lease items together, earliest date first.

        ``sorted`` is stable, so equal dates keep rent items ahead of lease
        items and each group in tenant order.
        """
        combined = self.upcoming_rent_due(now, tenants, properties) + self.upcoming_lease_expiries(
            now, tenants, properties
        )
        combined = sorted(combined, key=lambda item: item.due_date)
        return combined[:limit] if limit is not None else combined

    def lease_renewal_candidates(self, now: datetime, tenants: list[Tenant]) -> list[Tenant]:
        """Active tenants whose lease ends in 1..renewal-window days."""
        return [
            t
            for t in tenants
            if t.is_active and 0 < days_between(now, t.lease_end_date) <= self.windows.lease_renewal_days
        ]

    @staticmethod
    def late_fee_candidates(now: datetime, tenants: list[Tenant]) -> list[Tenant]:
        """Active tenants still in place after their lease end date."""
        return [t for t in tenants if t.is_active and days_between(now, t.lease_end_date) < 0]

    # -- money ---------------------------------------------------------------

    @staticmethod
    def monthly_income(payments: list[Payment], now: datetime | date, months: int) -> list[MonthlyIncome]:
        """Paid income per month for the ``months`` months ending with ``now``'s.

        Always returns exactly ``months`` buckets, oldest first.
        """
        if months <= 0:
            raise ValidationError(f"Report window must be positive, got {months}")

        today = now.date() if isinstance(now, datetime) else now
        buckets = []
        for offset in range(months - 1, -1, -1):
            start, end = month_bounds(today - relativedelta(months=offset))
            income = sum(
                (
                    p.amount
                    for p in payments
                    if p.status is PaymentStatus.PAID and start <= p.payment_date <= end
                ),
                ZERO,
            )
            buckets.append(MonthlyIncome(month_start=start, month_end=end, income=income))
        return buckets

    @staticmethod
    def payment_status_rollup(payments: list[Payment]) -> dict[PaymentStatus, StatusRollup]:
        """Count and total per payment status; every status is present."""
        rollup = {status: StatusRollup() for status in PaymentStatus}
        for payment in payments:
            entry = rollup[payment.status]
            entry.count += 1
            entry.total += payment.amount
        return rollup

    @staticmethod
    def recent_payments(payments: list[Payment], limit: int = 5) -> list[Payment]:
        """Newest payments by creation time."""
        ordered = sorted(
            payments,
            key=lambda p: p.created_at or datetime.combine(p.payment_date, datetime.min.time()),
            reverse=True,
        )
        return ordered[:limit]

    # -- occupancy -----------------------------------------------------------

    @staticmethod
    def occupancy_rate(properties: list[Property]) -> float:
        """Occupied share of all properties in percent; 0 when there are none."""
        if not properties:
            return 0.0
        occupied = sum(1 for p in properties if p.is_occupied)
        return occupied / len(properties) * 100

    @staticmethod
    def occupancy_breakdown(properties: list[Property]) -> dict[PropertyStatus, int]:
        counts = {status: 0 for status in PropertyStatus}
        for prop in properties:
            counts[prop.status] += 1
        return counts

    @staticmethod
    def property_type_breakdown(properties: list[Property]) -> list[PropertyTypeSummary]:
        """Per property type: how many, and the rent of the occupied ones."""
        summaries: dict[PropertyType, PropertyTypeSummary] = {}
        for prop in properties:
            summary = summaries.setdefault(prop.type, PropertyTypeSummary(prop.type, 0, ZERO))
            summary.count += 1
            if prop.is_occupied:
                summary.occupied_rent += prop.rent_amount
        return list(summaries.values())

    def dashboard_stats(
        self,
        now: datetime,
        properties: list[Property],
        tenants: list[Tenant],
        payments: list[Payment],
    ) -> DashboardStats:
        (current,) = self.monthly_income(payments, now, 1)
        return DashboardStats(
            total_properties=len(properties),
            occupied_properties=sum(1 for p in properties if p.is_occupied),
            active_tenants=sum(1 for t in tenants if t.is_active),
            occupancy_rate=self.occupancy_rate(properties),
            monthly_income=current.income,
            overdue_payments=sum(1 for p in payments if p.status is PaymentStatus.OVERDUE),
        )
