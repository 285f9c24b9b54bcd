"""Tests for the temporal aggregator."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from rentdesk.aggregation import (
    UNKNOWN_PROPERTY,
    DueClass,
    ItemKind,
    TemporalAggregator,
    days_between,
    month_bounds,
)
from rentdesk.config import DueWindows
from rentdesk.exceptions import ValidationError
from rentdesk.models import Payment, PaymentMethod, PaymentStatus, PropertyStatus, PropertyType


@pytest.fixture
def aggregator() -> TemporalAggregator:
    return TemporalAggregator()


def _payment(pay_id: str, amount: str, paid_on: date, status=PaymentStatus.PAID, **kwargs) -> Payment:
    fields = dict(
        id=pay_id,
        tenant_id="t1",
        property_id="p1",
        amount=Decimal(amount),
        payment_date=paid_on,
        due_date=paid_on,
        payment_method=PaymentMethod.BANK_TRANSFER,
        status=status,
        receipt_number=f"RCP-{pay_id}",
    )
    fields.update(kwargs)
    return Payment(**fields)


class TestHelpers:
    """Tests for days_between and month_bounds."""

    def test_days_between_ignores_time_of_day(self) -> None:
        assert days_between(datetime(2024, 1, 25, 23, 59), date(2024, 2, 1)) == 7

    def test_days_between_past(self) -> None:
        assert days_between(date(2024, 2, 5), date(2024, 2, 1)) == -4

    def test_month_bounds_leap_year(self) -> None:
        assert month_bounds(date(2024, 2, 14)) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_month_bounds_december(self) -> None:
        assert month_bounds(date(2023, 12, 31)) == (date(2023, 12, 1), date(2023, 12, 31))


class TestClassification:
    """Tests for rent and lease classification."""

    def test_next_rent_due_date(self, aggregator) -> None:
        assert aggregator.next_rent_due_date(datetime(2024, 1, 25)) == date(2024, 2, 1)
        assert aggregator.next_rent_due_date(date(2024, 12, 1)) == date(2025, 1, 1)

    def test_rent_urgent(self, aggregator) -> None:
        assert aggregator.classify_rent_due(datetime(2024, 1, 25), date(2024, 2, 1)) == (7, DueClass.URGENT)

    def test_rent_overdue(self, aggregator) -> None:
        assert aggregator.classify_rent_due(datetime(2024, 2, 5), date(2024, 2, 1)) == (-4, DueClass.OVERDUE)

    def test_rent_upcoming(self, aggregator) -> None:
        assert aggregator.classify_rent_due(datetime(2024, 1, 10), date(2024, 2, 1)) == (22, DueClass.UPCOMING)

    def test_rent_due_today_is_urgent(self, aggregator) -> None:
        assert aggregator.classify_rent_due(date(2024, 2, 1), date(2024, 2, 1)) == (0, DueClass.URGENT)

    def test_lease_classes(self, aggregator) -> None:
        now = datetime(2024, 1, 25)

        assert aggregator.classify_lease_expiry(now, date(2024, 1, 20))[1] is DueClass.EXPIRED
        assert aggregator.classify_lease_expiry(now, date(2024, 2, 8))[1] is DueClass.URGENT
        assert aggregator.classify_lease_expiry(now, date(2024, 2, 9))[1] is DueClass.ACTIVE

    def test_custom_windows(self) -> None:
        aggregator = TemporalAggregator(DueWindows(rent_due_urgent_days=3))

        assert aggregator.classify_rent_due(date(2024, 1, 25), date(2024, 2, 1))[1] is DueClass.UPCOMING


class TestUpcomingItems:
    """Tests for upcoming rent and lease items."""

    def test_rent_items_for_active_tenants(self, aggregator, now, make_tenant, make_property) -> None:
        tenants = [make_tenant("t1"), make_tenant("t2", is_active=False)]

        items = aggregator.upcoming_rent_due(now, tenants, [make_property()])

        (item,) = items
        assert item.kind is ItemKind.RENT
        assert item.due_date == date(2024, 2, 1)
        assert item.days_until == 7
        assert item.classification is DueClass.URGENT
        assert item.amount == Decimal("1200")
        assert item.property_label == "12 Elm St, Springfield"
        assert item.display_type == "Rent Payment"

    def test_unknown_property_label(self, aggregator, now, make_tenant) -> None:
        (item,) = aggregator.upcoming_rent_due(now, [make_tenant(property_id="gone")], [])

        assert item.property_label == UNKNOWN_PROPERTY

    def test_lease_window(self, aggregator, now, make_tenant) -> None:
        tenants = [
            make_tenant("soon", lease_end_date=date(2024, 2, 10)),
            make_tenant("later", lease_end_date=date(2024, 3, 30)),
            make_tenant("expired", lease_end_date=date(2024, 1, 1)),
        ]

        items = aggregator.upcoming_lease_expiries(now, tenants, [])

        assert [i.tenant_id for i in items] == ["soon", "expired"]
        assert items[1].classification is DueClass.EXPIRED
        assert items[0].display_type == "Lease Expiry"

    def test_combined_sorted_and_limited(self, aggregator, now, make_tenant) -> None:
        tenants = [
            make_tenant("a", lease_end_date=date(2024, 2, 20)),
            make_tenant("b", lease_end_date=date(2024, 1, 30)),
        ]

        items = aggregator.upcoming_items(now, tenants, [])

        assert [(i.kind, i.tenant_id) for i in items] == [
            (ItemKind.LEASE, "b"),
            (ItemKind.RENT, "a"),
            (ItemKind.RENT, "b"),
            (ItemKind.LEASE, "a"),
        ]
        assert len(aggregator.upcoming_items(now, tenants, [], limit=2)) == 2

    def test_renewal_and_late_fee(self, aggregator, now, make_tenant) -> None:
        tenants = [
            make_tenant("renew", lease_end_date=date(2024, 2, 20)),
            make_tenant("today", lease_end_date=date(2024, 1, 25)),
            make_tenant("late", lease_end_date=date(2024, 1, 10)),
            make_tenant("gone", lease_end_date=date(2024, 1, 10), is_active=False),
        ]

        assert [t.id for t in aggregator.lease_renewal_candidates(now, tenants)] == ["renew"]
        assert [t.id for t in aggregator.late_fee_candidates(now, tenants)] == ["late"]


class TestMonthlyIncome:
    """Tests for monthly income rollups."""

    @pytest.mark.parametrize("months", [1, 6, 12, 24])
    def test_bucket_count(self, aggregator, now, months) -> None:
        buckets = aggregator.monthly_income([], now, months)

        assert len(buckets) == months
        assert all(b.income == Decimal("0") for b in buckets)
        assert [b.month_start for b in buckets] == sorted(b.month_start for b in buckets)
        assert buckets[-1].month_start == date(2024, 1, 1)

    def test_invalid_window(self, aggregator, now) -> None:
        with pytest.raises(ValidationError):
            aggregator.monthly_income([], now, 0)

    def test_paid_payment_lands_in_its_month(self, aggregator) -> None:
        payments = [_payment("1", "250", date(2024, 8, 1))]

        buckets = aggregator.monthly_income(payments, datetime(2024, 8, 15), 2)

        assert [b.label for b in buckets] == ["Jul 2024", "Aug 2024"]
        assert buckets[0].income == Decimal("0")
        assert buckets[1].income == Decimal("250")
        assert buckets[1].short_label == "Aug"

    def test_only_paid_counted(self, aggregator) -> None:
        payments = [
            _payment("1", "100", date(2024, 8, 1)),
            _payment("2", "200", date(2024, 8, 2), status=PaymentStatus.PENDING),
            _payment("3", "300", date(2024, 8, 3), status=PaymentStatus.PARTIAL),
            _payment("4", "400", date(2024, 8, 31)),
            _payment("5", "500", date(2024, 9, 1)),
        ]

        (august,) = aggregator.monthly_income(payments, date(2024, 8, 20), 1)

        assert august.income == Decimal("500")


class TestRollups:
    """Tests for status, occupancy and type rollups."""

    def test_status_rollup(self, aggregator) -> None:
        payments = [
            _payment("1", "100", date(2024, 8, 1)),
            _payment("2", "50.50", date(2024, 8, 2)),
            _payment("3", "75", date(2024, 8, 3), status=PaymentStatus.OVERDUE),
        ]

        rollup = aggregator.payment_status_rollup(payments)

        assert set(rollup) == set(PaymentStatus)
        assert rollup[PaymentStatus.PAID].count == 2
        assert rollup[PaymentStatus.PAID].total == Decimal("150.50")
        assert rollup[PaymentStatus.OVERDUE].total == Decimal("75")
        assert rollup[PaymentStatus.PENDING].count == 0

    def test_recent_payments(self, aggregator) -> None:
        payments = [
            _payment("old", "1", date(2024, 1, 1)),
            _payment("new", "1", date(2024, 3, 1)),
            _payment("mid", "1", date(2024, 2, 1), created_at=datetime(2024, 2, 1, 9)),
        ]

        assert [p.id for p in aggregator.recent_payments(payments, 2)] == ["new", "mid"]

    def test_occupancy_rate_empty(self, aggregator) -> None:
        assert aggregator.occupancy_rate([]) == 0.0

    def test_occupancy_rate_full(self, aggregator, make_property) -> None:
        props = [make_property(str(i), status=PropertyStatus.OCCUPIED, tenant_id=f"t{i}") for i in range(3)]

        assert aggregator.occupancy_rate(props) == 100.0

    def test_occupancy_rate_partial(self, aggregator, make_property) -> None:
        props = [make_property("a", status=PropertyStatus.OCCUPIED, tenant_id="t"), make_property("b")]

        assert aggregator.occupancy_rate(props) == 50.0

    def test_occupancy_breakdown(self, aggregator, make_property) -> None:
        props = [make_property("a"), make_property("b", status=PropertyStatus.MAINTENANCE)]

        assert aggregator.occupancy_breakdown(props) == {
            PropertyStatus.AVAILABLE: 1,
            PropertyStatus.OCCUPIED: 0,
            PropertyStatus.MAINTENANCE: 1,
        }

    def test_property_type_breakdown(self, aggregator, make_property) -> None:
        props = [
            make_property("a", status=PropertyStatus.OCCUPIED, tenant_id="t1"),
            make_property("b"),
            make_property("c", type=PropertyType.HOUSE, rent_amount=Decimal("3500")),
        ]

        summaries = {s.type: s for s in aggregator.property_type_breakdown(props)}

        assert summaries[PropertyType.APARTMENT].count == 2
        assert summaries[PropertyType.APARTMENT].occupied_rent == Decimal("1200")
        assert summaries[PropertyType.HOUSE].occupied_rent == Decimal("0")

    def test_dashboard_stats(self, aggregator, now, make_property, make_tenant) -> None:
        props = [make_property("p1", status=PropertyStatus.OCCUPIED, tenant_id="t1"), make_property("p2")]
        payments = [
            _payment("1", "1200", date(2024, 1, 3)),
            _payment("2", "1200", date(2023, 12, 3)),
            _payment("3", "1200", date(2024, 1, 1), status=PaymentStatus.OVERDUE),
        ]

        stats = aggregator.dashboard_stats(now, props, [make_tenant()], payments)

        assert stats.total_properties == 2
        assert stats.occupied_properties == 1
        assert stats.active_tenants == 1
        assert stats.occupancy_rate == 50.0
        assert stats.monthly_income == Decimal("1200")
        assert stats.overdue_payments == 1
