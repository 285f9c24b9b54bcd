"""Tests for domain models."""

from datetime import datetime

import pytest

from rentdesk.models import (
    Notification,
    NotificationType,
    PaymentStatus,
    PropertyStatus,
    is_system_notification_id,
)


class TestProperty:
    """Tests for Property derived fields."""

    def test_available_by_default(self, make_property) -> None:
        prop = make_property()

        assert prop.status is PropertyStatus.AVAILABLE
        assert prop.is_available
        assert not prop.is_occupied
        assert prop.tenant_id is None

    def test_occupied_is_not_available(self, make_property) -> None:
        prop = make_property(status=PropertyStatus.OCCUPIED, tenant_id="t1")

        assert prop.is_occupied
        assert not prop.is_available

    def test_maintenance_is_neither(self, make_property) -> None:
        prop = make_property(status=PropertyStatus.MAINTENANCE)

        assert not prop.is_available
        assert not prop.is_occupied

    def test_display_address(self, make_property) -> None:
        assert make_property().display_address == "12 Elm St, Springfield"
        assert make_property(city="").display_address == "12 Elm St"


class TestTenant:
    """Tests for Tenant derived fields."""

    def test_full_name(self, make_tenant) -> None:
        assert make_tenant().full_name == "Ada Lovelace"

    def test_full_name_without_last_name(self, make_tenant) -> None:
        assert make_tenant(last_name="").full_name == "Ada"

    def test_emergency_contact_default_not_shared(self, make_tenant) -> None:
        a = make_tenant("t1")
        b = make_tenant("t2")
        a.emergency_contact.name = "Charles"

        assert b.emergency_contact.name == ""


class TestPaymentStatus:
    """Tests for payment status transitions."""

    @pytest.mark.parametrize(
        "target", [PaymentStatus.PAID, PaymentStatus.OVERDUE, PaymentStatus.PARTIAL, PaymentStatus.PENDING]
    )
    def test_pending_moves_anywhere(self, target: PaymentStatus) -> None:
        assert PaymentStatus.PENDING.can_transition_to(target)

    @pytest.mark.parametrize("source", list(PaymentStatus))
    def test_anything_can_become_paid(self, source: PaymentStatus) -> None:
        assert source.can_transition_to(PaymentStatus.PAID)

    @pytest.mark.parametrize(
        "source,target",
        [
            (PaymentStatus.PAID, PaymentStatus.PENDING),
            (PaymentStatus.PAID, PaymentStatus.OVERDUE),
            (PaymentStatus.OVERDUE, PaymentStatus.PARTIAL),
            (PaymentStatus.PARTIAL, PaymentStatus.OVERDUE),
        ],
    )
    def test_forbidden_transitions(self, source: PaymentStatus, target: PaymentStatus) -> None:
        assert not source.can_transition_to(target)


class TestNotification:
    """Tests for system/user notification ids."""

    @pytest.mark.parametrize("notification_id", ["rent-due-t1", "lease-expiry-t1", "overdue-pay1"])
    def test_system_ids(self, notification_id: str) -> None:
        assert is_system_notification_id(notification_id)

    @pytest.mark.parametrize("notification_id", ["lq3k2a9f0c1d2e3f4", "1", "due-rent-t1"])
    def test_user_ids(self, notification_id: str) -> None:
        assert not is_system_notification_id(notification_id)

    def test_is_system_property(self) -> None:
        notification = Notification(
            id="rent-due-t1",
            type=NotificationType.RENT_DUE,
            title="Rent Due Soon",
            message="",
            created_at=datetime(2024, 1, 25),
        )

        assert notification.is_system
        assert notification.recipient_id == "landlord"
        assert notification.is_read is False
