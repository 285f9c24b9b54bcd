"""Tests for record serialization and the normalisation of stored records."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

import pytest

from rentdesk.exceptions import ValidationError
from rentdesk.models import (
    NotificationType,
    PaymentMethod,
    PaymentStatus,
    PropertyStatus,
    PropertyType,
    UserRole,
)
from rentdesk.store.serialization import (
    notification_from_dict,
    parse_date,
    parse_datetime,
    payment_from_dict,
    property_from_dict,
    serialize_value,
    tenant_from_dict,
    to_dict,
    user_from_dict,
)


class _SampleEnum(str, Enum):
    VALUE_A = "value_a"


@dataclass
class _SampleData:
    name: str
    amount: Decimal
    created_at: datetime


class TestToDict:
    """Tests for to_dict function."""

    def test_dataclass(self) -> None:
        obj = _SampleData(name="test", amount=Decimal("100.50"), created_at=datetime(2024, 1, 1))
        result = to_dict(obj)

        assert result["name"] == "test"
        assert result["amount"] == "100.50"
        assert result["created_at"] == "2024-01-01T00:00:00"

    def test_other_type(self) -> None:
        assert to_dict(42) == {"value": "42"}

    def test_tenant_nested_contact(self, make_tenant) -> None:
        result = to_dict(make_tenant())

        assert result["emergency_contact"] == {"name": "", "phone": "", "relationship": ""}
        assert result["lease_end_date"] == "2024-05-31"
        assert result["rent_amount"] == "1200"
        assert "full_name" not in result


class TestSerializeValue:
    """Tests for serialize_value function."""

    def test_decimal(self) -> None:
        assert serialize_value(Decimal("99.99")) == "99.99"

    def test_enum(self) -> None:
        assert serialize_value(_SampleEnum.VALUE_A) == "value_a"

    def test_date(self) -> None:
        assert serialize_value(date(2024, 6, 15)) == "2024-06-15"

    def test_nested_list_of_dataclasses(self) -> None:
        data = [_SampleData("a", Decimal("1"), datetime(2024, 1, 1))]

        assert serialize_value(data) == [{"name": "a", "amount": "1", "created_at": "2024-01-01T00:00:00"}]


class TestParsing:
    """Tests for date and timestamp parsing."""

    def test_iso_with_zulu(self) -> None:
        assert parse_datetime("2024-08-01T00:00:00.000Z") == datetime(2024, 8, 1)

    def test_date_from_timestamp(self) -> None:
        assert parse_date("2024-08-01T00:00:00.000Z") == date(2024, 8, 1)

    def test_plain_date(self) -> None:
        assert parse_date("2024-08-01") == date(2024, 8, 1)

    def test_invalid(self) -> None:
        with pytest.raises(ValidationError):
            parse_datetime("not a date")


class TestPropertyFromDict:
    """Tests for property normalisation."""

    def test_round_trip(self, make_property) -> None:
        prop = make_property(status=PropertyStatus.OCCUPIED, tenant_id="t1", bedrooms=2)

        assert property_from_dict(to_dict(prop)) == prop

    def test_legacy_is_available_true(self) -> None:
        prop = property_from_dict(
            {
                "id": "2",
                "address": "456 Oak Ave, Brooklyn, NY 11201",
                "type": "house",
                "rentAmount": 3500,
                "isAvailable": True,
                "squareFeet": 1500,
                "createdAt": "2024-02-01T00:00:00.000Z",
            }
        )

        assert prop.status is PropertyStatus.AVAILABLE
        assert prop.type is PropertyType.HOUSE
        assert prop.rent_amount == Decimal("3500")
        assert prop.square_feet == 1500
        assert prop.city == ""
        assert prop.created_at == datetime(2024, 2, 1)

    def test_legacy_is_available_false(self) -> None:
        prop = property_from_dict(
            {"id": "1", "address": "Andrews St", "type": "apartment", "rentAmount": 250, "isAvailable": False}
        )

        assert prop.status is PropertyStatus.OCCUPIED

    def test_status_wins_over_is_available(self) -> None:
        prop = property_from_dict(
            {
                "id": "3",
                "address": "x",
                "type": "commercial",
                "rentAmount": 1,
                "status": "maintenance",
                "isAvailable": True,
                "squareFootage": 800,
            }
        )

        assert prop.status is PropertyStatus.MAINTENANCE
        assert prop.square_feet == 800

    def test_missing_required_field(self) -> None:
        with pytest.raises(ValidationError, match="address"):
            property_from_dict({"id": "1", "type": "house", "rent_amount": "10"})


class TestTenantFromDict:
    """Tests for tenant normalisation."""

    def test_round_trip(self, make_tenant) -> None:
        tenant = make_tenant()

        assert tenant_from_dict(to_dict(tenant)) == tenant

    def test_legacy_full_name(self) -> None:
        tenant = tenant_from_dict(
            {
                "id": "1",
                "fullName": "Mutamba Sheenah",
                "email": "sheenamutamba@email.com",
                "propertyId": "1",
                "leaseStartDate": "2025-07-03T00:00:00.000Z",
                "leaseEndDate": "2025-09-03T00:00:00.000Z",
                "rentAmount": 60,
                "securityDeposit": 30,
                "isActive": True,
                "emergencyContact": {"name": "Jane Smith", "phone": "(555) 987-6543", "relationship": "Spouse"},
            }
        )

        assert tenant.first_name == "Mutamba"
        assert tenant.last_name == "Sheenah"
        assert tenant.full_name == "Mutamba Sheenah"
        assert tenant.property_id == "1"
        assert tenant.lease_end_date == date(2025, 9, 3)
        assert tenant.security_deposit == Decimal("30")
        assert tenant.emergency_contact.relationship == "Spouse"


class TestOtherRecords:
    """Tests for payment, notification and user normalisation."""

    def test_legacy_payment(self) -> None:
        payment = payment_from_dict(
            {
                "id": "1",
                "tenantId": "1",
                "propertyId": "1",
                "amount": 2500,
                "paymentDate": "2024-08-01T00:00:00.000Z",
                "dueDate": "2024-08-01T00:00:00.000Z",
                "paymentMethod": "bank_transfer",
                "status": "paid",
                "receiptNumber": "RCP-001",
            }
        )

        assert payment.amount == Decimal("2500")
        assert payment.payment_method is PaymentMethod.BANK_TRANSFER
        assert payment.status is PaymentStatus.PAID
        assert payment.payment_date == date(2024, 8, 1)
        assert payment.notes == ""

    def test_payment_due_date_defaults_to_payment_date(self) -> None:
        payment = payment_from_dict(
            {
                "id": "1",
                "tenant_id": "t1",
                "amount": "10",
                "payment_date": "2024-03-02",
                "payment_method": "cash",
                "status": "pending",
            }
        )

        assert payment.due_date == date(2024, 3, 2)

    def test_notification(self) -> None:
        notification = notification_from_dict(
            {"id": "n1", "type": "maintenance", "title": "Boiler", "message": "Check", "createdAt": "2024-01-01"}
        )

        assert notification.type is NotificationType.MAINTENANCE
        assert notification.is_read is False

    def test_user(self) -> None:
        user = user_from_dict(
            {"id": "1", "email": "landlord@example.com", "name": "Derrick", "role": "landlord", "isActive": True}
        )

        assert user.role is UserRole.LANDLORD
        assert user.is_active
