"""Deterministic sample data written on first use of an empty store."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from rentdesk.generators.base import BaseGenerator
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


@dataclass
class SeedData:
    """One consistent set of sample records, keyed by collection name."""

    properties: list[Property] = field(default_factory=list)
    tenants: list[Tenant] = field(default_factory=list)
    payments: list[Payment] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)
    users: list[User] = field(default_factory=list)

    def for_collection(self, name: str) -> list:
        return list(getattr(self, name))


class SeedDataGenerator(BaseGenerator):
    """Generate a small portfolio: properties, their tenants and rent history.

    Every occupied property is bound to exactly one active tenant, so the seed
    satisfies the occupancy invariant. Output depends only on ``seed`` and the
    ``now`` passed to :meth:`generate`.
    """

    PROPERTY_TYPES = list(PropertyType)
    PROPERTY_TYPE_WEIGHTS = [0.55, 0.35, 0.10]

    # Monthly rent ranges by property type
    RENT_RANGES = {
        PropertyType.APARTMENT: (800, 2500),
        PropertyType.HOUSE: (1500, 4000),
        PropertyType.COMMERCIAL: (2500, 9000),
    }

    RELATIONSHIPS = ["Spouse", "Parent", "Sibling", "Friend"]

    def __init__(
        self,
        seed: int | None = 42,
        num_properties: int = 4,
        occupancy: float = 0.5,
        history_months: int = 3,
    ) -> None:
        super().__init__(seed)
        self.num_properties = num_properties
        self.occupancy = occupancy
        self.history_months = history_months
        self._receipts = 0

    def generate(self, now: datetime) -> SeedData:
        """Generate the full sample set anchored at ``now``.

        Parameters
        ----------
        now : datetime
            Reference instant; lease and payment dates are laid out around it.

        Returns
        -------
        SeedData
            Generated records.
        """
        self._receipts = 0
        data = SeedData(users=[self._generate_user(now)])
        occupied_target = round(self.num_properties * self.occupancy)

        for index in range(self.num_properties):
            prop = self._generate_property(now)
            data.properties.append(prop)
            if index >= occupied_target:
                continue

            tenant = self._generate_tenant(prop, now)
            prop.status = PropertyStatus.OCCUPIED
            prop.tenant_id = tenant.id
            data.tenants.append(tenant)
            data.payments.extend(self._generate_payments(tenant, now))

        data.notifications.append(
            Notification(
                id=self.fake.uuid4(),
                type=NotificationType.GENERAL,
                title="Welcome",
                message="Sample properties and tenants have been loaded.",
                created_at=now - timedelta(days=1),
            )
        )
        return data

    def _generate_user(self, now: datetime) -> User:
        return User(
            id=self.fake.uuid4(),
            email="landlord@example.com",
            name=self.fake.name(),
            role=UserRole.LANDLORD,
            created_at=now - relativedelta(years=1),
        )

    def _generate_property(self, now: datetime) -> Property:
        prop_type = self.fake.random.choices(
            self.PROPERTY_TYPES, weights=self.PROPERTY_TYPE_WEIGHTS, k=1
        )[0]
        low, high = self.RENT_RANGES[prop_type]
        rent = Decimal(self.fake.random_int(low // 50, high // 50) * 50)

        bedrooms = None if prop_type is PropertyType.COMMERCIAL else self.fake.random_int(1, 4)
        created_at = now - timedelta(days=self.fake.random_int(200, 700))

        return Property(
            id=self.fake.uuid4(),
            address=self.fake.street_address(),
            city=self.fake.city(),
            state=self.fake.state_abbr(),
            zip_code=self.fake.zipcode(),
            type=prop_type,
            rent_amount=rent,
            bedrooms=bedrooms,
            bathrooms=None if bedrooms is None else max(1, bedrooms - 1),
            square_feet=float(self.fake.random_int(6, 30) * 100),
            description=self.fake.sentence(nb_words=8),
            created_at=created_at,
            updated_at=created_at,
        )

    def _generate_tenant(self, prop: Property, now: datetime) -> Tenant:
        # Leases run 12 months; some of them end inside the reminder windows
        months_in = self.fake.random_int(1, 11)
        lease_start = (now.date() - relativedelta(months=months_in)).replace(day=1)
        lease_end = lease_start + relativedelta(months=12) - timedelta(days=1)
        first_name = self.fake.first_name()
        last_name = self.fake.last_name()
        created_at = datetime.combine(lease_start, datetime.min.time())

        return Tenant(
            id=self.fake.uuid4(),
            first_name=first_name,
            last_name=last_name,
            email=f"{first_name}.{last_name}@example.com".lower(),
            phone=self.fake.phone_number(),
            property_id=prop.id,
            lease_start_date=lease_start,
            lease_end_date=lease_end,
            rent_amount=prop.rent_amount,
            security_deposit=prop.rent_amount,
            emergency_contact=EmergencyContact(
                name=self.fake.name(),
                phone=self.fake.phone_number(),
                relationship=self.fake.random_element(self.RELATIONSHIPS),
            ),
            is_active=True,
            created_at=created_at,
            updated_at=created_at,
        )

    def _generate_payments(self, tenant: Tenant, now: datetime) -> list[Payment]:
        """Paid history for past months and one open payment for the current month."""
        payments = []
        current_month = now.date().replace(day=1)

        for offset in range(self.history_months, -1, -1):
            due = current_month - relativedelta(months=offset)
            if due < tenant.lease_start_date:
                continue
            if offset > 0:
                status = PaymentStatus.PAID
                paid_on = due + timedelta(days=self.fake.random_int(0, 4))
            else:
                status = PaymentStatus.OVERDUE if now.day > 10 else PaymentStatus.PENDING
                paid_on = due
            payments.append(self._payment(tenant, due, paid_on, status))
        return payments

    def _payment(self, tenant: Tenant, due: date, paid_on: date, status: PaymentStatus) -> Payment:
        self._receipts += 1
        return Payment(
            id=self.fake.uuid4(),
            tenant_id=tenant.id,
            property_id=tenant.property_id,
            amount=tenant.rent_amount,
            payment_date=paid_on,
            due_date=due,
            payment_method=self.fake.random_element(list(PaymentMethod)),
            status=status,
            receipt_number=f"RCP-{self._receipts:06d}",
            created_at=datetime.combine(paid_on, datetime.min.time()),
        )
