"""Property, tenant, payment and notification commands.

Every command validates its input completely before touching the store,
routes tenant/property link changes through the occupancy reconciler, and
writes all collections it changes in one ``put_many`` call.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, TypeVar

from rentdesk.aggregation import DashboardStats, MonthlyIncome, TemporalAggregator, UpcomingItem
from rentdesk.clock import Clock
from rentdesk.config import RentDeskConfig
from rentdesk.exceptions import (
    EntityNotFoundError,
    InvalidEntityStateError,
    PropertyAlreadyOccupiedError,
    ReferentialIntegrityError,
    ValidationError,
)
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
    is_system_notification_id,
)
from rentdesk.notifications import NotificationInbox, NotificationSynthesizer, merge_notifications
from rentdesk.occupancy import OccupancyReconciler
from rentdesk.store import Collection, EntityStore
from rentdesk.store.serialization import parse_date

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

_LABELS = {
    Collection.PROPERTIES: "Property",
    Collection.TENANTS: "Tenant",
    Collection.PAYMENTS: "Payment",
    Collection.NOTIFICATIONS: "Notification",
    Collection.USERS: "User",
}

PROPERTY_FIELDS = frozenset(
    {
        "address",
        "city",
        "state",
        "zip_code",
        "type",
        "rent_amount",
        "status",
        "bedrooms",
        "bathrooms",
        "square_feet",
        "description",
    }
)

TENANT_FIELDS = frozenset(
    {
        "first_name",
        "last_name",
        "email",
        "phone",
        "property_id",
        "lease_start_date",
        "lease_end_date",
        "rent_amount",
        "security_deposit",
        "emergency_contact",
        "notes",
        "is_active",
    }
)


_CONTACT_FIELDS = frozenset({"name", "phone", "relationship"})


def _money(value: Any, field: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError(f"{field} must be a number, got {value!r}") from exc
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return amount


def _number(value: Any, field: str, kind: type = float) -> int | float | None:
    if value in (None, ""):
        return None
    try:
        number = kind(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValidationError(f"{field} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise ValidationError(f"{field} must be a finite number")
    return number


def _date(value: Any, field: str) -> date:
    if value in (None, ""):
        raise ValidationError(f"{field} is required")
    try:
        return parse_date(value)
    except ValidationError as exc:
        raise ValidationError(f"{field} is not a valid date: {value!r}") from exc


def _enum(enum_type: type[E], value: Any, field: str) -> E:
    try:
        return enum_type(value)
    except ValueError as exc:
        choices = ", ".join(member.value for member in enum_type)
        raise ValidationError(f"{field} must be one of {choices}, got {value!r}") from exc


def _require(value: Any, field: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required")


def _check_unknown(changes: dict, allowed: frozenset[str]) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise ValidationError(f"Unknown or read-only fields: {', '.join(sorted(map(str, unknown)))}")


class RentalManager:
    """Landlord-facing operations over the entity store.

    Parameters
    ----------
    store : EntityStore
        Persistence for all collections.
    config : RentDeskConfig | None
        Thresholds and report settings.
    clock : Clock | None
        Defaults to the store's clock.
    """

    def __init__(
        self,
        store: EntityStore,
        config: RentDeskConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.store = store
        self.config = config or RentDeskConfig()
        self.clock = clock or store.clock
        self.reconciler = OccupancyReconciler(self.clock)
        self.aggregator = TemporalAggregator(self.config.windows)
        self.synthesizer = NotificationSynthesizer(self.config.windows)
        self.inbox = NotificationInbox()

    # -- lookups -------------------------------------------------------------

    @property
    def properties(self) -> list[Property]:
        return self.store.get(Collection.PROPERTIES)

    @property
    def tenants(self) -> list[Tenant]:
        return self.store.get(Collection.TENANTS)

    @property
    def payments(self) -> list[Payment]:
        return self.store.get(Collection.PAYMENTS)

    def _get(self, collection: Collection, entity_id: str) -> Any:
        record = self.store.find(collection, entity_id)
        if record is None:
            label = _LABELS[collection]
            raise EntityNotFoundError(f"{label} {entity_id} not found", collection.value)
        return record

    def get_property(self, property_id: str) -> Property:
        return self._get(Collection.PROPERTIES, property_id)

    def get_tenant(self, tenant_id: str) -> Tenant:
        return self._get(Collection.TENANTS, tenant_id)

    def get_payment(self, payment_id: str) -> Payment:
        return self._get(Collection.PAYMENTS, payment_id)

    @staticmethod
    def _replace_by_id(records: list, record: Any) -> list:
        return [record if r.id == record.id else r for r in records]

    # -- properties ----------------------------------------------------------

    def _validate_property(self, prop: Property) -> None:
        _require(prop.address, "address")
        _require(prop.city, "city")
        if prop.rent_amount < 0:
            raise ValidationError("rent_amount must not be negative")
        for field in ("bedrooms", "bathrooms", "square_feet"):
            value = getattr(prop, field)
            if value is not None and value < 0:
                raise ValidationError(f"{field} must not be negative")

    @staticmethod
    def _coerce_property_fields(fields: dict) -> dict:
        coerced = dict(fields)
        if "type" in coerced:
            coerced["type"] = _enum(PropertyType, coerced["type"], "type")
        if "status" in coerced:
            coerced["status"] = _enum(PropertyStatus, coerced["status"], "status")
        if "rent_amount" in coerced:
            coerced["rent_amount"] = _money(coerced["rent_amount"], "rent_amount")
        if "bedrooms" in coerced:
            coerced["bedrooms"] = _number(coerced["bedrooms"], "bedrooms", int)
        for name in ("bathrooms", "square_feet"):
            if name in coerced:
                coerced[name] = _number(coerced[name], name)
        return coerced

    def create_property(
        self,
        address: str,
        city: str,
        type: PropertyType | str,
        rent_amount: Decimal | int | str,
        state: str = "",
        zip_code: str = "",
        bedrooms: int | None = None,
        bathrooms: float | None = None,
        square_feet: float | None = None,
        description: str = "",
        status: PropertyStatus | str = PropertyStatus.AVAILABLE,
    ) -> Property:
        """Add a property. New properties are available or under maintenance."""
        fields = self._coerce_property_fields(
            {
                "type": type,
                "status": status,
                "rent_amount": rent_amount,
                "bedrooms": bedrooms,
                "bathrooms": bathrooms,
                "square_feet": square_feet,
            }
        )
        if fields["status"] is PropertyStatus.OCCUPIED:
            raise InvalidEntityStateError("A new property cannot be occupied; assign a tenant instead")

        now = self.clock.now()
        prop = Property(
            id=self.store.next_id(),
            address=address,
            city=city,
            state=state,
            zip_code=zip_code,
            description=description,
            created_at=now,
            updated_at=now,
            **fields,
        )
        self._validate_property(prop)

        self.store.put(Collection.PROPERTIES, self.properties + [prop])
        logger.info("Property %s created at %s", prop.id, prop.display_address)
        return prop

    def update_property(self, property_id: str, **changes: Any) -> Property:
        """Edit property details.

        ``status`` may switch between available and maintenance while no
        tenant is bound; occupancy itself only changes through tenants.
        """
        _check_unknown(changes, PROPERTY_FIELDS)
        current = self.get_property(property_id)
        fields = self._coerce_property_fields(changes)

        new_status = fields.get("status", current.status)
        if new_status is not current.status:
            if PropertyStatus.OCCUPIED in (new_status, current.status) or current.tenant_id:
                raise InvalidEntityStateError(
                    f"Property {property_id} occupancy is controlled by its tenant assignment"
                )

        updated = replace(current, **fields, updated_at=self.clock.now())
        self._validate_property(updated)

        self.store.put(Collection.PROPERTIES, self._replace_by_id(self.properties, updated))
        logger.info("Property %s updated: %s", property_id, ", ".join(sorted(changes)))
        return updated

    def delete_property(self, property_id: str) -> None:
        """Remove a property that has no active tenant."""
        prop = self.get_property(property_id)
        occupant = next(
            (t for t in self.tenants if t.is_active and t.property_id == property_id),
            None,
        )
        if prop.tenant_id or occupant is not None:
            tenant_id = prop.tenant_id or occupant.id
            raise InvalidEntityStateError(
                f"Property {property_id} is occupied by tenant {tenant_id}; end the tenancy first"
            )

        self.store.put(Collection.PROPERTIES, [p for p in self.properties if p.id != property_id])
        logger.info("Property %s deleted", property_id)

    # -- tenants -------------------------------------------------------------

    @staticmethod
    def _coerce_tenant_fields(fields: dict) -> dict:
        coerced = dict(fields)
        for name in ("lease_start_date", "lease_end_date"):
            if name in coerced:
                coerced[name] = _date(coerced[name], name)
        for name in ("rent_amount", "security_deposit"):
            if name in coerced:
                coerced[name] = _money(coerced[name], name)
        contact = coerced.get("emergency_contact")
        if isinstance(contact, dict):
            unknown = set(contact) - _CONTACT_FIELDS
            if unknown:
                raise ValidationError(f"Unknown emergency_contact fields: {', '.join(sorted(unknown))}")
            coerced["emergency_contact"] = EmergencyContact(**contact)
        elif "emergency_contact" in coerced and contact is None:
            coerced["emergency_contact"] = EmergencyContact()
        elif "emergency_contact" in coerced and not isinstance(contact, EmergencyContact):
            raise ValidationError(f"emergency_contact must be a mapping, got {contact!r}")
        if "property_id" in coerced and coerced["property_id"] == "":
            coerced["property_id"] = None
        if "is_active" in coerced:
            coerced["is_active"] = bool(coerced["is_active"])
        return coerced

    def _validate_tenant(self, tenant: Tenant, properties: list[Property]) -> None:
        _require(tenant.first_name, "first_name")
        _require(tenant.last_name, "last_name")
        _require(tenant.email, "email")
        if "@" not in tenant.email:
            raise ValidationError(f"email is not valid: {tenant.email!r}")
        if tenant.lease_end_date <= tenant.lease_start_date:
            raise ValidationError("lease_end_date must be after lease_start_date")
        if tenant.rent_amount < 0:
            raise ValidationError("rent_amount must not be negative")
        if tenant.security_deposit < 0:
            raise ValidationError("security_deposit must not be negative")
        if tenant.is_active and not tenant.property_id:
            raise ValidationError("An active tenant must be assigned to a property")
        if tenant.property_id and not any(p.id == tenant.property_id for p in properties):
            raise ReferentialIntegrityError(f"Property {tenant.property_id} not found")

    @staticmethod
    def _check_single_occupant(tenants: list[Tenant], tenant: Tenant) -> None:
        if not tenant.is_active:
            return
        for other in tenants:
            if other.id != tenant.id and other.is_active and other.property_id == tenant.property_id:
                raise PropertyAlreadyOccupiedError(
                    f"Property {tenant.property_id} already has active tenant {other.id}"
                )

    def _commit_tenancy(self, properties: list[Property], tenants: list[Tenant]) -> None:
        changes: dict[Collection, list] = {Collection.TENANTS: tenants}
        if properties != self.properties:
            changes = {Collection.PROPERTIES: properties, **changes}
        self.store.put_many(changes)

    def create_tenant(
        self,
        first_name: str,
        last_name: str,
        email: str,
        property_id: str | None,
        lease_start_date: date | str,
        lease_end_date: date | str,
        rent_amount: Decimal | int | str,
        phone: str = "",
        security_deposit: Decimal | int | str = 0,
        emergency_contact: EmergencyContact | dict | None = None,
        notes: str = "",
        is_active: bool = True,
    ) -> Tenant:
        """Add a tenant and, if active, occupy their property."""
        fields = self._coerce_tenant_fields(
            {
                "lease_start_date": lease_start_date,
                "lease_end_date": lease_end_date,
                "rent_amount": rent_amount,
                "security_deposit": security_deposit,
                "emergency_contact": emergency_contact,
                "property_id": property_id,
                "is_active": is_active,
            }
        )
        now = self.clock.now()
        tenant = Tenant(
            id=self.store.next_id(),
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
            notes=notes,
            created_at=now,
            updated_at=now,
            **fields,
        )

        properties = self.properties
        tenants = self.tenants
        self._validate_tenant(tenant, properties)
        self._check_single_occupant(tenants, tenant)
        if tenant.is_active:
            properties = self.reconciler.assign_tenant(properties, tenant.property_id, tenant.id)

        self._commit_tenancy(properties, tenants + [tenant])
        logger.info("Tenant %s (%s) created", tenant.id, tenant.full_name)
        return tenant

    def update_tenant(self, tenant_id: str, **changes: Any) -> Tenant:
        """Edit a tenant; property changes and (de)activation move occupancy along."""
        _check_unknown(changes, TENANT_FIELDS)
        current = self.get_tenant(tenant_id)
        updated = replace(current, **self._coerce_tenant_fields(changes), updated_at=self.clock.now())

        properties = self.properties
        tenants = self.tenants
        self._validate_tenant(updated, properties)
        self._check_single_occupant(tenants, updated)

        if current.is_active and updated.is_active:
            properties = self.reconciler.transfer_tenant(
                properties, tenant_id, current.property_id, updated.property_id
            )
        elif current.is_active:
            properties = self.reconciler.release_tenant(properties, current.property_id)
        elif updated.is_active:
            properties = self.reconciler.assign_tenant(properties, updated.property_id, tenant_id)

        self._commit_tenancy(properties, self._replace_by_id(tenants, updated))
        logger.info("Tenant %s updated: %s", tenant_id, ", ".join(sorted(changes)))
        return updated

    def end_tenancy(self, tenant_id: str) -> Tenant:
        """Deactivate a tenant, freeing their property."""
        return self.update_tenant(tenant_id, is_active=False)

    def delete_tenant(self, tenant_id: str) -> None:
        """Remove a tenant, releasing their property. Payment history is kept."""
        self.delete_tenants([tenant_id])

    def delete_tenants(self, tenant_ids: list[str]) -> None:
        """Remove several tenants in one write. Unknown ids abort the whole call."""
        tenants = self.tenants
        known = {t.id: t for t in tenants}
        missing = [tid for tid in tenant_ids if tid not in known]
        if missing:
            raise EntityNotFoundError(f"Tenants not found: {', '.join(missing)}", Collection.TENANTS.value)

        properties = self.properties
        doomed = set(tenant_ids)
        for tid in tenant_ids:
            tenant = known[tid]
            if tenant.is_active:
                properties = self.reconciler.release_tenant(properties, tenant.property_id)

        self._commit_tenancy(properties, [t for t in tenants if t.id not in doomed])
        logger.info("Deleted %d tenant(s): %s", len(doomed), ", ".join(tenant_ids))

    # -- payments ------------------------------------------------------------

    def _next_receipt_number(self, payments: list[Payment]) -> str:
        taken = {p.receipt_number for p in payments}
        sequence = len(payments) + 1
        while f"RCP-{sequence:06d}" in taken:
            sequence += 1
        return f"RCP-{sequence:06d}"

    def record_payment(
        self,
        tenant_id: str,
        amount: Decimal | int | str,
        payment_date: date | str,
        due_date: date | str | None = None,
        payment_method: PaymentMethod | str = PaymentMethod.BANK_TRANSFER,
        status: PaymentStatus | str = PaymentStatus.PAID,
        notes: str = "",
        property_id: str | None = None,
    ) -> Payment:
        """Record a payment from a tenant for the property they rent."""
        _require(tenant_id, "tenant_id")
        tenant = self.store.find(Collection.TENANTS, tenant_id)
        if tenant is None:
            raise ReferentialIntegrityError(f"Tenant {tenant_id} not found")
        if property_id is not None and property_id != tenant.property_id:
            raise ValidationError(
                f"Payment property {property_id} does not match tenant property {tenant.property_id}"
            )

        value = _money(amount, "amount")
        if value <= 0:
            raise ValidationError("amount must be greater than zero")
        paid_on = _date(payment_date, "payment_date")

        payments = self.payments
        payment = Payment(
            id=self.store.next_id(),
            tenant_id=tenant.id,
            property_id=tenant.property_id,
            amount=value,
            payment_date=paid_on,
            due_date=_date(due_date, "due_date") if due_date is not None else paid_on,
            payment_method=_enum(PaymentMethod, payment_method, "payment_method"),
            status=_enum(PaymentStatus, status, "status"),
            receipt_number=self._next_receipt_number(payments),
            notes=notes,
            created_at=self.clock.now(),
        )

        self.store.put(Collection.PAYMENTS, payments + [payment])
        logger.info("Payment %s recorded for tenant %s, receipt %s", payment.id, tenant.id, payment.receipt_number)
        return payment

    def update_payment_status(self, payment_id: str, status: PaymentStatus | str) -> Payment:
        current = self.get_payment(payment_id)
        target = _enum(PaymentStatus, status, "status")
        if not current.status.can_transition_to(target):
            raise InvalidEntityStateError(
                f"Payment {payment_id} cannot move from {current.status.value} to {target.value}"
            )
        if target is current.status:
            return current

        updated = replace(current, status=target)
        self.store.put(Collection.PAYMENTS, self._replace_by_id(self.payments, updated))
        logger.info("Payment %s: %s -> %s", payment_id, current.status.value, target.value)
        return updated

    # -- notifications -------------------------------------------------------

    def system_notifications(self) -> list[Notification]:
        generated = self.synthesizer.generate(self.clock.now(), self.tenants, self.payments)
        return self.inbox.apply(generated)

    def list_notifications(self) -> list[Notification]:
        """Stored and synthesized notifications, newest first."""
        return merge_notifications(self.store.get(Collection.NOTIFICATIONS), self.system_notifications())

    def unread_count(self) -> int:
        return sum(1 for n in self.list_notifications() if not n.is_read)

    def create_notification(
        self,
        title: str,
        message: str,
        type: NotificationType | str = NotificationType.GENERAL,
        recipient_id: str = "landlord",
    ) -> Notification:
        _require(title, "title")
        notification = Notification(
            id=self.store.next_id(),
            type=_enum(NotificationType, type, "type"),
            title=title,
            message=message,
            recipient_id=recipient_id,
            created_at=self.clock.now(),
        )
        self.store.put(Collection.NOTIFICATIONS, self.store.get(Collection.NOTIFICATIONS) + [notification])
        return notification

    def _require_system_notification(self, notification_id: str) -> None:
        if not any(n.id == notification_id for n in self.system_notifications()):
            raise EntityNotFoundError(f"Notification {notification_id} not found", Collection.NOTIFICATIONS.value)

    def mark_notification_read(self, notification_id: str) -> None:
        if is_system_notification_id(notification_id):
            self._require_system_notification(notification_id)
            self.inbox.mark_read(notification_id)
            return

        current = self._get(Collection.NOTIFICATIONS, notification_id)
        if current.is_read:
            return
        stored = self._replace_by_id(self.store.get(Collection.NOTIFICATIONS), replace(current, is_read=True))
        self.store.put(Collection.NOTIFICATIONS, stored)

    def delete_notification(self, notification_id: str) -> None:
        if is_system_notification_id(notification_id):
            self._require_system_notification(notification_id)
            self.inbox.dismiss(notification_id)
            return

        self._get(Collection.NOTIFICATIONS, notification_id)
        stored = [n for n in self.store.get(Collection.NOTIFICATIONS) if n.id != notification_id]
        self.store.put(Collection.NOTIFICATIONS, stored)
        logger.info("Notification %s deleted", notification_id)

    def mark_all_notifications_read(self) -> int:
        """Mark everything read; returns how many notifications changed."""
        system_unread = [n.id for n in self.system_notifications() if not n.is_read]
        stored = self.store.get(Collection.NOTIFICATIONS)
        stored_unread = [n for n in stored if not n.is_read]

        if stored_unread:
            self.store.put(Collection.NOTIFICATIONS, [replace(n, is_read=True) for n in stored])
        for notification_id in system_unread:
            self.inbox.mark_read(notification_id)
        return len(system_unread) + len(stored_unread)

    # -- views ---------------------------------------------------------------

    def dashboard_stats(self) -> DashboardStats:
        return self.aggregator.dashboard_stats(self.clock.now(), self.properties, self.tenants, self.payments)

    def upcoming_items(self, limit: int | None = None) -> list[UpcomingItem]:
        return self.aggregator.upcoming_items(self.clock.now(), self.tenants, self.properties, limit)

    def monthly_income(self, months: int | None = None) -> list[MonthlyIncome]:
        return self.aggregator.monthly_income(
            self.payments, self.clock.now(), months or self.config.report.default_months
        )

    def repair_occupancy(self) -> list[str]:
        """Rebuild property bindings from active tenants; returns what was wrong."""
        properties = self.properties
        problems = self.reconciler.find_violations(properties, self.tenants)
        if problems:
            for problem in problems:
                logger.warning("Occupancy drift: %s", problem)
            self.store.put(Collection.PROPERTIES, self.reconciler.rebuild(properties, self.tenants))
        return problems
