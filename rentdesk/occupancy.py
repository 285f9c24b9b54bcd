"""Keep property occupancy consistent with tenant assignments."""

import logging
from dataclasses import replace

from rentdesk.clock import Clock
from rentdesk.exceptions import (
    InvalidEntityStateError,
    PropertyAlreadyOccupiedError,
    ReferentialIntegrityError,
)
from rentdesk.models import Property, PropertyStatus, Tenant

logger = logging.getLogger(__name__)


class OccupancyReconciler:
    """Apply tenancy changes to a property collection.

    Methods take the current property list and return a new list with the
    change applied; the input list and its records are never modified. A
    method either returns the fully updated list or raises, so a rejected
    change leaves nothing half-applied.
    """

    def __init__(self, clock: Clock) -> None:
        self.clock = clock

    @staticmethod
    def _index(properties: list[Property], property_id: str) -> int | None:
        for i, prop in enumerate(properties):
            if prop.id == property_id:
                return i
        return None

    def check_assignable(self, properties: list[Property], property_id: str, tenant_id: str) -> int:
        """Validate that ``tenant_id`` may move into ``property_id``.

        Returns the index of the property in ``properties``.
        """
        idx = self._index(properties, property_id)
        if idx is None:
            raise ReferentialIntegrityError(f"Property {property_id} not found")

        prop = properties[idx]
        if prop.tenant_id is not None and prop.tenant_id != tenant_id:
            raise PropertyAlreadyOccupiedError(
                f"Property {property_id} is already occupied by tenant {prop.tenant_id}"
            )
        if prop.tenant_id is None and prop.is_occupied:
            raise PropertyAlreadyOccupiedError(f"Property {property_id} is marked occupied")
        if prop.status is PropertyStatus.MAINTENANCE:
            raise InvalidEntityStateError(f"Property {property_id} is under maintenance")
        return idx

    def assign_tenant(self, properties: list[Property], property_id: str, tenant_id: str) -> list[Property]:
        """Mark ``property_id`` occupied by ``tenant_id``."""
        idx = self.check_assignable(properties, property_id, tenant_id)
        prop = properties[idx]
        if prop.tenant_id == tenant_id and prop.is_occupied:
            return list(properties)

        updated = list(properties)
        updated[idx] = replace(
            prop,
            status=PropertyStatus.OCCUPIED,
            tenant_id=tenant_id,
            updated_at=self.clock.now(),
        )
        logger.info("Tenant %s assigned to property %s", tenant_id, property_id)
        return updated

    def release_tenant(self, properties: list[Property], property_id: str | None) -> list[Property]:
        """Mark ``property_id`` available and unbound. Idempotent."""
        idx = self._index(properties, property_id) if property_id else None
        if idx is None:
            return list(properties)

        prop = properties[idx]
        if prop.tenant_id is None and not prop.is_occupied:
            return list(properties)

        updated = list(properties)
        updated[idx] = replace(
            prop,
            status=PropertyStatus.AVAILABLE,
            tenant_id=None,
            updated_at=self.clock.now(),
        )
        logger.info("Property %s released (was tenant %s)", property_id, prop.tenant_id)
        return updated

    def transfer_tenant(
        self,
        properties: list[Property],
        tenant_id: str,
        old_property_id: str | None,
        new_property_id: str,
    ) -> list[Property]:
        """Move ``tenant_id`` from ``old_property_id`` to ``new_property_id``.

        The destination is validated before either side changes; on failure
        the old property stays occupied.
        """
        if old_property_id == new_property_id:
            return self.assign_tenant(properties, new_property_id, tenant_id)

        self.check_assignable(properties, new_property_id, tenant_id)
        released = self.release_tenant(properties, old_property_id)
        return self.assign_tenant(released, new_property_id, tenant_id)

    def find_violations(self, properties: list[Property], tenants: list[Tenant]) -> list[str]:
        """Describe every disagreement between property bindings and active tenants."""
        problems = []
        active_by_property: dict[str, list[str]] = {}
        for tenant in tenants:
            if tenant.is_active and tenant.property_id:
                active_by_property.setdefault(tenant.property_id, []).append(tenant.id)

        property_ids = {p.id for p in properties}
        for property_id, tenant_ids in active_by_property.items():
            if property_id not in property_ids:
                problems.append(f"Active tenants {tenant_ids} reference missing property {property_id}")
            elif len(tenant_ids) > 1:
                problems.append(f"Property {property_id} has {len(tenant_ids)} active tenants: {tenant_ids}")

        for prop in properties:
            tenant_ids = active_by_property.get(prop.id, [])
            expected = tenant_ids[0] if len(tenant_ids) == 1 else None
            if prop.tenant_id != expected:
                problems.append(f"Property {prop.id} is bound to {prop.tenant_id}, expected {expected}")
            elif expected is not None and not prop.is_occupied:
                problems.append(f"Property {prop.id} has tenant {expected} but status {prop.status.value}")
            elif expected is None and prop.is_occupied:
                problems.append(f"Property {prop.id} is marked occupied without an active tenant")
        return problems

    def rebuild(self, properties: list[Property], tenants: list[Tenant]) -> list[Property]:
        """Derive every binding from active tenants.

        When several active tenants point at one property, the earliest in
        ``tenants`` order keeps it. Properties under maintenance without a
        tenant keep their status.
        """
        owner: dict[str, str] = {}
        for tenant in tenants:
            if tenant.is_active and tenant.property_id and tenant.property_id not in owner:
                owner[tenant.property_id] = tenant.id

        now = self.clock.now()
        rebuilt = []
        for prop in properties:
            tenant_id = owner.get(prop.id)
            if tenant_id is not None:
                status = PropertyStatus.OCCUPIED
            elif prop.status is PropertyStatus.MAINTENANCE:
                status = PropertyStatus.MAINTENANCE
            else:
                status = PropertyStatus.AVAILABLE

            if status is prop.status and tenant_id == prop.tenant_id:
                rebuilt.append(prop)
            else:
                rebuilt.append(replace(prop, status=status, tenant_id=tenant_id, updated_at=now))
        return rebuilt
