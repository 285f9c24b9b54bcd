"""Entity store: canonical collections persisted through a key-value backend."""

import json
import logging
import uuid
from dataclasses import replace
from enum import Enum
from typing import Any, Callable, Mapping

from rentdesk.clock import Clock
from rentdesk.exceptions import RentDeskError, StorageUnavailableError
from rentdesk.generators.seed import SeedData, SeedDataGenerator
from rentdesk.models import Property, PropertyStatus, User
from rentdesk.store.backends import StorageBackend
from rentdesk.store.serialization import (
    notification_from_dict,
    payment_from_dict,
    property_from_dict,
    tenant_from_dict,
    to_dict,
    user_from_dict,
)

logger = logging.getLogger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


class Collection(str, Enum):
    """Stored collections; each value is the suffix of its backend key."""

    PROPERTIES = "properties"
    TENANTS = "tenants"
    PAYMENTS = "payments"
    NOTIFICATIONS = "notifications"
    USERS = "users"


_DECODERS: dict[Collection, Callable[[dict], Any]] = {
    Collection.PROPERTIES: property_from_dict,
    Collection.TENANTS: tenant_from_dict,
    Collection.PAYMENTS: payment_from_dict,
    Collection.NOTIFICATIONS: notification_from_dict,
    Collection.USERS: user_from_dict,
}


def _to_base36(number: int) -> str:
    digits = []
    while True:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
        if number == 0:
            return "".join(reversed(digits))


class EntityStore:
    """In-memory view of every collection, written through to a backend.

    Each collection lives under its own backend key as a JSON array. Reads
    are served from an in-memory cache filled on first access; writes update
    the cache first and then persist, restoring the cache if persisting
    fails so that what callers see always matches what is stored. Properties
    loaded as occupied but unbound (older exports) are bound to their active
    tenant; the binding is persisted with the next properties write.

    Parameters
    ----------
    backend : StorageBackend
        Key-value medium.
    clock : Clock
        Source of timestamps for ids and seed data.
    seeder : SeedDataGenerator | None
        When given, a collection whose key has never been written is filled
        with the seeder's records on first read. An explicitly stored empty
        collection is left empty.
    key_prefix : str
        Prefix for backend keys (``rental_properties`` etc.).
    """

    def __init__(
        self,
        backend: StorageBackend,
        clock: Clock,
        seeder: SeedDataGenerator | None = None,
        key_prefix: str = "rental_",
    ) -> None:
        self.backend = backend
        self.clock = clock
        self.seeder = seeder
        self.key_prefix = key_prefix
        self._cache: dict[Collection, list] = {}
        self._seed: SeedData | None = None

    def key(self, collection: Collection) -> str:
        return f"{self.key_prefix}{collection.value}"

    # -- reading -------------------------------------------------------------

    def get(self, collection: Collection) -> list:
        """Return the records of ``collection`` in stored order.

        The returned list is a copy; mutate records through :meth:`put`.
        """
        if collection not in self._cache:
            records = self._load(collection)
            if collection is Collection.PROPERTIES:
                records = self._bind_occupants(records)
            self._cache[collection] = records
        return list(self._cache[collection])

    def find(self, collection: Collection, entity_id: str) -> Any | None:
        """Return the record with ``entity_id`` or ``None``."""
        for record in self.get(collection):
            if record.id == entity_id:
                return record
        return None

    def get_user(self) -> User | None:
        users = self.get(Collection.USERS)
        return users[0] if users else None

    def reload(self, collection: Collection | None = None) -> None:
        """Drop cached records so the next read goes back to the backend."""
        if collection is None:
            self._cache.clear()
        else:
            self._cache.pop(collection, None)

    def _load(self, collection: Collection) -> list:
        key = self.key(collection)
        raw = self.backend.read(key)

        if raw is None:
            if self.seeder is None:
                return []
            records = self._seed_data().for_collection(collection.value)
            logger.info("Seeding %s with %d sample records", collection.value, len(records))
            self.backend.write(key, self._encode(records))
            return records

        try:
            items = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageUnavailableError(f"Stored {collection.value} is not valid JSON: {exc}") from exc

        decode = _DECODERS[collection]
        try:
            return [decode(item) for item in items]
        except (RentDeskError, ValueError, TypeError, AttributeError) as exc:
            raise StorageUnavailableError(f"Stored {collection.value} contains an invalid record: {exc}") from exc

    def _bind_occupants(self, properties: list[Property]) -> list[Property]:
        """Fill the tenant binding of properties stored as occupied without one.

        Older exports only carry an ``isAvailable`` flag. Such a property is
        bound to the first active tenant referencing it, or made available
        when there is none. Bound or unoccupied properties pass unchanged.
        """
        unbound = [p for p in properties if p.is_occupied and p.tenant_id is None]
        if not unbound:
            return properties

        occupant: dict[str, str] = {}
        for tenant in self.get(Collection.TENANTS):
            if tenant.is_active and tenant.property_id:
                occupant.setdefault(tenant.property_id, tenant.id)

        bound = []
        for prop in properties:
            if prop.is_occupied and prop.tenant_id is None:
                tenant_id = occupant.get(prop.id)
                if tenant_id is None:
                    logger.warning("Property %s is marked occupied without an active tenant", prop.id)
                    prop = replace(prop, status=PropertyStatus.AVAILABLE)
                else:
                    logger.info("Property %s bound to tenant %s", prop.id, tenant_id)
                    prop = replace(prop, tenant_id=tenant_id)
            bound.append(prop)
        return bound

    def _seed_data(self) -> SeedData:
        # One seed per store so cross-collection references line up
        if self._seed is None:
            self._seed = self.seeder.generate(self.clock.now())
        return self._seed

    # -- writing -------------------------------------------------------------

    def put(self, collection: Collection, records: list) -> None:
        """Replace ``collection`` with ``records``.

        Raises
        ------
        StorageUnavailableError
            If the backend write fails. The in-memory collection is restored
            to its previous contents before the error propagates.
        """
        self.put_many({collection: records})

    def put_many(self, changes: Mapping[Collection, list]) -> None:
        """Replace several collections as one unit.

        Keys already written when a later write fails are rewritten with
        their previous contents, and the cache is restored for all of them.
        """
        previous = {collection: self.get(collection) for collection in changes}

        for collection, records in changes.items():
            self._cache[collection] = list(records)

        written: list[Collection] = []
        try:
            for collection, records in changes.items():
                self.backend.write(self.key(collection), self._encode(records))
                written.append(collection)
        except StorageUnavailableError:
            logger.error(
                "Persisting %s failed; rolling back",
                ", ".join(c.value for c in changes),
            )
            self._cache.update(previous)
            for collection in written:
                try:
                    self.backend.write(self.key(collection), self._encode(previous[collection]))
                except StorageUnavailableError:
                    logger.error("Could not restore %s; cache dropped", collection.value)
                    self._cache.pop(collection, None)
            raise

    @staticmethod
    def _encode(records: list) -> str:
        return json.dumps([to_dict(record) for record in records], ensure_ascii=False)

    # -- ids -----------------------------------------------------------------

    def next_id(self) -> str:
        """Return a new identifier: base-36 milliseconds plus a random suffix.

        The random part keeps ids distinct when several are generated within
        the same millisecond.
        """
        millis = int(self.clock.now().timestamp() * 1000)
        return _to_base36(millis) + uuid.uuid4().hex[:10]

    def summary(self) -> dict[str, int]:
        """Return counts of every collection."""
        return {collection.value: len(self.get(collection)) for collection in Collection}
