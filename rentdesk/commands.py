"""UI command layer: every command returns a ``CommandResult`` instead of raising."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, TypeVar

from rentdesk.exceptions import (
    EntityNotFoundError,
    PropertyAlreadyOccupiedError,
    RentDeskError,
    StorageUnavailableError,
    ValidationError,
)
from rentdesk.manager import RentalManager
from rentdesk.store import Collection

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FailureReason(str, Enum):
    VALIDATION = "validation"
    PROPERTY_ALREADY_OCCUPIED = "property_already_occupied"
    NOT_FOUND = "not_found"
    STORAGE_UNAVAILABLE = "storage_unavailable"


# Most specific first
_REASONS: list[tuple[type[RentDeskError], FailureReason]] = [
    (PropertyAlreadyOccupiedError, FailureReason.PROPERTY_ALREADY_OCCUPIED),
    (ValidationError, FailureReason.VALIDATION),
    (EntityNotFoundError, FailureReason.NOT_FOUND),
    (StorageUnavailableError, FailureReason.STORAGE_UNAVAILABLE),
]


@dataclass
class CommandResult(Generic[T]):
    """Outcome of one UI command."""

    ok: bool
    value: T | None = None
    reason: FailureReason | None = None
    message: str = ""

    @property
    def should_retry(self) -> bool:
        """Storage failures leave state intact; the user may simply try again."""
        return self.reason is FailureReason.STORAGE_UNAVAILABLE


def failure_reason(error: RentDeskError) -> FailureReason:
    for error_type, reason in _REASONS:
        if isinstance(error, error_type):
            return reason
    return FailureReason.VALIDATION


class ConsoleCommands:
    """The named operations the console's pages invoke.

    Wraps a :class:`RentalManager`; domain errors become failed results and
    are logged. A ``NOT_FOUND`` failure also drops the cached collection so
    the next read reflects storage.
    """

    def __init__(self, manager: RentalManager) -> None:
        self.manager = manager

    def _run(self, command: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> CommandResult[T]:
        try:
            value = func(*args, **kwargs)
        except RentDeskError as exc:
            reason = failure_reason(exc)
            level = logging.ERROR if reason is FailureReason.STORAGE_UNAVAILABLE else logging.WARNING
            logger.log(level, "%s rejected: %s", command, exc, extra={"command": command, "reason": reason.value})
            if isinstance(exc, EntityNotFoundError):
                self._reload(exc.collection)
            return CommandResult(ok=False, reason=reason, message=str(exc))
        return CommandResult(ok=True, value=value)

    def _reload(self, collection_name: str | None) -> None:
        if collection_name is None:
            self.manager.store.reload()
        else:
            self.manager.store.reload(Collection(collection_name))

    # Properties
    def create_property(self, **fields: Any) -> CommandResult:
        return self._run("create_property", self.manager.create_property, **fields)

    def update_property(self, property_id: str, **changes: Any) -> CommandResult:
        return self._run("update_property", self.manager.update_property, property_id, **changes)

    def delete_property(self, property_id: str) -> CommandResult:
        return self._run("delete_property", self.manager.delete_property, property_id)

    # Tenants
    def create_tenant(self, **fields: Any) -> CommandResult:
        return self._run("create_tenant", self.manager.create_tenant, **fields)

    def update_tenant(self, tenant_id: str, **changes: Any) -> CommandResult:
        return self._run("update_tenant", self.manager.update_tenant, tenant_id, **changes)

    def delete_tenant(self, tenant_id: str) -> CommandResult:
        return self._run("delete_tenant", self.manager.delete_tenant, tenant_id)

    def delete_tenants(self, tenant_ids: list[str]) -> CommandResult:
        return self._run("delete_tenants", self.manager.delete_tenants, tenant_ids)

    # Payments
    def record_payment(self, **fields: Any) -> CommandResult:
        return self._run("record_payment", self.manager.record_payment, **fields)

    def update_payment_status(self, payment_id: str, status: str) -> CommandResult:
        return self._run("update_payment_status", self.manager.update_payment_status, payment_id, status)

    # Notifications
    def mark_notification_read(self, notification_id: str) -> CommandResult:
        return self._run("mark_notification_read", self.manager.mark_notification_read, notification_id)

    def delete_notification(self, notification_id: str) -> CommandResult:
        return self._run("delete_notification", self.manager.delete_notification, notification_id)

    def mark_all_notifications_read(self) -> CommandResult:
        return self._run("mark_all_notifications_read", self.manager.mark_all_notifications_read)
