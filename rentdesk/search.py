"""Case-insensitive list filters behind the search boxes of each page."""

from rentdesk.aggregation import UNKNOWN_PROPERTY
from rentdesk.exceptions import ValidationError
from rentdesk.models import Payment, PaymentStatus, Property, Tenant


def _matches(term: str, *fields: str) -> bool:
    needle = term.strip().lower()
    return not needle or any(needle in (field or "").lower() for field in fields)


def filter_properties(properties: list[Property], term: str = "") -> list[Property]:
    """Match on address, city or property type."""
    return [p for p in properties if _matches(term, p.address, p.city, p.type.value)]


def filter_tenants(tenants: list[Tenant], term: str = "") -> list[Tenant]:
    """Match on full name or email."""
    return [t for t in tenants if _matches(term, f"{t.full_name} {t.email}")]


def filter_payments(
    payments: list[Payment],
    tenants: list[Tenant],
    properties: list[Property],
    term: str = "",
    status: PaymentStatus | str | None = None,
) -> list[Payment]:
    """Match on tenant name, property address or receipt number, optionally by status.

    ``status`` of ``None`` or ``"all"`` keeps every status.
    """
    names = {t.id: t.full_name for t in tenants}
    addresses = {p.id: p.display_address for p in properties}
    wanted = None
    if status not in (None, "all"):
        try:
            wanted = PaymentStatus(status)
        except ValueError as exc:
            raise ValidationError(f"Unknown payment status: {status!r}") from exc

    return [
        p
        for p in payments
        if (wanted is None or p.status is wanted)
        and _matches(
            term,
            names.get(p.tenant_id, "Unknown Tenant"),
            addresses.get(p.property_id, UNKNOWN_PROPERTY),
            p.receipt_number,
        )
    ]
