"""Export-ready report structures.

These functions return plain dicts and lists of JSON-compatible values; turning
them into files (JSON, CSV, PDF) is left to the caller.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from rentdesk.aggregation import UNKNOWN_PROPERTY, TemporalAggregator
from rentdesk.config import ReportConfig
from rentdesk.exceptions import ValidationError
from rentdesk.models import Payment, Property, Tenant
from rentdesk.store.serialization import serialize_value


def build_income_report(
    now: datetime,
    properties: list[Property],
    tenants: list[Tenant],
    payments: list[Payment],
    months: int | None = None,
    config: ReportConfig | None = None,
    aggregator: TemporalAggregator | None = None,
) -> dict[str, Any]:
    """Income and occupancy summary over a trailing window of months.

    Parameters
    ----------
    months : int | None
        Window length; must be one of ``config.allowed_months``. Defaults to
        ``config.default_months``.

    Returns
    -------
    dict
        ``period``, ``generated_at``, ``summary``, ``monthly_income``,
        ``property_types`` and ``payment_status``.
    """
    config = config or ReportConfig()
    aggregator = aggregator or TemporalAggregator()
    months = months or config.default_months
    if months not in config.allowed_months:
        raise ValidationError(f"Report period must be one of {config.allowed_months}, got {months}")

    buckets = aggregator.monthly_income(payments, now, months)
    total_income = sum((b.income for b in buckets), Decimal("0"))
    average = (total_income / len(buckets)).quantize(Decimal("0.01"))

    report = {
        "period": f"{months}months",
        "generated_at": now,
        "summary": {
            "total_properties": len(properties),
            "occupied_properties": sum(1 for p in properties if p.is_occupied),
            "active_tenants": sum(1 for t in tenants if t.is_active),
            "total_income": total_income,
            "average_monthly_income": average,
            "occupancy_rate": round(aggregator.occupancy_rate(properties), 1),
        },
        "monthly_income": [
            {"month": b.label, "short_month": b.short_label, "income": b.income} for b in buckets
        ],
        "property_types": [
            {"type": s.type, "count": s.count, "income": s.occupied_rent}
            for s in aggregator.property_type_breakdown(properties)
        ],
        "payment_status": {
            status: {"count": r.count, "total": r.total}
            for status, r in aggregator.payment_status_rollup(payments).items()
        },
    }
    return serialize_value(_enum_keys(report))


def _enum_keys(data: dict) -> dict:
    """serialize_value leaves dict keys alone; flatten enum keys first."""
    return {
        getattr(k, "value", k): _enum_keys(v) if isinstance(v, dict) else v
        for k, v in data.items()
    }


def tenant_export_rows(tenants: list[Tenant], properties: list[Property]) -> list[dict[str, Any]]:
    """One flat row per tenant, as exported from the tenant list."""
    addresses = {p.id: p.display_address for p in properties}
    return [
        serialize_value(
            {
                "name": t.full_name,
                "email": t.email,
                "phone": t.phone,
                "property": addresses.get(t.property_id, UNKNOWN_PROPERTY),
                "lease_start_date": t.lease_start_date,
                "lease_end_date": t.lease_end_date,
                "rent_amount": t.rent_amount,
                "status": "active" if t.is_active else "inactive",
            }
        )
        for t in tenants
    ]


def payment_export_rows(
    payments: list[Payment], tenants: list[Tenant], properties: list[Property]
) -> list[dict[str, Any]]:
    """One flat row per payment with tenant and property resolved."""
    names = {t.id: t.full_name for t in tenants}
    addresses = {p.id: p.display_address for p in properties}
    return [
        serialize_value(
            {
                "receipt_number": p.receipt_number,
                "tenant": names.get(p.tenant_id, "Unknown Tenant"),
                "property": addresses.get(p.property_id, UNKNOWN_PROPERTY),
                "amount": p.amount,
                "payment_date": p.payment_date,
                "due_date": p.due_date,
                "method": p.payment_method,
                "status": p.status,
            }
        )
        for p in payments
    ]
