# Overview: Service-layer operations for dashboard metrics; encapsulates business logic and database work.

"""
Dashboard Metrics

Balances come straight from the stock ledger and reflect the current
state regardless of any date window. Movements (purchases, completed
transfers) are summed over the requested window.

    netMovement = purchases + transfersIn - transfersOut

With no base filter every completed transfer counts as both in and out,
so transfers net to zero across the whole network.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func

from armory.extensions import db
from armory.models import Purchase, Stock, Transfer


def _stock_totals(base_id: int | None) -> tuple[int, int, int]:
    query = db.session.query(
        func.coalesce(func.sum(Stock.opening_balance), 0),
        func.coalesce(func.sum(Stock.closing_balance), 0),
        func.coalesce(func.sum(Stock.assigned), 0),
    )
    if base_id is not None:
        query = query.filter(Stock.base_id == base_id)
    opening, closing, assigned = query.one()
    return int(opening), int(closing), int(assigned)


def _purchased_quantity(base_id: int | None, start: datetime | None, end: datetime | None) -> int:
    query = db.session.query(func.coalesce(func.sum(Purchase.quantity), 0))
    if base_id is not None:
        query = query.filter(Purchase.base_id == base_id)
    if start is not None:
        query = query.filter(Purchase.purchase_date >= start)
    if end is not None:
        query = query.filter(Purchase.purchase_date <= end)
    return int(query.scalar())


def _transferred_quantity(base_column, base_id: int | None, start: datetime | None, end: datetime | None) -> int:
    query = db.session.query(func.coalesce(func.sum(Transfer.quantity), 0)).filter(
        Transfer.status == "completed"
    )
    if base_id is not None:
        query = query.filter(base_column == base_id)
    if start is not None:
        query = query.filter(Transfer.transfer_date >= start)
    if end is not None:
        query = query.filter(Transfer.transfer_date <= end)
    return int(query.scalar())


def get_dashboard_metrics(
    base_id: int | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> dict:
    opening, closing, assigned = _stock_totals(base_id)
    purchases = _purchased_quantity(base_id, start, end)
    transfers_in = _transferred_quantity(Transfer.to_base_id, base_id, start, end)
    transfers_out = _transferred_quantity(Transfer.from_base_id, base_id, start, end)

    return {
        "openingBalance": opening,
        "closingBalance": closing,
        "netMovement": purchases + transfers_in - transfers_out,
        "assignedAssets": assigned,
        "breakdown": {
            "purchases": purchases,
            "transfersIn": transfers_in,
            "transfersOut": transfers_out,
        },
    }
