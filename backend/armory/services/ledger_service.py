# Overview: Service-layer operations for the stock ledger; encapsulates business logic and database work.

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Stock
from ..validation import MAX_INT
from .concurrency import lock_for_update

"""
Stock Ledger Invariants (authoritative)

- One Stock row per (base_id, asset_id).
- closing_balance, assigned and expended never go negative: decrements are
  clamped at zero, they do not fail the transaction.
- Increments that would push a counter past MAX_INT raise StockLimitError
  (409) and roll the whole transaction back.
- Ledger functions never commit. They mutate the locked row inside the
  caller's transaction so the transaction record, the ledger delta and the
  audit entry land together or not at all.
- A missing Stock row is handled per STOCK_MISSING_ROW_POLICY:
    skip   -> no ledger effect, warning logged, function returns None
    create -> row created with zero balances, then the delta is applied
    fail   -> StockRowMissingError
"""

MISSING_ROW_SKIP = "skip"
MISSING_ROW_CREATE = "create"
MISSING_ROW_FAIL = "fail"

_MISSING_ROW_POLICIES = {MISSING_ROW_SKIP, MISSING_ROW_CREATE, MISSING_ROW_FAIL}


class LedgerError(Exception):
    """Raised when a ledger update cannot be applied."""
    pass


class StockRowMissingError(LedgerError):
    """Raised under the 'fail' policy when no Stock row exists for a pair."""
    pass


class StockLimitError(LedgerError):
    """Raised when an increment would push a Stock counter past MAX_INT."""
    pass


def _missing_row_policy() -> str:
    policy = current_app.config.get("STOCK_MISSING_ROW_POLICY", MISSING_ROW_SKIP)
    if policy not in _MISSING_ROW_POLICIES:
        raise LedgerError(f"Unknown STOCK_MISSING_ROW_POLICY: {policy!r}")
    return policy


def get_stock(base_id: int, asset_id: int) -> Stock | None:
    return db.session.query(Stock).filter_by(base_id=base_id, asset_id=asset_id).first()


def list_stocks(base_id: int | None = None) -> list[Stock]:
    query = db.session.query(Stock)
    if base_id is not None:
        query = query.filter(Stock.base_id == base_id)
    return query.order_by(Stock.base_id.asc(), Stock.asset_id.asc()).all()


def _locked_stock(base_id: int, asset_id: int, *, event: str) -> Stock | None:
    stock = lock_for_update(
        db.session.query(Stock).filter_by(base_id=base_id, asset_id=asset_id)
    ).first()
    if stock is not None:
        return stock

    policy = _missing_row_policy()
    if policy == MISSING_ROW_FAIL:
        raise StockRowMissingError(
            f"No stock row for base {base_id} and asset {asset_id}; cannot apply {event}"
        )
    if policy == MISSING_ROW_SKIP:
        current_app.logger.warning(
            "Skipping %s: no stock row for base_id=%s asset_id=%s", event, base_id, asset_id
        )
        return None

    stock = Stock(
        base_id=base_id,
        asset_id=asset_id,
        opening_balance=0,
        closing_balance=0,
        assigned=0,
        expended=0,
    )
    db.session.add(stock)
    db.session.flush()
    current_app.logger.info("Created stock row for base_id=%s asset_id=%s", base_id, asset_id)
    return stock


def _decrement(current: int, quantity: int) -> int:
    return max(0, current - quantity)


def _increment(current: int, quantity: int, *, field: str) -> int:
    if current + quantity > MAX_INT:
        raise StockLimitError(f"{field} would exceed {MAX_INT:,}")
    return current + quantity


def apply_purchase(base_id: int, asset_id: int, quantity: int) -> Stock | None:
    """Purchased materiel arrives: closing_balance += quantity."""
    stock = _locked_stock(base_id, asset_id, event="purchase")
    if stock is None:
        return None

    stock.closing_balance = _increment(stock.closing_balance, quantity, field="closingBalance")
    db.session.flush()
    return stock


def apply_transfer_completion(
    from_base_id: int,
    to_base_id: int,
    asset_id: int,
    quantity: int,
) -> tuple[Stock | None, Stock | None]:
    """
    A transfer completes: the source loses up to `quantity` (clamped at 0),
    the destination gains the full `quantity`.

    Each side is resolved independently, so a missing row on one side does
    not block the other under the skip policy.
    """
    source = _locked_stock(from_base_id, asset_id, event="transfer out")
    destination = _locked_stock(to_base_id, asset_id, event="transfer in")

    if source is not None:
        source.closing_balance = _decrement(source.closing_balance, quantity)
    if destination is not None:
        destination.closing_balance = _increment(destination.closing_balance, quantity, field="closingBalance")

    db.session.flush()
    return source, destination


def apply_assignment_creation(base_id: int, asset_id: int, quantity: int) -> Stock | None:
    """Materiel goes out on assignment: assigned += q, closing_balance -= q (clamped)."""
    stock = _locked_stock(base_id, asset_id, event="assignment")
    if stock is None:
        return None

    stock.assigned = _increment(stock.assigned, quantity, field="assigned")
    stock.closing_balance = _decrement(stock.closing_balance, quantity)
    db.session.flush()
    return stock


def apply_assignment_expenditure(base_id: int, asset_id: int, quantity: int) -> Stock | None:
    """
    Assigned materiel is consumed: assigned -= q (clamped), expended += q.

    closing_balance is untouched; it already dropped when the assignment
    was created.
    """
    stock = _locked_stock(base_id, asset_id, event="expenditure")
    if stock is None:
        return None

    stock.assigned = _decrement(stock.assigned, quantity)
    stock.expended = _increment(stock.expended, quantity, field="expended")
    db.session.flush()
    return stock
