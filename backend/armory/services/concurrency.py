# Overview: Service-layer operations for concurrency; encapsulates business logic and database work.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


RETRYABLE_ERRORS = (OperationalError, StaleDataError)


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts on versioned rows such as Stock).
    func must be safe to re-run from scratch after a rollback.
    """
    for attempt in range(attempts):
        try:
            return func()
        except RETRYABLE_ERRORS:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            current_app.logger.warning(
                "Concurrent update conflict, retrying (attempt %d of %d)", attempt + 1, attempts
            )
            time.sleep(backoff_base * (2 ** attempt))


def run_in_transaction(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Run func and commit its writes as one unit.

    Any exception rolls the whole unit back, so a transaction row is never
    persisted without its ledger delta and audit entry. Concurrency
    conflicts re-run func from the start.
    """
    def _op():
        try:
            result = func()
            db.session.commit()
            return result
        except Exception:
            db.session.rollback()
            raise

    return run_with_retry(_op, attempts=attempts, backoff_base=backoff_base)
