# Overview: Unit-of-work and row-locking helpers shared by the stock and sale services.

from __future__ import annotations

from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import PersistenceError, SaleError
from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; unit_of_work() takes the
    database write lock up front there instead.
    """
    return query.with_for_update()


def _begin(session) -> None:
    conn = session.connection()
    dialect = conn.dialect.name

    if dialect == "sqlite":
        # Serialize writers for the whole unit of work. Skipped when the
        # driver already has a write transaction open on this connection.
        if not conn.connection.dbapi_connection.in_transaction:
            conn.exec_driver_sql("BEGIN IMMEDIATE")
    elif dialect == "postgresql":
        timeout_ms = int(current_app.config.get("STOCK_LOCK_TIMEOUT_MS") or 0)
        if timeout_ms > 0:
            conn.exec_driver_sql(f"SET LOCAL lock_timeout = {timeout_ms}")


@contextmanager
def unit_of_work(operation: str):
    """
    Run a block as one all-or-nothing transaction on db.session.

    Commits when the block finishes. Any exception rolls the whole
    transaction back before it propagates; SQLAlchemy failures (including
    lock timeouts and failed commits) surface as PersistenceError. Nothing is
    retried here.
    """
    session = db.session
    try:
        _begin(session)
        yield session
        session.commit()
    except SaleError:
        session.rollback()
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        current_app.logger.exception("%s failed; transaction rolled back", operation)
        raise PersistenceError(
            f"{operation} failed: database error",
            details={"operation": operation, "cause": type(exc).__name__},
        ) from exc
    except BaseException:
        session.rollback()
        raise
