# Overview: Stock ledger mutation primitives; every change is a single conditional UPDATE.

"""
Stock ledger.

Stock is never modified with a read-then-write pair. A debit is

    UPDATE products SET stock = stock - :q
    WHERE id = :id AND pharmacy_id = :pharmacy AND stock >= :q

and the affected-row count decides the outcome, so concurrent debits of the
same product cannot drive stock negative even without a prior row lock.

These functions do not commit; they run inside the caller's unit of work.
"""

from __future__ import annotations

from sqlalchemy import update

from ..errors import InsufficientStock, ProductNotFound
from ..extensions import db
from ..models import Product


def _expire_cached(product_id: int) -> None:
    # Bulk UPDATE bypasses the identity map; drop any stale loaded copy.
    cached = db.session.identity_map.get(db.session.identity_key(Product, product_id))
    if cached is not None:
        db.session.expire(cached, ["stock", "version_id", "updated_at"])


def get_stock(pharmacy_id: int, product_id: int) -> int:
    stock = (
        db.session.query(Product.stock)
        .filter_by(id=product_id, pharmacy_id=pharmacy_id)
        .scalar()
    )
    if stock is None:
        raise ProductNotFound(product_id)
    return stock


def debit_stock(pharmacy_id: int, product_id: int, quantity: int) -> None:
    """Decrement stock by quantity, only if that much is on hand."""
    if quantity <= 0:
        raise ValueError("quantity must be positive")

    result = db.session.execute(
        update(Product)
        .where(
            Product.id == product_id,
            Product.pharmacy_id == pharmacy_id,
            Product.stock >= quantity,
        )
        .values(stock=Product.stock - quantity, version_id=Product.version_id + 1)
        .execution_options(synchronize_session=False)
    )
    _expire_cached(product_id)

    if result.rowcount == 1:
        return

    # Nothing matched: either the product is gone or stock is short.
    available = get_stock(pharmacy_id, product_id)
    raise InsufficientStock(product_id, available=available, requested=quantity)


def credit_stock(pharmacy_id: int, product_id: int, quantity: int) -> None:
    """Increment stock by quantity (refunds)."""
    if quantity <= 0:
        raise ValueError("quantity must be positive")

    result = db.session.execute(
        update(Product)
        .where(Product.id == product_id, Product.pharmacy_id == pharmacy_id)
        .values(stock=Product.stock + quantity, version_id=Product.version_id + 1)
        .execution_options(synchronize_session=False)
    )
    _expire_cached(product_id)

    if result.rowcount != 1:
        raise ProductNotFound(product_id)
