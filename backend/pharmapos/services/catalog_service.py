"""
Catalog lookup: tenant-scoped reads of product price, stock and existence.

The *_for_sale functions lock the product rows they return and must be called
inside the unit of work that subsequently debits stock, so the values checked
are the values the debit acts on.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from ..errors import ProductNotFound
from ..extensions import db
from ..models import Product
from .concurrency import lock_for_update


@dataclass(frozen=True)
class CatalogEntry:
    """Snapshot of the product fields a sale needs."""
    product_id: int
    name: str
    buy_price: Decimal
    sell_price: Decimal
    stock: int

    @classmethod
    def from_product(cls, product: Product) -> "CatalogEntry":
        return cls(
            product_id=product.id,
            name=product.name,
            buy_price=Decimal(product.buy_price),
            sell_price=Decimal(product.sell_price),
            stock=product.stock,
        )


def lock_for_sale(pharmacy_id: int, product_ids: Iterable[int]) -> dict[int, CatalogEntry]:
    """
    Lock and read the given products of one pharmacy.

    Rows are locked in ascending id order so two sales touching the same
    products cannot deadlock. Ids that do not exist in this pharmacy are
    simply absent from the result.
    """
    ids = sorted(set(product_ids))
    if not ids:
        return {}

    query = (
        db.session.query(Product)
        .filter(Product.pharmacy_id == pharmacy_id, Product.id.in_(ids))
        .order_by(Product.id)
        .populate_existing()
    )
    products = lock_for_update(query).all()
    return {p.id: CatalogEntry.from_product(p) for p in products}


def get_for_sale(pharmacy_id: int, product_id: int) -> CatalogEntry:
    """Locked single-product lookup; raises ProductNotFound."""
    entry = lock_for_sale(pharmacy_id, [product_id]).get(product_id)
    if entry is None:
        raise ProductNotFound(product_id)
    return entry


def get_product(pharmacy_id: int, product_id: int) -> Product:
    product = (
        db.session.query(Product)
        .filter_by(id=product_id, pharmacy_id=pharmacy_id)
        .first()
    )
    if not product:
        raise ProductNotFound(product_id)
    return product


def find_by_barcode(pharmacy_id: int, barcode: str) -> Product | None:
    """Scanner lookup. Empty barcodes never match."""
    barcode = (barcode or "").strip()
    if not barcode:
        return None
    return (
        db.session.query(Product)
        .filter_by(pharmacy_id=pharmacy_id, barcode=barcode)
        .first()
    )
