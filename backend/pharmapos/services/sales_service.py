"""
Sale transaction engine.

create_sale and refund_sale each run as one unit of work against the shared
stock ledger: either every row change (sale header, items, stock) commits, or
none does. Tenant scope comes only from the pharmacy_id argument.

CONCURRENCY:
- Product rows are locked (ascending id) before the stock check, and the debit
  itself is a conditional UPDATE, so two sales racing for the last units of a
  product serialize and exactly one of them can win.
- refund_sale locks the sale row and branches on its status inside the same
  transaction that credits stock, so concurrent refunds credit once.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable

from flask import current_app

from ..errors import (
    AlreadyRefunded,
    InsufficientStock,
    ProductNotFound,
    SaleNotFound,
    ValidationError,
)
from ..extensions import db
from ..models import Sale, SaleItem
from ..models.sales import SALE_STATUS_COMPLETED, SALE_STATUS_REFUNDED
from ..validation import (
    MAX_MONEY,
    SaleItemRequest,
    coerce_int,
    parse_payment_method,
    parse_sale_items,
)
from pharmapos.time_utils import utcnow
from . import catalog_service, stock_service
from .concurrency import lock_for_update, unit_of_work


def _requested_by_product(items: list[SaleItemRequest]) -> dict[int, int]:
    # Insertion order follows the request, so errors name the first offender.
    totals: dict[int, int] = {}
    for item in items:
        totals[item.product_id] = totals.get(item.product_id, 0) + item.quantity
    return totals


def _check_availability(catalog: dict, requested: dict[int, int]) -> None:
    for product_id, qty in requested.items():
        entry = catalog.get(product_id)
        if entry is None:
            raise ProductNotFound(product_id)
        if entry.stock < qty:
            raise InsufficientStock(
                product_id,
                available=entry.stock,
                requested=qty,
                name=entry.name,
            )


def _build_item(pharmacy_id: int, item: SaleItemRequest, entry) -> SaleItem:
    unit_buy_price = entry.buy_price
    unit_sell_price = item.unit_sell_price

    if unit_sell_price < unit_buy_price:
        raise ValidationError(
            f"Sell price for {entry.name} is below its buy price",
            details={
                "product_id": item.product_id,
                "unit_sell_price": str(unit_sell_price),
                "unit_buy_price": str(unit_buy_price),
            },
        )

    total_sell_price = unit_sell_price * item.quantity
    if total_sell_price > MAX_MONEY:
        raise ValidationError(
            f"Line total for {entry.name} exceeds maximum of {MAX_MONEY}",
            details={"product_id": item.product_id, "total_sell_price": str(total_sell_price)},
        )

    return SaleItem(
        pharmacy_id=pharmacy_id,
        product_id=item.product_id,
        quantity=item.quantity,
        unit_sell_price=unit_sell_price,
        unit_buy_price=unit_buy_price,
        total_sell_price=total_sell_price,
        item_profit=(unit_sell_price - unit_buy_price) * item.quantity,
    )


def create_sale(pharmacy_id: int, items: Iterable[Any], payment_method: str) -> Sale:
    """
    Record a multi-item sale and debit stock, atomically.

    items: dicts with product_id, quantity, unit_sell_price (or
    SaleItemRequest). Unit cost is always taken from the catalog.

    Raises ValidationError, ProductNotFound, InsufficientStock or
    PersistenceError; on any of them no sale row, item row or stock change
    survives.
    """
    pharmacy_id = coerce_int("pharmacy_id", pharmacy_id)
    parsed = parse_sale_items(items)
    payment_method = parse_payment_method(payment_method)
    requested = _requested_by_product(parsed)

    try:
        with unit_of_work("create_sale"):
            catalog = catalog_service.lock_for_sale(pharmacy_id, requested.keys())
            _check_availability(catalog, requested)

            for product_id in sorted(requested):
                stock_service.debit_stock(pharmacy_id, product_id, requested[product_id])

            sale = Sale(
                pharmacy_id=pharmacy_id,
                payment_method=payment_method,
                status=SALE_STATUS_COMPLETED,
                total_amount=Decimal("0"),
                total_profit=Decimal("0"),
            )
            db.session.add(sale)
            db.session.flush()

            total_amount = Decimal("0")
            total_profit = Decimal("0")
            for item in parsed:
                line = _build_item(pharmacy_id, item, catalog[item.product_id])
                sale.items.append(line)
                total_amount += line.total_sell_price
                total_profit += line.item_profit

            if total_amount > MAX_MONEY:
                raise ValidationError(
                    f"Sale total exceeds maximum of {MAX_MONEY}",
                    details={"total_amount": str(total_amount)},
                )

            sale.total_amount = total_amount
            sale.total_profit = total_profit
            db.session.flush()
            sale_id = sale.id
    except (ProductNotFound, InsufficientStock) as exc:
        current_app.logger.warning(
            "Sale rejected for pharmacy %s: %s", pharmacy_id, exc.message
        )
        raise

    current_app.logger.info(
        "Sale %s completed for pharmacy %s: %d item(s), total=%s profit=%s",
        sale_id, pharmacy_id, len(parsed), total_amount, total_profit,
    )
    return get_sale(pharmacy_id, sale_id)


def refund_sale(pharmacy_id: int, sale_id: int) -> Sale:
    """
    Refund a completed sale: restore every item's stock and mark it refunded.

    Raises SaleNotFound, AlreadyRefunded (stock untouched) or
    PersistenceError.
    """
    pharmacy_id = coerce_int("pharmacy_id", pharmacy_id)
    sale_id = coerce_int("sale_id", sale_id)
    try:
        with unit_of_work("refund_sale"):
            sale = lock_for_update(
                db.session.query(Sale)
                .filter_by(id=sale_id, pharmacy_id=pharmacy_id)
                .populate_existing()
            ).first()
            if not sale:
                raise SaleNotFound(sale_id)

            if sale.status == SALE_STATUS_REFUNDED:
                raise AlreadyRefunded(sale_id)

            items = (
                db.session.query(SaleItem)
                .filter_by(sale_id=sale.id, pharmacy_id=pharmacy_id)
                .all()
            )
            restored: dict[int, int] = {}
            for item in items:
                restored[item.product_id] = restored.get(item.product_id, 0) + item.quantity

            for product_id in sorted(restored):
                stock_service.credit_stock(pharmacy_id, product_id, restored[product_id])

            sale.status = SALE_STATUS_REFUNDED
            sale.refunded_at = utcnow()
    except AlreadyRefunded:
        current_app.logger.warning(
            "Refund rejected for pharmacy %s: sale %s already refunded", pharmacy_id, sale_id
        )
        raise

    current_app.logger.info(
        "Sale %s refunded for pharmacy %s; stock restored for %d product(s)",
        sale_id, pharmacy_id, len(restored),
    )
    return get_sale(pharmacy_id, sale_id)


def get_sale(pharmacy_id: int, sale_id: int) -> Sale:
    """Committed sale with its items, scoped to the pharmacy."""
    pharmacy_id = coerce_int("pharmacy_id", pharmacy_id)
    sale_id = coerce_int("sale_id", sale_id)
    sale = (
        db.session.query(Sale)
        .filter_by(id=sale_id, pharmacy_id=pharmacy_id)
        .first()
    )
    if not sale:
        raise SaleNotFound(sale_id)
    return sale
