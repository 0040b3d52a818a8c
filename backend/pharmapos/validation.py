from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable

from .errors import ValidationError


PAYMENT_CASH = "cash"
PAYMENT_CARD = "card"
PAYMENT_TRANSFER = "transfer"
PAYMENT_METHODS = (PAYMENT_CASH, PAYMENT_CARD, PAYMENT_TRANSFER)

# Matches Numeric(10, 2): 99,999,999.99
MAX_MONEY = Decimal("99999999.99")
CENT = Decimal("0.01")

# Signed BIGINT, the widest integer every supported driver binds
MIN_INT = -(2 ** 63)
MAX_INT = 2 ** 63 - 1


@dataclass(frozen=True)
class SaleItemRequest:
    """One requested sale line, already normalized."""
    product_id: int
    quantity: int
    unit_sell_price: Decimal


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def money_to_str(value: Decimal | None) -> str | None:
    if value is None:
        return None
    return str(quantize_money(Decimal(value)))


def _parse_int(field: str, value: Any) -> int:
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer", details={"field": field})
        if 'e' in stripped.lower():
            raise ValidationError(
                f"{field} must be a plain integer (scientific notation not allowed)",
                details={"field": field},
            )
        if '.' in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)", details={"field": field})
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer", details={"field": field})
    if isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal", details={"field": field})
    raise ValidationError(f"{field} must be an integer", details={"field": field})


def coerce_int(field: str, value: Any) -> int:
    """
    Strict integer coercion.

    Accepts ints and plain digit strings within the signed 64-bit range the
    database can bind; rejects bools, floats, decimals and scientific
    notation.
    """
    number = _parse_int(field, value)
    if not MIN_INT <= number <= MAX_INT:
        raise ValidationError(
            f"{field} is out of range",
            details={"field": field, "value": str(number)},
        )
    return number


def coerce_money(field: str, value: Any) -> Decimal:
    """Parse a non-negative money amount and round it to cents."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", details={"field": field})
    if isinstance(value, float):
        # go through str() so 8.1 becomes Decimal("8.1"), not its binary expansion
        value = str(value)
    try:
        amount = Decimal(value.strip() if isinstance(value, str) else value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number", details={"field": field})
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number", details={"field": field})
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative", details={"field": field})
    amount = quantize_money(amount)
    if amount > MAX_MONEY:
        raise ValidationError(f"{field} exceeds maximum of {MAX_MONEY}", details={"field": field})
    return amount


def parse_payment_method(value: Any) -> str:
    if not isinstance(value, str) or value not in PAYMENT_METHODS:
        raise ValidationError(
            "Valid payment method is required (cash, card, transfer)",
            details={"payment_method": value, "allowed": list(PAYMENT_METHODS)},
        )
    return value


def _parse_item(index: int, raw: Any) -> SaleItemRequest:
    if isinstance(raw, SaleItemRequest):
        raw = {
            "product_id": raw.product_id,
            "quantity": raw.quantity,
            "unit_sell_price": raw.unit_sell_price,
        }
    if not isinstance(raw, dict):
        raise ValidationError(f"items[{index}] must be an object", details={"index": index})

    missing = [k for k in ("product_id", "quantity", "unit_sell_price") if raw.get(k) is None]
    if missing:
        raise ValidationError(
            f"items[{index}] is missing {', '.join(missing)}",
            details={"index": index, "missing": missing},
        )

    product_id = coerce_int("product_id", raw["product_id"])
    quantity = coerce_int("quantity", raw["quantity"])
    if quantity <= 0:
        raise ValidationError(
            "quantity must be greater than zero",
            details={"index": index, "product_id": product_id, "quantity": quantity},
        )
    price = coerce_money("unit_sell_price", raw["unit_sell_price"])
    return SaleItemRequest(product_id=product_id, quantity=quantity, unit_sell_price=price)


def parse_sale_items(items: Iterable[Any] | None) -> list[SaleItemRequest]:
    """
    Validate and normalize the item list of a sale request.

    Items may be dicts (``product_id``, ``quantity``, ``unit_sell_price``)
    or SaleItemRequest instances. The declared buy price, if a client sends
    one, is ignored: unit cost always comes from the catalog.
    """
    if items is None or isinstance(items, (str, bytes, dict)):
        raise ValidationError("Sale must contain at least one item")
    parsed = [_parse_item(i, raw) for i, raw in enumerate(items)]
    if not parsed:
        raise ValidationError("Sale must contain at least one item")
    return parsed
