# Overview: Error taxonomy raised by the sale transaction engine.

"""
Sale engine errors.

Every error raised out of create_sale / refund_sale is terminal for that call
and is raised only after the unit of work has rolled back, so no partial
effect survives it. Each error carries a structured ``details`` dict that a
caller (HTTP controller, CLI) can render without parsing the message.
"""

from __future__ import annotations


class SaleError(Exception):
    """Base class for sale engine errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def code(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message, "details": self.details}


class ValidationError(SaleError):
    """Malformed request; the caller can correct and resend it."""


class NotFound(SaleError):
    """Referenced row does not exist within the tenant."""


class ProductNotFound(NotFound):
    def __init__(self, product_id):
        super().__init__(
            f"Product not found with ID: {product_id}",
            details={"product_id": product_id},
        )
        self.product_id = product_id


class SaleNotFound(NotFound):
    def __init__(self, sale_id):
        super().__init__(
            f"Sale not found with ID: {sale_id}",
            details={"sale_id": sale_id},
        )
        self.sale_id = sale_id


class InsufficientStock(SaleError):
    """Requested quantity exceeds the product's current stock."""
    def __init__(self, product_id, available: int, requested: int, name: str | None = None):
        label = name or f"product {product_id}"
        super().__init__(
            f"Insufficient stock for {label}. Available: {available}, Requested: {requested}",
            details={
                "product_id": product_id,
                "available": available,
                "requested": requested,
            },
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class AlreadyRefunded(SaleError):
    """Refund attempted on a sale that is no longer completed."""
    def __init__(self, sale_id):
        super().__init__(
            f"Sale {sale_id} has already been refunded",
            details={"sale_id": sale_id},
        )
        self.sale_id = sale_id


class PersistenceError(SaleError):
    """Store-level failure (lost connection, lock timeout, constraint violation)."""
