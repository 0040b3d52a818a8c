from __future__ import annotations

from ..extensions import db
from ..validation import PAYMENT_METHODS, money_to_str
from pharmapos.time_utils import to_utc_z


SALE_STATUS_COMPLETED = "completed"
SALE_STATUS_REFUNDED = "refunded"
SALE_STATUSES = (SALE_STATUS_COMPLETED, SALE_STATUS_REFUNDED)


def _in_list(column: str, values: tuple[str, ...]) -> str:
    return "%s IN (%s)" % (column, ", ".join(f"'{v}'" for v in values))


class Sale(db.Model):
    """
    Sale header.

    LIFECYCLE: completed -> refunded (one-way). A sale is inserted as
    completed with zero totals and finalized with the summed item figures in
    the same transaction, so a committed sale always satisfies
    total_amount == sum(items.total_sell_price) and
    total_profit == sum(items.item_profit).

    Sales are never hard-deleted; a refund flips status and restores stock.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.CheckConstraint("total_amount >= 0", name="ck_sales_total_amount_nonnegative"),
        db.CheckConstraint("total_profit >= 0", name="ck_sales_total_profit_nonnegative"),
        db.CheckConstraint(_in_list("payment_method", PAYMENT_METHODS), name="ck_sales_payment_method"),
        db.CheckConstraint(_in_list("status", SALE_STATUSES), name="ck_sales_status"),
        # Composite index for pharmacy-scoped queries by status and date
        db.Index("ix_sales_pharmacy_status_created", "pharmacy_id", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    pharmacy_id = db.Column(db.Integer, db.ForeignKey("pharmacies.id"), nullable=False, index=True)

    total_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    total_profit = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    payment_method = db.Column(db.String(16), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=SALE_STATUS_COMPLETED, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    refunded_at = db.Column(db.DateTime(timezone=True), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    pharmacy = db.relationship("Pharmacy", backref=db.backref("sales", lazy=True))
    items = db.relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SaleItem.id",
        lazy=True,
    )
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Sale id={self.id} pharmacy_id={self.pharmacy_id} status={self.status!r}>"

    @property
    def is_refunded(self) -> bool:
        return self.status == SALE_STATUS_REFUNDED

    def to_dict(self, include_items: bool = True) -> dict:
        data = {
            "id": self.id,
            "pharmacy_id": self.pharmacy_id,
            "total_amount": money_to_str(self.total_amount),
            "total_profit": money_to_str(self.total_profit),
            "payment_method": self.payment_method,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "refunded_at": to_utc_z(self.refunded_at) if self.refunded_at else None,
            "version_id": self.version_id,
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class SaleItem(db.Model):
    """
    Immutable line of a sale.

    unit_buy_price is copied from the product at sale time so profit stays
    stable when the catalog price changes later. Products referenced by any
    sale item cannot be deleted (ON DELETE RESTRICT).
    """
    __tablename__ = "sale_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sale_items_quantity_positive"),
        db.CheckConstraint("unit_sell_price >= 0", name="ck_sale_items_unit_sell_price_nonnegative"),
        db.CheckConstraint("unit_buy_price >= 0", name="ck_sale_items_unit_buy_price_nonnegative"),
        db.CheckConstraint("total_sell_price >= 0", name="ck_sale_items_total_sell_price_nonnegative"),
        db.CheckConstraint("item_profit >= 0", name="ck_sale_items_item_profit_nonnegative"),
        db.Index("ix_sale_items_pharmacy_product", "pharmacy_id", "product_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    pharmacy_id = db.Column(db.Integer, db.ForeignKey("pharmacies.id"), nullable=False, index=True)
    sale_id = db.Column(
        db.Integer,
        db.ForeignKey("sales.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
    )

    quantity = db.Column(db.Integer, nullable=False)
    unit_sell_price = db.Column(db.Numeric(10, 2), nullable=False)
    unit_buy_price = db.Column(db.Numeric(10, 2), nullable=False)
    total_sell_price = db.Column(db.Numeric(10, 2), nullable=False)
    item_profit = db.Column(db.Numeric(10, 2), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    sale = db.relationship("Sale", back_populates="items")
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "pharmacy_id": self.pharmacy_id,
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "quantity": self.quantity,
            "unit_sell_price": money_to_str(self.unit_sell_price),
            "unit_buy_price": money_to_str(self.unit_buy_price),
            "total_sell_price": money_to_str(self.total_sell_price),
            "item_profit": money_to_str(self.item_profit),
            "created_at": to_utc_z(self.created_at),
        }
