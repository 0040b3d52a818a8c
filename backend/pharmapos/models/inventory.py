from __future__ import annotations

from ..extensions import db
from ..validation import money_to_str
from pharmapos.time_utils import to_utc_z

class Product(db.Model):
    """
    Product master data with its stock level.

    MULTI-TENANT: Products are scoped to pharmacies via pharmacy_id. Every
    lookup is (id, pharmacy_id), never id alone.

    STOCK LEDGER:
    `stock` is the authoritative on-hand quantity. Catalog management may set
    it, but sales only move it through stock_service.debit_stock /
    credit_stock, which are single conditional UPDATE statements. The CHECK
    constraint is the last line of defence for stock >= 0.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_products_stock_nonnegative"),
        db.CheckConstraint("buy_price >= 0", name="ck_products_buy_price_nonnegative"),
        db.CheckConstraint("sell_price >= 0", name="ck_products_sell_price_nonnegative"),
        # Barcodes are unique within a pharmacy (NULLs allowed)
        db.UniqueConstraint("pharmacy_id", "barcode", name="uq_products_pharmacy_barcode"),
        db.Index("ix_products_pharmacy_name", "pharmacy_id", "name"),
        db.Index("ix_products_pharmacy_category", "pharmacy_id", "category"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    pharmacy_id = db.Column(db.Integer, db.ForeignKey("pharmacies.id"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)
    barcode = db.Column(db.String(64), nullable=True)

    buy_price = db.Column(db.Numeric(10, 2), nullable=False)
    sell_price = db.Column(db.Numeric(10, 2), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    pharmacy = db.relationship("Pharmacy", backref=db.backref("products", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} pharmacy_id={self.pharmacy_id} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "pharmacy_id": self.pharmacy_id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "barcode": self.barcode,
            "buy_price": money_to_str(self.buy_price),
            "sell_price": money_to_str(self.sell_price),
            "stock": self.stock,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
