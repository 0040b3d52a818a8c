"""Initial schema: pharmacies, products, sales, sale_items

Revision ID: 20261017_initial
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261017_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "pharmacies",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_pharmacies_name", "pharmacies", ["name"])
    op.create_index("ix_pharmacies_location", "pharmacies", ["location"])
    op.create_index("ix_pharmacies_is_active", "pharmacies", ["is_active"])

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("pharmacy_id", sa.Integer(), sa.ForeignKey("pharmacies.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("barcode", sa.String(64), nullable=True),
        sa.Column("buy_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("sell_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("stock >= 0", name="ck_products_stock_nonnegative"),
        sa.CheckConstraint("buy_price >= 0", name="ck_products_buy_price_nonnegative"),
        sa.CheckConstraint("sell_price >= 0", name="ck_products_sell_price_nonnegative"),
        sa.UniqueConstraint("pharmacy_id", "barcode", name="uq_products_pharmacy_barcode"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_products_pharmacy_id", "products", ["pharmacy_id"])
    op.create_index("ix_products_pharmacy_name", "products", ["pharmacy_id", "name"])
    op.create_index("ix_products_pharmacy_category", "products", ["pharmacy_id", "category"])

    op.create_table(
        "sales",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("pharmacy_id", sa.Integer(), sa.ForeignKey("pharmacies.id"), nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("total_profit", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("payment_method", sa.String(16), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="completed"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("refunded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default="1"),
        sa.CheckConstraint("total_amount >= 0", name="ck_sales_total_amount_nonnegative"),
        sa.CheckConstraint("total_profit >= 0", name="ck_sales_total_profit_nonnegative"),
        sa.CheckConstraint("payment_method IN ('cash', 'card', 'transfer')", name="ck_sales_payment_method"),
        sa.CheckConstraint("status IN ('completed', 'refunded')", name="ck_sales_status"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_sales_pharmacy_id", "sales", ["pharmacy_id"])
    op.create_index("ix_sales_status", "sales", ["status"])
    op.create_index("ix_sales_pharmacy_status_created", "sales", ["pharmacy_id", "status", "created_at"])

    op.create_table(
        "sale_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("pharmacy_id", sa.Integer(), sa.ForeignKey("pharmacies.id"), nullable=False),
        sa.Column("sale_id", sa.Integer(), sa.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_sell_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("unit_buy_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_sell_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("item_profit", sa.Numeric(10, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("quantity > 0", name="ck_sale_items_quantity_positive"),
        sa.CheckConstraint("unit_sell_price >= 0", name="ck_sale_items_unit_sell_price_nonnegative"),
        sa.CheckConstraint("unit_buy_price >= 0", name="ck_sale_items_unit_buy_price_nonnegative"),
        sa.CheckConstraint("total_sell_price >= 0", name="ck_sale_items_total_sell_price_nonnegative"),
        sa.CheckConstraint("item_profit >= 0", name="ck_sale_items_item_profit_nonnegative"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_sale_items_pharmacy_id", "sale_items", ["pharmacy_id"])
    op.create_index("ix_sale_items_sale_id", "sale_items", ["sale_id"])
    op.create_index("ix_sale_items_pharmacy_product", "sale_items", ["pharmacy_id", "product_id"])


def downgrade():
    op.drop_table("sale_items")
    op.drop_table("sales")
    op.drop_table("products")
    op.drop_table("pharmacies")
