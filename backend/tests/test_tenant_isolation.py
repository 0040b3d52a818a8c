# Overview: Pytest coverage for tenant isolation of the sale engine.

"""
Multi-Tenant Isolation Tests

Two pharmacies with their own catalogs. Every engine operation is scoped by
the pharmacy_id it receives, so ids belonging to another pharmacy behave
exactly like ids that do not exist.
"""

import pytest

from pharmapos.errors import ProductNotFound, SaleNotFound
from pharmapos.models import Sale
from pharmapos.services import catalog_service, sales_service, stock_service
from tests.conftest import line, stock_of


class TestTenantIsolation:

    def test_cannot_sell_other_pharmacys_product(self, db_session, pharmacy_a, pharmacy_b, product_b):
        with pytest.raises(ProductNotFound):
            sales_service.create_sale(pharmacy_a.id, [line(product_b, 1)], "cash")

        assert stock_of(product_b.id) == 20
        assert db_session.query(Sale).count() == 0

    def test_cannot_refund_other_pharmacys_sale(self, db_session, pharmacy_a, pharmacy_b, product_b):
        sale = sales_service.create_sale(pharmacy_b.id, [line(product_b, 5)], "cash")

        with pytest.raises(SaleNotFound):
            sales_service.refund_sale(pharmacy_a.id, sale.id)

        assert stock_of(product_b.id) == 15
        assert sales_service.get_sale(pharmacy_b.id, sale.id).status == "completed"

    def test_cannot_read_other_pharmacys_sale(self, db_session, pharmacy_a, pharmacy_b, product_b):
        sale = sales_service.create_sale(pharmacy_b.id, [line(product_b, 1)], "cash")

        with pytest.raises(SaleNotFound):
            sales_service.get_sale(pharmacy_a.id, sale.id)

    def test_stock_mutations_are_scoped(self, db_session, pharmacy_a, product_b):
        with pytest.raises(ProductNotFound):
            stock_service.debit_stock(pharmacy_a.id, product_b.id, 1)
        with pytest.raises(ProductNotFound):
            stock_service.credit_stock(pharmacy_a.id, product_b.id, 1)
        db_session.rollback()

        assert stock_of(product_b.id) == 20

    def test_barcode_lookup_is_scoped(self, db_session, pharmacy_a, pharmacy_b, product_a, product_b):
        """Both pharmacies use the same barcode; each sees only its own product."""
        assert catalog_service.find_by_barcode(pharmacy_a.id, "5000000000017").id == product_a.id
        assert catalog_service.find_by_barcode(pharmacy_b.id, "5000000000017").id == product_b.id

    def test_sale_rows_carry_tenant(self, db_session, pharmacy_a, product_a):
        sale = sales_service.create_sale(pharmacy_a.id, [line(product_a, 2)], "cash")

        assert sale.pharmacy_id == pharmacy_a.id
        assert all(item.pharmacy_id == pharmacy_a.id for item in sale.items)
