# Overview: Pytest coverage for stock ledger debit/credit primitives.

import pytest
from sqlalchemy.exc import IntegrityError

from pharmapos.errors import InsufficientStock, ProductNotFound
from pharmapos.models import Product
from pharmapos.services import stock_service
from tests.conftest import stock_of


class TestStockLedger:

    def test_debit(self, db_session, pharmacy_a, product_a):
        stock_service.debit_stock(pharmacy_a.id, product_a.id, 4)
        db_session.commit()
        assert stock_of(product_a.id) == 6

    def test_debit_exact_stock(self, db_session, pharmacy_a, product_a):
        stock_service.debit_stock(pharmacy_a.id, product_a.id, 10)
        db_session.commit()
        assert stock_of(product_a.id) == 0

    def test_debit_refuses_to_go_negative(self, db_session, pharmacy_a, product_a):
        with pytest.raises(InsufficientStock) as exc_info:
            stock_service.debit_stock(pharmacy_a.id, product_a.id, 11)
        db_session.rollback()

        assert exc_info.value.available == 10
        assert exc_info.value.requested == 11
        assert stock_of(product_a.id) == 10

    def test_debit_bumps_version(self, db_session, pharmacy_a, product_a):
        before = product_a.version_id
        stock_service.debit_stock(pharmacy_a.id, product_a.id, 1)
        db_session.commit()

        assert db_session.get(Product, product_a.id).version_id == before + 1

    def test_debit_refreshes_loaded_product(self, db_session, pharmacy_a, product_a):
        loaded = db_session.get(Product, product_a.id)
        assert loaded.stock == 10

        stock_service.debit_stock(pharmacy_a.id, product_a.id, 3)

        assert loaded.stock == 7
        db_session.rollback()

    def test_debit_unknown_product(self, db_session, pharmacy_a):
        with pytest.raises(ProductNotFound):
            stock_service.debit_stock(pharmacy_a.id, 99999, 1)
        db_session.rollback()

    def test_credit(self, db_session, pharmacy_a, product_a):
        stock_service.credit_stock(pharmacy_a.id, product_a.id, 5)
        db_session.commit()
        assert stock_of(product_a.id) == 15

    def test_credit_unknown_product(self, db_session, pharmacy_a):
        with pytest.raises(ProductNotFound):
            stock_service.credit_stock(pharmacy_a.id, 99999, 1)
        db_session.rollback()

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_non_positive_quantity(self, db_session, pharmacy_a, product_a, quantity):
        with pytest.raises(ValueError):
            stock_service.debit_stock(pharmacy_a.id, product_a.id, quantity)
        with pytest.raises(ValueError):
            stock_service.credit_stock(pharmacy_a.id, product_a.id, quantity)

    def test_get_stock(self, db_session, pharmacy_a, product_a):
        assert stock_service.get_stock(pharmacy_a.id, product_a.id) == 10

    def test_schema_rejects_negative_stock(self, db_session, pharmacy_a, product_a):
        db_session.refresh(product_a)
        product_a.stock = -1
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()
