"""
Pytest fixtures for PharmaPOS backend tests.

Provides test database setup, two isolated pharmacies (tenants) and a small
catalog in each.
"""

from decimal import Decimal

import pytest
from pharmapos import create_app
from pharmapos.extensions import db
from pharmapos.models import Pharmacy, Product


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def pharmacy_a(db_session):
    """Create Pharmacy A (first tenant)."""
    pharmacy = Pharmacy(name="Pharmacy A - Central", location="Main St", is_active=True)
    db_session.add(pharmacy)
    db_session.commit()
    return pharmacy


@pytest.fixture(scope='function')
def pharmacy_b(db_session):
    """Create Pharmacy B (second tenant)."""
    pharmacy = Pharmacy(name="Pharmacy B - Harbor", location="Dock Rd", is_active=True)
    db_session.add(pharmacy)
    db_session.commit()
    return pharmacy


def make_product(session, pharmacy, name="Paracetamol 500mg", stock=10,
                 buy_price="5.00", sell_price="8.00", barcode=None, category="Analgesics"):
    """Helper to add a product to a pharmacy's catalog."""
    product = Product(
        pharmacy_id=pharmacy.id,
        name=name,
        category=category,
        barcode=barcode,
        buy_price=Decimal(buy_price),
        sell_price=Decimal(sell_price),
        stock=stock,
    )
    session.add(product)
    session.commit()
    return product


@pytest.fixture(scope='function')
def product_a(db_session, pharmacy_a):
    """Product in Pharmacy A: stock 10, buy 5, sell 8."""
    return make_product(db_session, pharmacy_a, barcode="5000000000017")


@pytest.fixture(scope='function')
def second_product_a(db_session, pharmacy_a):
    """Another product in Pharmacy A: stock 4, buy 2.50, sell 4.00."""
    return make_product(
        db_session, pharmacy_a, name="Ibuprofen 200mg", stock=4,
        buy_price="2.50", sell_price="4.00", barcode="5000000000024",
    )


@pytest.fixture(scope='function')
def product_b(db_session, pharmacy_b):
    """Product in Pharmacy B."""
    return make_product(db_session, pharmacy_b, name="Cough Syrup", stock=20,
                        buy_price="3.00", sell_price="6.00", barcode="5000000000017")


def stock_of(product_id: int) -> int:
    """Read stock straight from the database, bypassing the identity map."""
    return db.session.query(Product.stock).filter_by(id=product_id).scalar()


def line(product, quantity, price=None):
    """Helper to build a sale request item."""
    return {
        "product_id": product.id,
        "quantity": quantity,
        "unit_sell_price": price if price is not None else str(product.sell_price),
    }


def set_stock(session, product, quantity: int) -> None:
    """Catalog-side stock adjustment, committed."""
    session.refresh(product)
    product.stock = quantity
    session.commit()
