# Overview: Pytest coverage for the Flask CLI command groups.

import json

from pharmapos.services import sales_service
from tests.conftest import line, stock_of


def test_sales_show(app, db_session, pharmacy_a, product_a):
    sale = sales_service.create_sale(pharmacy_a.id, [line(product_a, 2)], "cash")

    result = app.test_cli_runner().invoke(args=["sales", "show", str(pharmacy_a.id), str(sale.id)])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["id"] == sale.id
    assert data["total_amount"] == "16.00"
    assert data["items"][0]["product_name"] == "Paracetamol 500mg"


def test_sales_refund(app, db_session, pharmacy_a, product_a):
    sale = sales_service.create_sale(pharmacy_a.id, [line(product_a, 2)], "cash")

    runner = app.test_cli_runner()
    result = runner.invoke(args=["sales", "refund", str(pharmacy_a.id), str(sale.id)])
    assert result.exit_code == 0, result.output
    assert "refunded" in result.output
    assert stock_of(product_a.id) == 10

    again = runner.invoke(args=["sales", "refund", str(pharmacy_a.id), str(sale.id)])
    assert again.exit_code != 0
    assert "already been refunded" in again.output
    assert stock_of(product_a.id) == 10


def test_sales_show_unknown(app, db_session, pharmacy_a):
    result = app.test_cli_runner().invoke(args=["sales", "show", str(pharmacy_a.id), "999"])
    assert result.exit_code != 0
    assert "Sale not found" in result.output


def test_init_db_is_idempotent(app, db_session):
    result = app.test_cli_runner().invoke(args=["system", "init-db"])
    assert result.exit_code == 0
    assert "PASS" in result.output
