# Overview: Flask CLI command groups for bootstrap and sale inspection.

# backend/pharmapos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to pharmapos (PowerShell: $env:FLASK_APP="pharmapos").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Sales:
# - python -m flask sales show 1 42
#   Print sale 42 of pharmacy 1 with its items.
# - python -m flask sales refund 1 42
#   Refund sale 42 of pharmacy 1 and restore its stock.

import json

import click
from flask.cli import with_appcontext

from .errors import SaleError
from .extensions import db
from .services import sales_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database schema is up to date.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('sales')
def sales_group():
    """Sale inspection and refund commands."""


@sales_group.command('show')
@click.argument('pharmacy_id', type=int)
@click.argument('sale_id', type=int)
@with_appcontext
def show_sale(pharmacy_id, sale_id):
    """Print a sale with its items as JSON."""
    try:
        sale = sales_service.get_sale(pharmacy_id, sale_id)
    except SaleError as e:
        raise click.ClickException(e.message)
    click.echo(json.dumps(sale.to_dict(), indent=2))


@sales_group.command('refund')
@click.argument('pharmacy_id', type=int)
@click.argument('sale_id', type=int)
@with_appcontext
def refund_sale_cli(pharmacy_id, sale_id):
    """Refund a completed sale and restore its stock."""
    try:
        sale = sales_service.refund_sale(pharmacy_id, sale_id)
    except SaleError as e:
        raise click.ClickException(e.message)
    click.echo(f"PASS Sale {sale.id} refunded (total {sale.to_dict(include_items=False)['total_amount']}).")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(sales_group)
