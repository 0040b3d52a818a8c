from .tenancy import Pharmacy
from .inventory import Product
from .sales import Sale, SaleItem

__all__ = [
    'Pharmacy',
    'Product',
    'Sale', 'SaleItem',
]
