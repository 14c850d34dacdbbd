# ORM models; importing this package registers every table on Base.metadata

from .cost import Cost
from .customer import Customer
from .product import Product
from .quotation import Quotation, QuotationCost, QuotationItem
from .user import User

__all__ = [
    "Cost",
    "Customer",
    "Product",
    "Quotation",
    "QuotationCost",
    "QuotationItem",
    "User",
]
