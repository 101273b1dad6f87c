"""CRUD operations for products (read side only)."""

from stellarbill.crud._base import CRUDOrganization
from stellarbill.models.product import Product

product = CRUDOrganization(Product)
