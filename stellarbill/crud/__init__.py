"""CRUD singletons, one per model."""

from .crud_checkout import checkout
from .crud_credit_transaction import credit_transaction
from .crud_event import event
from .crud_organization import organization
from .crud_payment import payment
from .crud_payout import payout
from .crud_product import product
from .crud_refund import refund
from .crud_subscription import subscription

__all__ = [
    "checkout",
    "credit_transaction",
    "event",
    "organization",
    "payment",
    "payout",
    "product",
    "refund",
    "subscription",
]
