"""Models for the application."""

from ._base import Base, OrganizationBase, generate_id
from .checkout import Checkout
from .credit_transaction import CreditTransaction
from .event import Event
from .organization import APIKey, Organization, OrganizationSecret, Plan
from .payment import Payment
from .payout import Payout
from .product import Product
from .refund import Refund
from .subscription import Subscription

__all__ = [
    "APIKey",
    "Base",
    "Checkout",
    "CreditTransaction",
    "Event",
    "Organization",
    "OrganizationBase",
    "OrganizationSecret",
    "Payment",
    "Payout",
    "Plan",
    "Product",
    "Refund",
    "Subscription",
    "generate_id",
]
