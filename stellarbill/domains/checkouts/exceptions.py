"""Checkout domain exceptions."""

from stellarbill.core.exceptions import NotFoundException


class CheckoutNotFoundError(NotFoundException):
    """Raised when a checkout does not exist."""

    def __init__(self, message: str = "Checkout not found"):
        """Initialize with default message."""
        super().__init__(message)
