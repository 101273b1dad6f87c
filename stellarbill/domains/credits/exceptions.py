"""Credit ledger exceptions."""

from stellarbill.core.exceptions import InvalidStateError


class InsufficientCreditsError(InvalidStateError):
    """Raised when a debit would take a balance below the configured floor."""

    def __init__(self, customer_id: str, product_id: str, balance: int, requested: int):
        """Record the balance and the credits the debit asked for."""
        self.customer_id = customer_id
        self.product_id = product_id
        self.balance = balance
        self.requested = requested
        super().__init__(
            f"Insufficient credits for customer {customer_id} on product {product_id}: "
            f"balance {balance}, requested {requested}"
        )


class InvalidUsageAmountError(InvalidStateError):
    """Raised when a usage amount cannot be converted into credits."""

    def __init__(self, message: str = "Invalid usage amount"):
        """Initialize with default message."""
        super().__init__(message)
