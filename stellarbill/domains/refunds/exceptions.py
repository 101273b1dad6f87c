"""Refund domain exceptions."""

from stellarbill.core.exceptions import InvalidStateError, NotFoundException


class RefundValidationError(InvalidStateError):
    """Raised when a refund request is rejected before anything is written."""


class RefundNotFoundError(NotFoundException):
    """Raised when a refund does not exist in the caller's organization and network."""

    def __init__(self, message: str = "Refund not found"):
        """Initialize with default message."""
        super().__init__(message)


class PaymentNotFoundError(NotFoundException):
    """Raised when the payment to refund does not exist in the caller's organization and network."""

    def __init__(self, message: str = "Payment not found"):
        """Initialize with default message."""
        super().__init__(message)
