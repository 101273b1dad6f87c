"""Webhook domain exceptions."""

from stellarbill.core.exceptions import PermissionException


class InvalidSignatureError(PermissionException):
    """Raised when an inbound webhook fails verification. No state is changed."""

    def __init__(self, message: str = "Invalid webhook signature"):
        """Initialize with default message."""
        super().__init__(message)
