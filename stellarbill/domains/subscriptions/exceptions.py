"""Subscription domain exceptions."""

from stellarbill.core.exceptions import InvalidStateError, NotFoundException


class SubscriptionNotFoundError(NotFoundException):
    """Raised when a subscription does not exist in the caller's organization and network."""

    def __init__(self, message: str = "Subscription not found"):
        """Initialize with default message."""
        super().__init__(message)


class SubscriptionTransitionError(InvalidStateError):
    """Raised when a subscription cannot be paused, resumed or canceled from its status."""
