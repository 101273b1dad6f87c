"""Payout domain exceptions."""

from typing import Optional

from stellarbill.core.exceptions import InvalidStateError, NotFoundException


class PayoutValidationError(InvalidStateError):
    """Raised when a payout request is rejected before anything is written.

    ``index`` points at the offending item of a batch request.
    """

    def __init__(self, message: str, index: Optional[int] = None):
        """Initialize with the reason and the offending item's position."""
        self.index = index
        if index is not None:
            message = f"Payout #{index}: {message}"
        super().__init__(message)


class PayoutNotFoundError(NotFoundException):
    """Raised when a payout does not exist in the caller's organization and network."""

    def __init__(self, message: str = "Payout not found"):
        """Initialize with default message."""
        super().__init__(message)
