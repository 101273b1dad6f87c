"""Product domain exceptions."""

from stellarbill.core.exceptions import NotFoundException


class ProductNotFoundError(NotFoundException):
    """Raised when a product does not exist in the caller's organization and network."""

    def __init__(self, message: str = "Product not found"):
        """Initialize with default message."""
        super().__init__(message)
