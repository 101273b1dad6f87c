"""Organization domain exceptions."""

from stellarbill.core.exceptions import NotFoundException, PermissionException


class OrganizationNotFoundError(NotFoundException):
    """Raised when an organization (or its chain account on a network) is not configured."""

    def __init__(self, message: str = "Organization not found"):
        """Initialize with default message."""
        super().__init__(message)


class InvalidApiKeyError(PermissionException):
    """Raised when an API key does not resolve to an organization."""

    def __init__(self, message: str = "Invalid API key"):
        """Initialize with default message."""
        super().__init__(message)
