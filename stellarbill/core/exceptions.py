"""Shared exceptions module."""

from typing import Optional

from pydantic import ValidationError


class StellarBillException(Exception):
    """Base exception for Stellarbill services."""

    pass


class PermissionException(StellarBillException):
    """Exception raised when a caller is not allowed to perform an action."""

    def __init__(
        self,
        message: Optional[str] = "Caller does not have the right to perform this action",
    ):
        """Create a new PermissionException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class NotFoundException(StellarBillException):
    """Exception raised when an object is not found."""

    def __init__(self, message: Optional[str] = "Object not found"):
        """Create a new NotFoundException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class InvalidStateError(StellarBillException):
    """Exception raised when an object is in an invalid state.

    Used when a requested transition is not legal from the stored state,
    or when a business rule rejects the operation.
    """

    def __init__(self, message: Optional[str] = "Object is in an invalid state"):
        """Create a new InvalidStateError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class ConcurrentModificationError(InvalidStateError):
    """Raised when a compare-and-set update lost the race to another writer.

    Only surfaced when the winner left the row in a state other than the one
    the loser intended; otherwise the losing call is a no-op.
    """

    def __init__(self, entity: str, entity_id: str, expected: str):
        """Create a new ConcurrentModificationError instance.

        Args:
            entity: Entity kind (e.g. "checkout").
            entity_id: Primary key of the contested row.
            expected: Status the writer expected to find.
        """
        self.entity = entity
        self.entity_id = entity_id
        self.expected = expected
        super().__init__(f"{entity} {entity_id} is no longer {expected}")


class ExternalServiceError(Exception):
    """Exception raised when an external service fails."""

    def __init__(self, service_name: str, message: Optional[str] = "External service failed"):
        """Create a new ExternalServiceError instance.

        Args:
        ----
            service_name (str): The name of the external service.
            message (str, optional): The error message. Has default message.

        """
        self.service_name = service_name
        self.message = message
        super().__init__(f"{service_name}: {message}")


class ChainError(ExternalServiceError):
    """Base for failures reported by the chain client."""

    retryable: bool = False

    def __init__(self, message: Optional[str] = "Chain request failed"):
        """Create a new ChainError instance."""
        super().__init__(service_name="StellarChain", message=message)


class ChainUnavailableError(ChainError):
    """Chain endpoint unreachable or returned a server error. Transient."""

    retryable = True


class ChainTimeoutError(ChainError):
    """Chain call exceeded its time bound. The outcome is unknown."""

    retryable = True


class ChainRejectedError(ChainError):
    """The chain (or contract) rejected the operation. Terminal for this attempt.

    ``amount`` is set when the chain reported what the attempt would have charged.
    """

    def __init__(self, message: Optional[str] = "Chain rejected the operation", amount=None):
        """Create a new ChainRejectedError instance."""
        self.amount = amount
        super().__init__(message)


class PeriodNotEndedError(ChainRejectedError):
    """The contract refused a charge because the billing period is already paid."""


def unpack_validation_error(exc: ValidationError) -> dict:
    """Unpack a Pydantic validation error into a dictionary.

    Args:
    ----
        exc (ValidationError): The Pydantic validation error.

    Returns:
    -------
        dict: The dictionary representation of the validation error.

    """
    error_messages = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        message = error["msg"]
        error_messages.append({field: message})

    return {"errors": error_messages}
