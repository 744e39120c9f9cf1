"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class ConcurrentModificationError(ValidationError):
    """The order changed underneath us; the stale write was rejected."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class AuthorizationError(DomainException):
    """The actor is not allowed to perform this action."""


class PaymentError(DomainException):
    """The payment gateway declined or failed to process a charge."""
