class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidTimeFormat(ValidationError):
    """Raised when a value is not a canonical 24-hour HH:mm string."""


class NotFoundError(DomainError):
    """Raised when a referenced employee, entry or request does not exist."""


class AuthenticationError(DomainError):
    """Raised when no identity is attached to the request."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
