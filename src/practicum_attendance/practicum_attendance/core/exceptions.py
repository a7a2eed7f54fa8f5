class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data or the current session state violates a precondition."""


class PolicyViolationError(DomainError):
    """Raised when an agency policy forbids the action (overtime cap, non-operating day)."""


class NotFoundError(DomainError):
    """Raised when the record an action targets does not exist."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class PersistenceError(Exception):
    """Raised when the database driver fails a read or write."""
