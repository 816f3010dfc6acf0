class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action.

    Covers inactive accounts, role mismatches, ownership mismatches and
    mutations attempted outside the allowed state.
    """


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class ConflictError(DomainError):
    """Raised when a write collides with existing state (e.g. second check-in)."""


class StoreError(DomainError):
    """Raised when the underlying database fails. Message is kept generic."""
