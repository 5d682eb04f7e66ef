class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when credentials or a bearer token are invalid."""


class AuthorizationError(DomainError):
    """Raised when a principal acts outside its access level or ownership."""


class NotFoundError(DomainError):
    """Raised when the target entity does not exist (or is not visible)."""


class ConflictError(DomainError):
    """Raised when an action clashes with current state, e.g. double clock-in."""


class UpstreamError(DomainError):
    """Raised when the persistence or object-storage backend fails."""
