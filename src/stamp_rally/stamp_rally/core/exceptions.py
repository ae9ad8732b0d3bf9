class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced stamp or blob does not exist."""


class StorageError(DomainError):
    """Raised when the object store fails in a way callers must not hide."""


class ConflictError(StorageError):
    """Raised when a conditional write finds a newer version in the store."""
