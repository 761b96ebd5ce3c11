"""
Error taxonomy for role and permission management.

Repositories translate driver failures into StorageError, services raise
NotFoundError / InvalidInputError / ConflictError. Nothing here is caught
inside the package: errors propagate to the caller.
"""

from typing import Any


class RBACError(Exception):
    """Base class for all rolegate errors."""
    pass


class NotFoundError(RBACError):
    """Raised when a referenced role or permission does not exist."""

    def __init__(self, kind: str, identifier: Any):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class StorageError(RBACError):
    """Raised when the underlying store fails (connection, constraint)."""
    pass


class InvalidInputError(RBACError, ValueError):
    """Raised on malformed input to a query or mutation."""
    pass


class ConflictError(RBACError):
    """Raised when a slug is already taken."""
    pass
