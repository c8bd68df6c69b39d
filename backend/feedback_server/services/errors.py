"""Exceptions shared by the entity services."""


class NotFoundError(Exception):
    """Raised when the referenced row does not exist."""


class ConstraintError(Exception):
    """Raised when the store rejects a write (foreign key or uniqueness)."""
