"""
Error types raised by the struct factory.

All errors are raised synchronously at the call site that triggered them.
Nothing here is logged, retried or swallowed.
"""


class StructError(Exception):
    """Base class for errors raised by immutable_struct."""
    pass


class InvalidSpecification(StructError, ValueError):
    """Raised when an attribute specification list is empty or malformed."""
    pass


class CoercionFailure(InvalidSpecification, TypeError):
    """Raised when a value cannot be turned into a struct instance or collection."""
    pass


class FrozenInstanceError(AttributeError):
    """Raised when code tries to assign or delete an attribute of an instance."""
    pass
