"""Errors raised by the warehouse model.

Failed mutations raise one of these before the store is touched, so the
previous snapshot is always left intact.
"""


class InventoryError(Exception):
    """Base class for every error raised by the warehouse model."""


class NotFound(InventoryError, LookupError):
    """A slot, pallet or product id does not exist where it is required."""


class InvalidState(InventoryError, RuntimeError):
    """The operation is not legal in the current state (e.g. slot already occupied)."""


class ValidationError(InventoryError, ValueError):
    """Input was missing or malformed before any mutation was attempted."""
