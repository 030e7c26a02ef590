"""
Exceptions raised by the inventory core.

Every caller-facing failure derives from InventoryError so the HTTP layer can
map the whole family with a handful of exception handlers. DeliveryFailure is
the odd one out: it never leaves the notification dispatcher.
"""


class InventoryError(Exception):
    """Base exception for all inventory errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PayloadError(InventoryError):
    """Raised when a request body cannot be decoded."""
    pass


class ValidationError(InventoryError):
    """Raised when a field, restock delta or channel is invalid."""
    pass


class DuplicateKeyError(InventoryError):
    """Raised when a business key (productId) is already taken."""
    pass


class NotFoundError(InventoryError):
    """Raised when no live record has the given id."""
    pass


class PersistenceError(InventoryError):
    """Raised when a snapshot cannot be read from or written to disk."""
    pass


class DeliveryFailure(InventoryError):
    """
    Raised by a channel sender when the external endpoint is unreachable
    or rejects the message. The dispatcher converts it into a recorded
    delivered=False outcome.
    """
    pass
