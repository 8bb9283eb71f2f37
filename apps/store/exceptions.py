"""
Domain exceptions for the store app.

Balance failures during a purchase (insufficient funds, lock timeouts)
surface as the currency app's exceptions unchanged.
"""


class StoreServiceError(Exception):
    """Base exception for store service errors."""
    pass


class ItemNotFoundError(StoreServiceError):
    """Raised when an item doesn't exist or is no longer for sale."""
    pass


class AlreadyOwnedError(StoreServiceError):
    """Raised when the student already owns the item."""
    pass


class NotOwnedError(StoreServiceError):
    """Raised when equipping an item the student doesn't own."""
    pass
