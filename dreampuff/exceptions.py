class DreampuffError(Exception):
    """Base class for errors raised by the stock service and client core."""
    pass


class AuthenticationError(DreampuffError):
    """Missing/invalid API key or an expired work session."""
    pass


class ValidationError(DreampuffError):
    """Malformed payload or form input; the operation was not attempted."""
    pass


class NotFoundError(DreampuffError):
    """The referenced product (by id or name) does not exist."""
    pass


class InsufficientStockError(DreampuffError):
    """A sale would drive a product's stock below zero."""

    def __init__(self, product_name: str, available: int, requested: int):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for \"{product_name}\". "
            f"Available: {available}, Requested: {requested}"
        )


class SaveInProgressError(DreampuffError):
    """A save of the same kind is already in flight."""
    pass


class RemoteSyncError(DreampuffError):
    """Background persistence failed after the local state was committed."""
    pass


class TransportError(DreampuffError):
    """I/O failure talking to the database or an external collaborator."""
    pass
