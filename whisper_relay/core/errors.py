"""Run-time error taxonomy for the relay."""


class RelayError(Exception):
    """Base class for errors raised during a relay run."""

    pass


class FetchError(RelayError):
    """Raised when the upstream feed cannot be retrieved or parsed."""

    pass


class DeliveryError(RelayError):
    """Raised when a notification cannot be delivered to the sink."""

    pass


class PersistenceError(RelayError):
    """Raised when the notification state cannot be written."""

    pass
