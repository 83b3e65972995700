"""Adapter layer errors."""


class AdapterError(Exception):
    """Base adapter error."""

    pass


class CacheError(AdapterError):
    """Shared key-value store failure."""

    pass


class NotificationDeliveryError(AdapterError):
    """A notification sink could not deliver a notification."""

    pass
