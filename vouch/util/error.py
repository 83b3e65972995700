"""Errors raised by the util layer."""


class UtilError(Exception):
    """Raised by helpers outside the domain."""


class TokenError(UtilError):
    """A session token failed to encode or verify."""
