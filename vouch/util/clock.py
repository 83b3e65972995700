"""Time source.

Expiry of pending sessions, link tokens, rate-limit windows and TOTP steps
is evaluated against an injected clock so that it can be frozen in tests.
"""

from datetime import datetime, timezone


class Clock:
    """Wall clock returning timezone-aware UTC datetimes."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
