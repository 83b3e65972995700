"""Analytics observer.

Counts what happens (logins, failures, links, commands) and keeps a rolling
average duration per command.
"""

from collections import Counter, defaultdict, deque
from datetime import datetime

import logfire

from vouch.domain.model.event import Event, EventType
from vouch.domain.value.common import ValueObject

# Samples kept per command for the rolling average
DURATION_WINDOW = 100


class Metric(ValueObject):
    """A single recorded data point."""

    name: str
    value: float
    timestamp: datetime
    tags: dict[str, str] = {}


class AnalyticsSummary(ValueObject):
    counters: dict[str, int]
    gauges: dict[str, float]
    metric_count: int


class AnalyticsObserver:
    """Turns events into counters, gauges and a capped metric series."""

    name = "analytics"

    def __init__(self, max_metrics: int = 10_000) -> None:
        self.counters: Counter[str] = Counter()
        self.gauges: dict[str, float] = {}
        self._metrics: deque[Metric] = deque(maxlen=max_metrics)
        self._durations: defaultdict[str, deque[float]] = defaultdict(
            lambda: deque(maxlen=DURATION_WINDOW)
        )

    async def handle(self, event: Event) -> None:
        payload = event.payload
        kind = event.type

        if kind == EventType.USER_REGISTERED:
            self.increment("users.registered")
        elif kind == EventType.USER_LOGGED_IN:
            self.increment("users.logged_in")
            self.increment(f"users.logged_in.{payload.method}")
        elif kind == EventType.USER_PASSWORD_CHANGED:
            self.increment("users.password_changed")
        elif kind == EventType.USER_TWO_FACTOR_ENABLED:
            self.increment("users.two_factor_enabled")
        elif kind == EventType.USER_TWO_FACTOR_DISABLED:
            self.increment("users.two_factor_disabled")
        elif kind == EventType.USER_TWO_FACTOR_VERIFIED:
            self.increment(f"users.two_factor_verified.{payload.method.value}")
        elif kind == EventType.SECURITY_LOGIN_FAILED:
            self.increment("security.login_failed")
            self.increment(f"security.login_failed.{payload.reason}")
        elif kind == EventType.SECURITY_ACCOUNT_LOCKED:
            self.increment("security.account_locked")
        elif kind == EventType.SECURITY_RATE_LIMIT_EXCEEDED:
            self.increment("security.rate_limit_exceeded")
        elif kind == EventType.SECURITY_TWO_FACTOR_FAILED:
            self.increment("security.two_factor_failed")
        elif kind == EventType.SECURITY_SUSPICIOUS_ACTIVITY:
            self.increment(f"security.suspicious_activity.{payload.severity.value}")
        elif kind == EventType.ACCOUNT_LINKED:
            self.increment(f"accounts.linked.{payload.provider}")
        elif kind == EventType.ACCOUNT_LINK_FAILED:
            self.increment("accounts.link_failed")
        elif kind == EventType.ACCOUNT_UNLINKED:
            self.increment(f"accounts.unlinked.{payload.provider}")
        elif kind == EventType.SYSTEM_COMMAND_EXECUTED:
            self.increment("commands.executed")
            self.increment(f"commands.{payload.command}")
            self.record_duration(payload.command, payload.duration_ms, event.timestamp)
        elif kind == EventType.SYSTEM_COMMAND_FAILED:
            self.increment("commands.failed")
            self.record_duration(payload.command, payload.duration_ms, event.timestamp)
        elif kind == EventType.SYSTEM_ERROR_OCCURRED:
            self.increment(f"errors.{payload.error_type}")
        elif kind == EventType.SYSTEM_PERFORMANCE_METRIC:
            self._metrics.append(
                Metric(
                    name=payload.name,
                    value=payload.value,
                    timestamp=event.timestamp,
                    tags={"unit": payload.unit, **payload.tags},
                )
            )

    def increment(self, name: str, by: int = 1) -> None:
        self.counters[name] += by

    def set_gauge(self, name: str, value: float) -> None:
        self.gauges[name] = value

    def record_duration(self, command: str, duration_ms: float, at: datetime) -> float:
        """Add a duration sample and recompute the command's rolling average.

        Returns:
            The new average in milliseconds
        """
        samples = self._durations[command]
        samples.append(duration_ms)
        average = sum(samples) / len(samples)

        self.set_gauge(f"command.{command}.avg_duration", average)
        self._metrics.append(
            Metric(
                name=f"command.{command}.duration",
                value=duration_ms,
                timestamp=at,
                tags={"unit": "ms"},
            )
        )
        return average

    def metrics_between(self, start: datetime, end: datetime) -> list[Metric]:
        return [m for m in self._metrics if start <= m.timestamp <= end]

    def summary(self) -> AnalyticsSummary:
        return AnalyticsSummary(
            counters=dict(self.counters),
            gauges=dict(self.gauges),
            metric_count=len(self._metrics),
        )

    def reset(self) -> None:
        self.counters.clear()
        self.gauges.clear()
        self._metrics.clear()
        self._durations.clear()
        logfire.debug("Analytics reset")
