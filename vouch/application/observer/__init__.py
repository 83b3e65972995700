"""Event bus observers."""

from vouch.domain.event import EventBus

from .analytics import AnalyticsObserver, AnalyticsSummary, Metric
from .audit_log import AuditFilter, AuditLogObserver, AuditStats
from .notification import NotificationFilter, NotificationObserver, NotificationStats


def register_observers(
    bus: EventBus,
    audit_log: AuditLogObserver,
    analytics: AnalyticsObserver,
    notification: NotificationObserver,
) -> list[str]:
    """Subscribe the observers to every event.

    Audit runs first so the trail is written before anything that may fail.

    Returns:
        Subscription ids
    """
    return [
        bus.subscribe_observer(audit_log, priority=100),
        bus.subscribe_observer(analytics, priority=50),
        bus.subscribe_observer(notification, priority=0),
    ]


__all__ = [
    "AnalyticsObserver",
    "AnalyticsSummary",
    "AuditFilter",
    "AuditLogObserver",
    "AuditStats",
    "Metric",
    "NotificationFilter",
    "NotificationObserver",
    "NotificationStats",
    "register_observers",
]
