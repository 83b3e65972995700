"""Notification sinks."""

from .logging import LoggingNotificationSink
from .webhook import WebhookNotificationSink

__all__ = ["LoggingNotificationSink", "WebhookNotificationSink"]
