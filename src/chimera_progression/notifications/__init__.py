"""Notification sinks for game events."""

from .sink import LoggingNotificationSink, NotificationSink, NullNotificationSink, QueueNotificationSink, dispatch

__all__ = [
    "LoggingNotificationSink",
    "NotificationSink",
    "NullNotificationSink",
    "QueueNotificationSink",
    "dispatch",
]
