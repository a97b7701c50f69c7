"""
Notification infrastructure for high-risk knowledge-gap alerts.
"""

from keeper.infrastructure.notifications.notifier import (
    LoggingNotificationSink,
    logging_notification_sink,
)

__all__ = ["LoggingNotificationSink", "logging_notification_sink"]
