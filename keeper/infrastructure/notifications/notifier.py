"""
Notification sink for knowledge-gap alerts.

Writes each notification as a structured log entry so whatever ships logs
(console, Slack forwarder, email digest) can route it. Failures here are
logged and swallowed: an alert must never abort the scan that raised it.
"""

from typing import Any

from keeper.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class LoggingNotificationSink:
    """NotificationSink backed by structured logs."""

    async def log_notification(self, payload: dict[str, Any]) -> None:
        try:
            logger.warning(
                "Knowledge gap notification",
                notification_type=payload.get("type"),
                **{k: v for k, v in payload.items() if k != "type"},
            )
        except Exception as e:
            logger.error("Failed to emit notification", error=str(e))


logging_notification_sink = LoggingNotificationSink()
