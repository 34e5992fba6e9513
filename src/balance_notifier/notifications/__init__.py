"""Notifications — payload construction and webhook delivery.

Provides:
- ``NotificationPayload`` and the ``watch_started`` / ``balance_changed`` builders
- ``WebhookSink`` — posts a payload to a single webhook URL
"""

from __future__ import annotations

from balance_notifier.notifications.events import (
    NotificationKind,
    NotificationPayload,
    balance_changed,
    watch_started,
)
from balance_notifier.notifications.webhook import WebhookSink, encode_payload

__all__ = [
    "NotificationKind",
    "NotificationPayload",
    "WebhookSink",
    "balance_changed",
    "encode_payload",
    "watch_started",
]
