"""
Best-effort alert notifications over email and SMS webhooks.
"""

from notifications.channels import DeliveryOutcome, LogOnlySender, WebhookSender, build_senders
from notifications.dispatcher import NotificationDispatcher

__all__ = [
    "DeliveryOutcome",
    "LogOnlySender",
    "WebhookSender",
    "build_senders",
    "NotificationDispatcher",
]
