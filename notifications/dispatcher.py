"""
Notification dispatcher.

Turns a notify request into exactly one delivery attempt and one immutable
history record, then tells stream subscribers about it.

Key points:
- Only the request itself can be rejected (bad channel, missing recipient or
  message). Once it is accepted, the call succeeds whatever happens to the
  delivery, and delivered=False is simply recorded.
- The dispatcher does not know whether a channel is backed by a webhook or
  is log-only; that was decided at startup (see channels.build_senders).
"""

import logging
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from inventory.data_store import NotificationHistory
from inventory.errors import ValidationError
from inventory.models import Channel, NotificationRecord
from notifications.channels import ChannelSender, LogOnlySender
from realtime.hub import BroadcastHub, EventTypes

logger = logging.getLogger("notification_dispatcher")

DEFAULT_SUBJECT = "Inventory Alert"
DEFAULT_HISTORY_LIMIT = 20
MAX_HISTORY_LIMIT = 100


def clamp_limit(limit: Optional[int], default: int = DEFAULT_HISTORY_LIMIT, maximum: int = MAX_HISTORY_LIMIT) -> int:
    """Clamp a caller-supplied history limit into [1, maximum]."""
    if limit is None:
        limit = default
    return max(1, min(limit, maximum))


class NotificationDispatcher:
    """
    Best-effort notification sender with a recorded outcome.

    Example:
        dispatcher = NotificationDispatcher(senders, history, hub)
        record = await dispatcher.dispatch("sms", "+1-555-0100", None, "SKU-1 is out of stock")
        record.delivered  # False when no SMS webhook is configured
    """

    def __init__(
        self,
        senders: dict[Channel, ChannelSender],
        history: NotificationHistory,
        hub: BroadcastHub,
        default_history_limit: int = DEFAULT_HISTORY_LIMIT,
        max_history_limit: int = MAX_HISTORY_LIMIT,
    ):
        self.senders = senders
        self.history = history
        self.hub = hub
        self.default_history_limit = default_history_limit
        self.max_history_limit = max_history_limit

    def _sender_for(self, channel: Channel) -> ChannelSender:
        sender = self.senders.get(channel)
        if sender is None:
            sender = LogOnlySender(channel)
            self.senders[channel] = sender
        return sender

    async def dispatch(
        self,
        channel: str,
        recipient: str,
        subject: Optional[str],
        message: str,
    ) -> NotificationRecord:
        """
        Attempt delivery once and record the outcome.

        Args:
            channel: "email" or "sms" (case-insensitive).
            recipient: Address or phone number.
            subject: Subject line; defaults to "Inventory Alert".
            message: Message body.

        Returns:
            The persisted NotificationRecord.

        Raises:
            ValidationError: If the request is rejected before any attempt.
            PersistenceError: If the history could not be written.
        """
        if isinstance(channel, Channel):
            channel_type = channel
        else:
            try:
                channel_type = Channel(str(channel or "").strip().lower())
            except ValueError:
                raise ValidationError("channel must be email or sms") from None

        recipient = str(recipient or "").strip()
        message = str(message or "").strip()
        if not recipient or not message:
            raise ValidationError("recipient and message are required")
        subject = str(subject or "").strip() or DEFAULT_SUBJECT

        outcome = await self._sender_for(channel_type).send(recipient, subject, message)

        record = NotificationRecord(
            channel=channel_type,
            recipient=recipient,
            subject=subject,
            message=message,
            delivered=outcome.delivered,
            mode=outcome.mode,
            result_message=outcome.message,
        )
        await run_in_threadpool(self.history.append, record)
        logger.info(f"Recorded notification {record.id}: {channel_type.value} to {recipient} {outcome}")

        self.hub.publish(
            EventTypes.NOTIFICATION_SENT,
            {"notificationId": record.id, "channel": channel_type.value},
        )
        return record

    def recent(self, limit: Optional[int] = None) -> list[NotificationRecord]:
        """History, most recent first, with `limit` clamped to a safe range."""
        return self.history.recent(clamp_limit(limit, self.default_history_limit, self.max_history_limit))
