"""
Delivery channels for inventory alert notifications.

Each channel (email, SMS) is backed by one sender chosen at startup:
- WebhookSender posts the message to a configured HTTP endpoint
- LogOnlySender is used when no endpoint is configured; it logs and reports
  the message as not delivered

Design decisions:
- Exactly one attempt per message, with an explicit timeout, never a retry
- Failures come back as a DeliveryOutcome, never as an exception, so the
  dispatcher can record them like any other result
- The dispatcher only sees the ChannelSender interface and does not care
  which implementation it got
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from inventory.errors import DeliveryFailure
from inventory.models import Channel, DeliveryMode

logger = logging.getLogger("notifications")

DEFAULT_TIMEOUT = 5.0


@dataclass(frozen=True)
class DeliveryOutcome:
    """
    Result of a single delivery attempt.

    `message` is a short human-readable reason, stored as the record's
    resultMessage.
    """
    delivered: bool
    mode: DeliveryMode
    message: str

    def __str__(self) -> str:
        status = "✓" if self.delivered else "✗"
        return f"{status} {self.mode.value}: {self.message}"


class ChannelSender(Protocol):
    """What the dispatcher needs from a channel."""

    channel: Channel

    async def send(self, recipient: str, subject: str, message: str) -> DeliveryOutcome:
        ...


class LogOnlySender:
    """
    Sender for a channel with no endpoint configured.

    Makes no network call. Not delivering is the expected outcome here,
    not an error.
    """

    def __init__(self, channel: Channel):
        self.channel = channel

    async def send(self, recipient: str, subject: str, message: str) -> DeliveryOutcome:
        logger.info(
            f"[{self.channel.value.upper()} LOG-ONLY] To: {recipient} | Subject: {subject}"
        )
        logger.debug(f"[{self.channel.value.upper()} BODY] {message}")
        return DeliveryOutcome(
            delivered=False,
            mode=DeliveryMode.LOG_ONLY,
            message="Webhook not configured",
        )


class WebhookSender:
    """
    Sender that POSTs JSON to an external webhook.

    The body is {"subject", "recipient", "message"}. Any 2xx response counts
    as delivered.
    """

    def __init__(
        self,
        channel: Channel,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the webhook sender.

        Args:
            channel: Channel this sender serves.
            url: Endpoint receiving the POST.
            timeout: Upper bound in seconds for the whole attempt.
            transport: Optional httpx transport, used by tests to stub the endpoint.
        """
        self.channel = channel
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def _request(self, payload: dict) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            return await client.post(self.url, json=payload)

    async def _post(self, payload: dict) -> httpx.Response:
        """
        Make the one HTTP attempt, raising DeliveryFailure if it fails.

        httpx applies its timeout per connect/read/write phase, so a slowly
        trickling response could outlast it. wait_for caps the whole attempt.
        """
        try:
            response = await asyncio.wait_for(self._request(payload), self.timeout)
        except asyncio.TimeoutError as e:
            raise DeliveryFailure(f"Webhook timed out after {self.timeout:g}s") from e
        except httpx.HTTPError as e:
            raise DeliveryFailure(str(e) or e.__class__.__name__) from e

        if not response.is_success:
            raise DeliveryFailure(f"Webhook failed: {response.status_code}")
        return response

    async def send(self, recipient: str, subject: str, message: str) -> DeliveryOutcome:
        label = self.channel.value.upper()
        try:
            await self._post({"subject": subject, "recipient": recipient, "message": message})
        except DeliveryFailure as e:
            logger.warning(f"[{label} FAILED] To: {recipient} | Error: {e.message}")
            return DeliveryOutcome(delivered=False, mode=DeliveryMode.WEBHOOK, message=e.message)

        logger.info(f"[{label}] To: {recipient} | Subject: {subject}")
        return DeliveryOutcome(
            delivered=True,
            mode=DeliveryMode.WEBHOOK,
            message="Delivered to webhook",
        )


def build_senders(
    email_webhook_url: Optional[str] = None,
    sms_webhook_url: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> dict[Channel, ChannelSender]:
    """
    Pick a sender per channel. Called once at startup.

    A channel without a URL falls back to LogOnlySender.
    """
    urls = {Channel.EMAIL: email_webhook_url, Channel.SMS: sms_webhook_url}
    senders: dict[Channel, ChannelSender] = {}
    for channel, url in urls.items():
        if url:
            senders[channel] = WebhookSender(channel, url, timeout=timeout)
            logger.info(f"{channel.value} notifications go to webhook {url}")
        else:
            senders[channel] = LogOnlySender(channel)
            logger.info(f"{channel.value} webhook not configured; notifications are log-only")
    return senders
