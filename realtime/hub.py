"""
Broadcast hub for live inventory updates.

Keeps the set of connected stream subscribers and fans every state-change
event out to all of them. Each subscriber owns a bounded outbox that its
connection drains; publishing only ever does a non-blocking put, so a slow
or dead connection can never stall the publisher or the other subscribers.

Design decisions:
- Registry keyed by opaque subscriber ids
- A failed put (outbox full, subscriber already closed) evicts that
  subscriber on the spot instead of raising to the publisher
- Keep-alive runs on its own timer, independent of the mutation path
- Everything except the revision clock runs on the event loop thread
"""

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from realtime.revision import RevisionClock

logger = logging.getLogger("broadcast_hub")

DEFAULT_QUEUE_SIZE = 256
DEFAULT_HEARTBEAT_INTERVAL = 20.0

# Outbox markers
HEARTBEAT = object()
_CLOSED = object()


class EventTypes:
    """Event type names pushed to stream subscribers."""
    PRODUCT_CREATED = "product_created"
    PRODUCT_UPDATED = "product_updated"
    PRODUCT_DELETED = "product_deleted"
    PRODUCT_RESTOCKED = "product_restocked"
    NOTIFICATION_SENT = "notification_sent"


class SubscriberClosed(Exception):
    """Raised when delivering to a subscriber that was already evicted."""
    pass


class Subscriber:
    """
    Handle for one live stream connection.

    Carries no persisted identity and is only meaningful to the hub that
    created it.
    """

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE):
        self.id = str(uuid4())
        self.outbox: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self.connected_at = datetime.now(timezone.utc)
        self.evicted = False

    def deliver(self, item: Any) -> None:
        """
        Queue an item without waiting.

        Raises:
            SubscriberClosed: If the subscriber was evicted.
            asyncio.QueueFull: If the connection is not keeping up.
        """
        if self.evicted:
            raise SubscriberClosed(self.id)
        self.outbox.put_nowait(item)

    def close(self) -> None:
        """Mark as evicted and wake the stream if it is waiting."""
        if self.evicted:
            return
        self.evicted = True
        try:
            self.outbox.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            # The stream has items to drain and checks `evicted` after each one
            pass

    def __str__(self) -> str:
        return f"Subscriber({self.id[:8]})"


def format_event(envelope: dict) -> str:
    """Render an envelope as a server-sent-events frame."""
    return f"event: {envelope['type']}\ndata: {json.dumps(envelope)}\n\n"


class BroadcastHub:
    """
    Pub/sub registry for stream subscribers.

    Example usage:
        hub = BroadcastHub(RevisionClock())
        subscriber = hub.subscribe()

        hub.publish(EventTypes.PRODUCT_CREATED, {"productId": product.id})

        async for frame in hub.stream(subscriber):
            ...
    """

    def __init__(self, clock: Optional[RevisionClock] = None, queue_size: int = DEFAULT_QUEUE_SIZE):
        """
        Initialize the hub with an empty subscriber set.

        Args:
            clock: Revision clock advanced on every publish.
            queue_size: Outbox capacity per subscriber. A subscriber that
                        falls this far behind is evicted.
        """
        self.clock = clock or RevisionClock()
        self.queue_size = queue_size
        self._subscribers: dict[str, Subscriber] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscriber:
        """Register a new subscriber."""
        subscriber = Subscriber(queue_size=self.queue_size)
        self._subscribers[subscriber.id] = subscriber
        logger.info(f"{subscriber} connected ({self.subscriber_count} active)")
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> bool:
        """
        Remove a subscriber. Safe to call more than once.

        Returns:
            True if the subscriber was still registered.
        """
        subscriber.close()
        removed = self._subscribers.pop(subscriber.id, None) is not None
        if removed:
            logger.info(f"{subscriber} disconnected ({self.subscriber_count} active)")
        return removed

    def is_subscribed(self, subscriber: Subscriber) -> bool:
        return subscriber.id in self._subscribers

    def _deliver(self, subscriber: Subscriber, item: Any) -> bool:
        try:
            subscriber.deliver(item)
            return True
        except (asyncio.QueueFull, SubscriberClosed):
            logger.warning(f"Evicting {subscriber}: outbox full or closed")
            self.unsubscribe(subscriber)
            return False

    def publish(self, event_type: str, details: Optional[dict[str, Any]] = None) -> dict:
        """
        Fan an event out to every registered subscriber.

        Args:
            event_type: One of EventTypes.
            details: Extra envelope fields, typically record identifiers.

        Returns:
            The envelope that was delivered.
        """
        envelope = {
            "type": event_type,
            "revision": self.clock.advance(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **(details or {}),
        }

        delivered = 0
        for subscriber in list(self._subscribers.values()):
            if self._deliver(subscriber, envelope):
                delivered += 1

        logger.debug(f"Published {event_type} rev={envelope['revision']} to {delivered} subscribers")
        return envelope

    def send_heartbeats(self) -> int:
        """Queue a heartbeat for every subscriber. Returns how many accepted it."""
        return sum(
            1 for subscriber in list(self._subscribers.values())
            if self._deliver(subscriber, HEARTBEAT)
        )

    async def run_keepalive(self, interval: float = DEFAULT_HEARTBEAT_INTERVAL) -> None:
        """Send heartbeats every `interval` seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            self.send_heartbeats()

    async def stream(self, subscriber: Optional[Subscriber] = None) -> AsyncIterator[str]:
        """
        Yield server-sent-event frames for one subscriber.

        Without a subscriber, one is registered when iteration starts, so a
        stream that is never consumed never occupies a slot. Ends when the
        subscriber is evicted. When the consumer stops iterating (transport
        closed) the subscriber is unregistered.
        """
        if subscriber is None:
            subscriber = self.subscribe()
        try:
            yield ": connected\n\n"
            while True:
                item = await subscriber.outbox.get()
                if item is _CLOSED or subscriber.evicted:
                    break
                if item is HEARTBEAT:
                    yield ": heartbeat\n\n"
                else:
                    yield format_event(item)
        finally:
            self.unsubscribe(subscriber)

    def close(self) -> None:
        """Evict every subscriber (process shutdown)."""
        for subscriber in list(self._subscribers.values()):
            self.unsubscribe(subscriber)
