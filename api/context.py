"""
Process-scoped application context.

All shared mutable state (stores, revision clock, subscriber registry,
dispatcher) hangs off one AppContext built at startup. Nothing is persisted
across restarts except the two snapshot files; the revision is reseeded and
the subscriber set starts empty.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from config import Settings, get_settings
from inventory.data_store import NotificationHistory, ProductStore
from inventory.service import InventoryService
from notifications.channels import build_senders
from notifications.dispatcher import NotificationDispatcher
from realtime.hub import BroadcastHub
from realtime.revision import RevisionClock

logger = logging.getLogger("app_context")


@dataclass
class AppContext:
    """Everything a request handler needs, owned by one process."""
    settings: Settings
    store: ProductStore
    history: NotificationHistory
    clock: RevisionClock
    hub: BroadcastHub
    inventory: InventoryService
    dispatcher: NotificationDispatcher


def build_context(settings: Optional[Settings] = None) -> AppContext:
    """
    Wire up a fresh context.

    Args:
        settings: Configuration to use; defaults to get_settings().
    """
    settings = settings or get_settings()

    store = ProductStore(data_dir=settings.data_dir)
    history = NotificationHistory(data_dir=settings.data_dir)
    clock = RevisionClock()
    hub = BroadcastHub(clock=clock, queue_size=settings.subscriber_queue_size)
    senders = build_senders(
        email_webhook_url=settings.email_webhook_url,
        sms_webhook_url=settings.sms_webhook_url,
        timeout=settings.webhook_timeout,
    )
    dispatcher = NotificationDispatcher(
        senders=senders,
        history=history,
        hub=hub,
        default_history_limit=settings.notification_history_default,
        max_history_limit=settings.notification_history_max,
    )

    logger.info(f"Context ready: data_dir={settings.data_dir}, revision={clock.current()}")
    return AppContext(
        settings=settings,
        store=store,
        history=history,
        clock=clock,
        hub=hub,
        inventory=InventoryService(store, hub),
        dispatcher=dispatcher,
    )


# Module-level instance, created on first use
_context: Optional[AppContext] = None


def get_context() -> AppContext:
    """Get the process context, building it on first use."""
    global _context
    if _context is None:
        _context = build_context()
    return _context


def reset_app_context(context: Optional[AppContext] = None) -> Optional[AppContext]:
    """Replace the process context (for testing). Pass None to rebuild lazily."""
    global _context
    _context = context
    return _context
