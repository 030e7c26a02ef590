"""
Shared pytest fixtures for the inventory service tests.

Every test gets its own temporary data directory, so stores, history and
the API context never share state between tests.
"""

import pytest
from pathlib import Path

from api.context import AppContext, build_context
from config import Settings
from inventory.data_store import NotificationHistory, ProductStore
from realtime.hub import BroadcastHub
from realtime.revision import RevisionClock


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Fresh, empty data directory."""
    return tmp_path / "data"


@pytest.fixture
def store(data_dir: Path) -> ProductStore:
    """Fresh ProductStore backed by the temp directory."""
    return ProductStore(data_dir=data_dir)


@pytest.fixture
def history(data_dir: Path) -> NotificationHistory:
    """Fresh NotificationHistory backed by the temp directory."""
    return NotificationHistory(data_dir=data_dir)


@pytest.fixture
def clock() -> RevisionClock:
    """Revision clock with a small, predictable seed."""
    return RevisionClock(seed=1000, clock=lambda: 0)


@pytest.fixture
def hub(clock: RevisionClock) -> BroadcastHub:
    """Hub with tiny outboxes so slow-subscriber eviction is easy to trigger."""
    return BroadcastHub(clock=clock, queue_size=4)


@pytest.fixture
def settings(data_dir: Path) -> Settings:
    """Settings with no webhooks configured."""
    return Settings(
        data_dir=data_dir,
        email_webhook_url=None,
        sms_webhook_url=None,
    )


@pytest.fixture
def context(settings: Settings) -> AppContext:
    """Fully wired application context."""
    return build_context(settings)


# =============================================================================
# Payload Fixtures
# =============================================================================

@pytest.fixture
def widget_payload() -> dict:
    """A valid create payload for a well-stocked product."""
    return {
        "productId": "SKU-001",
        "productName": "Hex Bolt M8",
        "category": "Hardware",
        "price": 0.35,
        "quantity": 120,
        "manufacturingDate": "2026-03-01",
        "supplier": "Bolt & Co",
    }


@pytest.fixture
def gadget_payload() -> dict:
    """A valid create payload for a low-stock product."""
    return {
        "productId": "SKU-002",
        "productName": "Torque Wrench",
        "category": "Tools",
        "price": 89.5,
        "quantity": 3,
        "manufacturingDate": "2025-11-20",
        "supplier": "ToolWorks",
    }


@pytest.fixture
def make_payload():
    """Factory for valid payloads with a given business key and quantity."""
    def _make(product_id: str, quantity: int = 10, **overrides) -> dict:
        payload = {
            "productId": product_id,
            "productName": f"Product {product_id}",
            "category": "General",
            "price": 9.99,
            "quantity": quantity,
            "manufacturingDate": "2026-01-15",
            "supplier": "Acme",
        }
        payload.update(overrides)
        return payload
    return _make
