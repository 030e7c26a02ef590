"""
Inventory core: product records and their persistence.

This package contains:
- Domain models (Product, NotificationRecord)
- Field validation for product payloads
- JSON snapshot stores with single-writer serialization
- The mutation service that announces changes on the broadcast hub
- Stock alert evaluation
"""

from inventory.models import Channel, DeliveryMode, NotificationRecord, Product, ProductInput
from inventory.errors import (
    InventoryError,
    PayloadError,
    ValidationError,
    DuplicateKeyError,
    NotFoundError,
    PersistenceError,
    DeliveryFailure,
)
from inventory.data_store import ProductStore, NotificationHistory
from inventory.alerts import evaluate_alerts

__all__ = [
    "Channel",
    "DeliveryMode",
    "NotificationRecord",
    "Product",
    "ProductInput",
    "InventoryError",
    "PayloadError",
    "ValidationError",
    "DuplicateKeyError",
    "NotFoundError",
    "PersistenceError",
    "DeliveryFailure",
    "ProductStore",
    "NotificationHistory",
    "evaluate_alerts",
]
