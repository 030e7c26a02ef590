"""
Domain models for the inventory service.

Records are Pydantic models that serialize with camelCase keys, which is the
shape used both on the wire and in the JSON snapshot files. Python code works
with the snake_case attribute names.

Design decisions:
- Product is rebuilt (model_copy) on every change, never mutated in place
- NotificationRecord is frozen: once written to history it never changes
- Timestamps are timezone-aware UTC and serialize as ISO-8601 strings
"""

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate a record identity."""
    return str(uuid4())


# =============================================================================
# Enums
# =============================================================================

class Channel(str, Enum):
    """Notification channels accepted by the dispatcher."""
    EMAIL = "email"
    SMS = "sms"


class DeliveryMode(str, Enum):
    """How a notification attempt was handled."""
    LOG_ONLY = "log-only"     # No endpoint configured, nothing left the process
    WEBHOOK = "webhook"       # One HTTP attempt was made


# =============================================================================
# Records
# =============================================================================

class Product(BaseModel):
    """
    A live inventory record.

    `id` is the system identity; `product_id` is the caller-supplied business
    key and is unique across the live set.
    """
    id: str = Field(default_factory=new_id, description="System-generated identity")
    product_id: str = Field(..., description="Business key (SKU)")
    product_name: str
    category: str
    price: float = Field(..., gt=0)
    quantity: int = Field(..., ge=0)
    manufacturing_date: str
    supplier: str
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        """Wire/disk representation."""
        return self.model_dump(mode="json", by_alias=True)


class ProductInput(BaseModel):
    """
    A validated create/update payload.

    Built by `inventory.validation.validate_product_input` once the raw
    request body passed the field checks.
    """
    product_id: str
    product_name: str
    category: str
    price: float
    quantity: int
    manufacturing_date: str
    supplier: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class NotificationRecord(BaseModel):
    """
    Immutable history entry for one dispatch attempt.

    Recorded whether or not the message was delivered.
    """
    id: str = Field(default_factory=new_id)
    channel: Channel
    recipient: str
    subject: str
    message: str
    delivered: bool
    mode: DeliveryMode
    result_message: str
    created_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        use_enum_values=True,
    )

    def to_dict(self) -> dict:
        """Wire/disk representation."""
        return self.model_dump(mode="json", by_alias=True)
