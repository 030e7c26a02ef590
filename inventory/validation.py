"""
Field validation for product payloads and restock deltas.

Payloads arrive as decoded JSON objects with camelCase keys. The checks run
in a fixed order and the first failure wins, so callers get one clear message
per rejected request. Nothing here touches the store.
"""

import math
from typing import Any, Optional

from inventory.errors import PayloadError, ValidationError
from inventory.models import ProductInput

# Checked in this order; the first missing key is reported.
REQUIRED_FIELDS = (
    ("productId", "product_id"),
    ("productName", "product_name"),
    ("category", "category"),
    ("price", "price"),
    ("quantity", "quantity"),
    ("manufacturingDate", "manufacturing_date"),
    ("supplier", "supplier"),
)


# Largest integer accepted for quantities and deltas (signed 64-bit).
MAX_INTEGER = 2**63 - 1


def _lookup(payload: dict, camel: str, snake: str) -> Any:
    if camel in payload:
        return payload[camel]
    return payload.get(snake)


def _is_blank(value: Any) -> bool:
    if isinstance(value, (int, float)):
        return False
    return value is None or str(value).strip() == ""


def _to_number(value: Any) -> Optional[float]:
    """Coerce a JSON scalar to a finite float, or None if it isn't one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int) and abs(value) > MAX_INTEGER:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _to_int(value: Any) -> Optional[int]:
    """
    Coerce to int if the value is an integral number (3, 3.0 or "3").

    Ints and integer strings are taken exactly, without a float round trip.
    Anything beyond MAX_INTEGER is rejected.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    else:
        try:
            number = int(value.strip()) if isinstance(value, str) else None
        except ValueError:
            number = None
        if number is None:
            as_float = _to_number(value)
            if as_float is None or not as_float.is_integer():
                return None
            number = int(as_float)
    if abs(number) > MAX_INTEGER:
        return None
    return number


def validate_product_input(payload: Any) -> ProductInput:
    """
    Validate a create/update payload.

    Args:
        payload: Decoded request body.

    Returns:
        The normalized ProductInput.

    Raises:
        PayloadError: If the payload is not a JSON object.
        ValidationError: On the first missing or invalid field.
    """
    if not isinstance(payload, dict):
        raise PayloadError("Payload must be a JSON object")

    values = {}
    for camel, snake in REQUIRED_FIELDS:
        value = _lookup(payload, camel, snake)
        if _is_blank(value):
            raise ValidationError(f"{camel} is required")
        values[snake] = value

    price = _to_number(values["price"])
    if price is None:
        raise ValidationError("price must be a number")
    if price <= 0:
        raise ValidationError("price must be greater than zero")

    quantity = _to_int(values["quantity"])
    if quantity is None or quantity < 0:
        raise ValidationError("quantity must be a non-negative integer")

    return ProductInput(
        product_id=str(values["product_id"]),
        product_name=str(values["product_name"]),
        category=str(values["category"]),
        price=price,
        quantity=quantity,
        manufacturing_date=str(values["manufacturing_date"]),
        supplier=str(values["supplier"]),
    )


def validate_restock_delta(delta: Any) -> int:
    """Return `delta` as a positive int or raise ValidationError."""
    value = _to_int(delta)
    if value is None or value <= 0:
        raise ValidationError("delta must be a positive integer")
    return value
