"""
Tests for product payload and restock delta validation.
"""

import pytest

from inventory.errors import PayloadError, ValidationError
from inventory.validation import validate_product_input, validate_restock_delta


class TestValidateProductInput:
    """Tests for validate_product_input."""

    def test_valid_payload(self, widget_payload: dict):
        """Test that a complete payload is normalized."""
        data = validate_product_input(widget_payload)

        assert data.product_id == "SKU-001"
        assert data.price == 0.35
        assert data.quantity == 120
        assert data.manufacturing_date == "2026-03-01"

    def test_numeric_strings_are_coerced(self, make_payload):
        """Test that numbers sent as strings are accepted."""
        data = validate_product_input(make_payload("SKU-9", price="12.50", quantity="7"))

        assert data.price == 12.5
        assert data.quantity == 7

    def test_integral_float_quantity(self, make_payload):
        """Test that 4.0 is an acceptable quantity."""
        assert validate_product_input(make_payload("SKU-9", quantity=4.0)).quantity == 4

    def test_snake_case_keys(self, make_payload):
        """Test that snake_case keys are accepted as well."""
        payload = {
            "product_id": "SKU-5",
            "product_name": "Spanner",
            "category": "Tools",
            "price": 5,
            "quantity": 0,
            "manufacturing_date": "2026-01-01",
            "supplier": "ToolWorks",
        }
        assert validate_product_input(payload).product_id == "SKU-5"

    @pytest.mark.parametrize("field", [
        "productId", "productName", "category", "price",
        "quantity", "manufacturingDate", "supplier",
    ])
    def test_missing_field(self, widget_payload: dict, field: str):
        """Test that each required field is enforced."""
        del widget_payload[field]

        with pytest.raises(ValidationError, match=f"{field} is required"):
            validate_product_input(widget_payload)

    def test_blank_field(self, widget_payload: dict):
        """Test that whitespace-only values count as missing."""
        widget_payload["supplier"] = "   "

        with pytest.raises(ValidationError, match="supplier is required"):
            validate_product_input(widget_payload)

    @pytest.mark.parametrize("price", [0, -1, "-0.5"])
    def test_non_positive_price(self, widget_payload: dict, price):
        """Test that price must be greater than zero."""
        widget_payload["price"] = price

        with pytest.raises(ValidationError, match="price must be greater than zero"):
            validate_product_input(widget_payload)

    def test_non_numeric_price(self, widget_payload: dict):
        """Test that a non-numeric price is rejected."""
        widget_payload["price"] = "cheap"

        with pytest.raises(ValidationError, match="price must be a number"):
            validate_product_input(widget_payload)

    @pytest.mark.parametrize("quantity", [-1, 2.5, "many", True, 2**63, 10**400, "9" * 400])
    def test_invalid_quantity(self, widget_payload: dict, quantity):
        """Test that quantity must be a non-negative integer."""
        widget_payload["quantity"] = quantity

        with pytest.raises(ValidationError, match="quantity must be a non-negative integer"):
            validate_product_input(widget_payload)

    def test_large_quantity_is_exact(self, widget_payload: dict):
        """Test that quantities beyond float precision keep their exact value."""
        widget_payload["quantity"] = 2**53 + 1
        assert validate_product_input(widget_payload).quantity == 2**53 + 1

    @pytest.mark.parametrize("price", [10**400, "1e400"])
    def test_out_of_range_price(self, widget_payload: dict, price):
        """Test that a price too large for a float is rejected."""
        widget_payload["price"] = price

        with pytest.raises(ValidationError, match="price must be a number"):
            validate_product_input(widget_payload)

    def test_zero_quantity_is_valid(self, widget_payload: dict):
        """Test that zero stock is allowed."""
        widget_payload["quantity"] = 0
        assert validate_product_input(widget_payload).quantity == 0

    @pytest.mark.parametrize("payload", [[], "text", 42, None])
    def test_non_object_payload(self, payload):
        """Test that a payload that isn't an object is a PayloadError."""
        with pytest.raises(PayloadError):
            validate_product_input(payload)


class TestValidateRestockDelta:
    """Tests for validate_restock_delta."""

    @pytest.mark.parametrize("delta,expected", [(1, 1), (5, 5), ("3", 3), (2.0, 2)])
    def test_valid_delta(self, delta, expected):
        """Test accepted delta values."""
        assert validate_restock_delta(delta) == expected

    @pytest.mark.parametrize("delta", [0, -1, 1.5, "x", None, True, 10**400, "1e400"])
    def test_invalid_delta(self, delta):
        """Test rejected delta values."""
        with pytest.raises(ValidationError, match="delta must be a positive integer"):
            validate_restock_delta(delta)
