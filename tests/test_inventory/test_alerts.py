"""
Tests for stock alert evaluation.
"""

from inventory.alerts import evaluate_alerts
from inventory.models import Product


def product(quantity: int, key: str = "") -> Product:
    key = key or f"SKU-{quantity}"
    return Product(
        product_id=key,
        product_name=f"Item {key}",
        category="General",
        price=1.0,
        quantity=quantity,
        manufacturing_date="2026-01-01",
        supplier="Acme",
    )


class TestEvaluateAlerts:
    """Tests for evaluate_alerts."""

    def test_counts(self):
        """Test quantities {0, 2, 4, 5, 10}: three low stock, one out of stock."""
        products = [product(q) for q in (0, 2, 4, 5, 10)]

        alerts = evaluate_alerts(products)

        assert alerts["lowStockCount"] == 3
        assert alerts["outOfStockCount"] == 1
        assert [i["quantity"] for i in alerts["lowStockItems"]] == [0, 2, 4]

    def test_projection_fields(self):
        """Test that low-stock items carry only the projected fields."""
        item = product(1, key="SKU-X")

        alerts = evaluate_alerts([item])

        assert alerts["lowStockItems"] == [{
            "id": item.id,
            "productId": "SKU-X",
            "productName": "Item SKU-X",
            "quantity": 1,
            "supplier": "Acme",
        }]

    def test_empty_snapshot(self):
        """Test that an empty snapshot yields zero counts."""
        assert evaluate_alerts([]) == {"lowStockCount": 0, "outOfStockCount": 0, "lowStockItems": []}

    def test_item_list_is_capped(self):
        """Test that the projection is capped but counts are not."""
        products = [product(1, key=f"SKU-{i}") for i in range(10)]

        alerts = evaluate_alerts(products, max_items=3)

        assert alerts["lowStockCount"] == 10
        assert len(alerts["lowStockItems"]) == 3

    def test_custom_threshold(self):
        """Test a different low-stock threshold."""
        products = [product(q) for q in (5, 9, 10)]
        assert evaluate_alerts(products, threshold=10)["lowStockCount"] == 2

    def test_does_not_modify_input(self):
        """Test that evaluation is a pure projection."""
        products = [product(0), product(7)]
        snapshot = [p.model_copy() for p in products]

        evaluate_alerts(products)

        assert products == snapshot
