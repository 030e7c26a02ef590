"""
Stock alert evaluation.

A pure projection of a product snapshot: no state, no I/O. Callable at any
time against any list of products.
"""

from collections.abc import Iterable

from inventory.models import Product

LOW_STOCK_THRESHOLD = 5
MAX_ALERT_ITEMS = 50


def evaluate_alerts(
    products: Iterable[Product],
    threshold: int = LOW_STOCK_THRESHOLD,
    max_items: int = MAX_ALERT_ITEMS,
) -> dict:
    """
    Summarize low-stock and out-of-stock products.

    Every product with quantity below `threshold` counts as low stock,
    including those at zero. Out-of-stock products are additionally
    counted on their own.

    Args:
        products: Snapshot to evaluate.
        threshold: Quantities strictly below this are low stock.
        max_items: Cap on the number of projected low-stock items.

    Returns:
        {"lowStockCount", "outOfStockCount", "lowStockItems"}
    """
    low_stock = [p for p in products if p.quantity < threshold]
    out_of_stock = sum(1 for p in low_stock if p.quantity == 0)

    return {
        "lowStockCount": len(low_stock),
        "outOfStockCount": out_of_stock,
        "lowStockItems": [
            {
                "id": p.id,
                "productId": p.product_id,
                "productName": p.product_name,
                "quantity": p.quantity,
                "supplier": p.supplier,
            }
            for p in low_stock[:max_items]
        ],
    }
