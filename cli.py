#!/usr/bin/env python3
"""
Command-line interface for the inventory service.

Usage:
    uv run python cli.py [command] [options]

Commands:
    serve           Start the API server
    test            Run the test suite
    products        Print the current product snapshot
    alerts          Print low-stock and out-of-stock alerts
    notifications   Print recent notification history

Examples:
    uv run python cli.py serve --reload
    uv run python cli.py alerts
    uv run python cli.py notifications --limit 5
"""

import argparse
import subprocess
import sys
from pathlib import Path
from typing import Optional

from config import get_settings
from inventory.alerts import evaluate_alerts
from inventory.data_store import NotificationHistory, ProductStore
from inventory.errors import PersistenceError
from notifications.dispatcher import clamp_limit


def run_tests(args: list[str]) -> None:
    """Run the test suite."""
    cmd = ["uv", "run", "pytest"] + args
    subprocess.run(cmd)


def run_server(host: str, port: int, reload: bool) -> None:
    """Start the API server."""
    cmd = ["uv", "run", "uvicorn", "api.main:app", f"--host={host}", f"--port={port}"]
    if reload:
        cmd.append("--reload")

    print(f"Starting server at http://{host}:{port}")
    print(f"API docs available at http://{host}:{port}/docs")
    subprocess.run(cmd)


def show_products(data_dir: Path) -> None:
    """Print every product, one per line."""
    products = ProductStore(data_dir=data_dir).list()
    if not products:
        print("No products.")
        return
    for p in products:
        print(f"{p.product_id:<16} {p.product_name:<32} qty={p.quantity:<6} {p.price:>10.2f}  {p.supplier}")
    print(f"\n{len(products)} products")


def show_alerts(data_dir: Path, threshold: int) -> None:
    """Print the stock alert summary."""
    alerts = evaluate_alerts(ProductStore(data_dir=data_dir).list(), threshold=threshold)
    print(f"Low stock:    {alerts['lowStockCount']}")
    print(f"Out of stock: {alerts['outOfStockCount']}")
    for item in alerts["lowStockItems"]:
        print(f"  - {item['productId']} {item['productName']} (qty {item['quantity']}, {item['supplier']})")


def show_notifications(data_dir: Path, limit: Optional[int]) -> None:
    """Print notification history, most recent first."""
    records = NotificationHistory(data_dir=data_dir).recent(clamp_limit(limit))
    if not records:
        print("No notifications.")
        return
    for r in records:
        status = "✓" if r.delivered else "✗"
        print(f"{status} {r.created_at:%Y-%m-%d %H:%M:%S} {r.channel:<5} {r.mode:<8} {r.recipient}: {r.subject} ({r.result_message})")


def main() -> None:
    """Main CLI entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Inventory Service CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s serve --reload
  %(prog)s products
  %(prog)s alerts
  %(prog)s notifications --limit 5
  %(prog)s test -v
        """,
    )
    parser.add_argument("--data-dir", type=Path, default=settings.data_dir, help="Data directory")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default=settings.host, help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=settings.port, help="Port to bind to")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    # Test command
    test_parser = subparsers.add_parser("test", help="Run the test suite")
    test_parser.add_argument(
        "pytest_args",
        nargs="*",
        default=[],
        help="Arguments to pass to pytest",
    )

    # Read-only views
    subparsers.add_parser("products", help="Print the product snapshot")
    alerts_parser = subparsers.add_parser("alerts", help="Print stock alerts")
    alerts_parser.add_argument("--threshold", type=int, default=settings.low_stock_threshold)
    notifications_parser = subparsers.add_parser("notifications", help="Print notification history")
    notifications_parser.add_argument("--limit", type=int, default=None, help="Number of records (1-100)")

    args = parser.parse_args()

    try:
        if args.command == "serve":
            run_server(args.host, args.port, args.reload)
        elif args.command == "test":
            run_tests(args.pytest_args)
        elif args.command == "products":
            show_products(args.data_dir)
        elif args.command == "alerts":
            show_alerts(args.data_dir, args.threshold)
        elif args.command == "notifications":
            show_notifications(args.data_dir, args.limit)
        else:
            parser.print_help()
    except PersistenceError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
