"""
JSON-backed persistence for products and notification history.

Each collection lives in its own file and is always rewritten as a complete
snapshot. Because every write replaces the whole file, two interleaved
read-modify-write cycles would silently drop one of the changes, so every
mutation runs under a per-store lock (single writer).

Design decisions:
- Coarse-grained locking: one lock per store instance, not per record
- Snapshots are written to a temp file and renamed over the target, so a
  failed write never leaves a half-written file behind
- The in-memory snapshot is a read-only mapping that is swapped only after
  the file write succeeded; readers take no lock and never see a torn state
- Files are loaded lazily on first access
"""

import json
import logging
import os
import tempfile
import threading
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from inventory.errors import DuplicateKeyError, NotFoundError, PersistenceError
from inventory.models import NotificationRecord, Product, utcnow
from inventory.validation import validate_product_input, validate_restock_delta

logger = logging.getLogger("product_store")

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


class SnapshotFile:
    """
    A JSON list stored in one file, replaced atomically on every write.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def ensure(self) -> None:
        """Create the parent directory and an empty collection if missing."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.write([])

    def read(self) -> list[dict]:
        self.ensure()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Could not read {self.path.name}: {e}") from e
        if not isinstance(data, list):
            raise PersistenceError(f"{self.path.name} does not contain a JSON list")
        return data

    def write(self, items: list[dict]) -> None:
        """
        Replace the file contents with `items`.

        The data is written to a sibling temp file, fsynced and renamed over
        the target, so readers of the file see either the old or the new
        snapshot.
        """
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                json.dump(items, tmp, indent=2)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Could not write {self.path.name}: {e}") from e


class ProductStore:
    """
    Owns the product collection.

    All mutating operations validate their input before taking the lock,
    then check identity/uniqueness and persist the new snapshot while
    holding it. Validation and conflict errors leave both the file and the
    in-memory snapshot untouched.

    Example:
        store = ProductStore(data_dir=Path("data"))
        product = store.create({"productId": "SKU-1", ...})
        store.restock(product.id, 5)
    """

    def __init__(self, data_dir: Optional[Path] = None, filename: str = "products.json"):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding the snapshot file. Defaults to ./data
                      relative to the project root.
            filename: Snapshot file name inside data_dir.
        """
        self.data_dir = Path(data_dir) if data_dir is not None else DEFAULT_DATA_DIR
        self._file = SnapshotFile(self.data_dir / filename)
        self._lock = threading.Lock()
        self._products: Optional[Mapping[str, Product]] = None

    # =========================================================================
    # Loading
    # =========================================================================

    def _load_locked(self) -> Mapping[str, Product]:
        """Return the current snapshot, loading it from disk if needed. Caller holds the lock."""
        if self._products is None:
            try:
                products = [Product.model_validate(item) for item in self._file.read()]
            except PydanticValidationError as e:
                raise PersistenceError(f"Corrupt product record: {e}") from e
            self._products = MappingProxyType({p.id: p for p in products})
            logger.info(f"Loaded {len(products)} products from {self._file.path}")
        return self._products

    def _snapshot(self) -> Mapping[str, Product]:
        snapshot = self._products
        if snapshot is None:
            with self._lock:
                snapshot = self._load_locked()
        return snapshot

    def _commit(self, products: dict[str, Product]) -> None:
        """Persist `products` and make it the live snapshot. Caller holds the lock."""
        self._file.write([p.to_dict() for p in products.values()])
        self._products = MappingProxyType(products)

    @staticmethod
    def _find_by_key(products: Mapping[str, Product], product_id: str) -> Optional[Product]:
        for product in products.values():
            if product.product_id == product_id:
                return product
        return None

    # =========================================================================
    # Queries
    # =========================================================================

    def list(self) -> list[Product]:
        """Get the full current snapshot."""
        return list(self._snapshot().values())

    def get(self, product_id: str) -> Optional[Product]:
        """Get a product by identity, or None."""
        return self._snapshot().get(product_id)

    def count(self) -> int:
        return len(self._snapshot())

    # =========================================================================
    # Mutations
    # =========================================================================

    def create(self, payload: Any) -> Product:
        """
        Create a product from a raw payload.

        Raises:
            PayloadError, ValidationError: Bad input.
            DuplicateKeyError: productId already in use.
            PersistenceError: Snapshot write failed.
        """
        data = validate_product_input(payload)
        with self._lock:
            current = self._load_locked()
            if self._find_by_key(current, data.product_id):
                raise DuplicateKeyError("productId already exists")

            product = Product(**data.model_dump())
            products = dict(current)
            products[product.id] = product
            self._commit(products)

        logger.info(f"Created product {product.id} ({product.product_id})")
        return product

    def update(self, product_id: str, payload: Any) -> Product:
        """
        Replace a product's fields, keeping its identity.

        Renaming the business key is allowed as long as no *other* record
        holds the new key.
        """
        data = validate_product_input(payload)
        with self._lock:
            current = self._load_locked()
            existing = current.get(product_id)
            if existing is None:
                raise NotFoundError("product not found")
            owner = self._find_by_key(current, data.product_id)
            if owner is not None and owner.id != product_id:
                raise DuplicateKeyError("productId already exists")

            updated = existing.model_copy(update={**data.model_dump(), "updated_at": utcnow()})
            products = dict(current)
            products[product_id] = updated
            self._commit(products)

        logger.info(f"Updated product {product_id} ({updated.product_id})")
        return updated

    def restock(self, product_id: str, delta: Any) -> Product:
        """Increase a product's quantity by a positive integer delta."""
        amount = validate_restock_delta(delta)
        with self._lock:
            current = self._load_locked()
            existing = current.get(product_id)
            if existing is None:
                raise NotFoundError("product not found")

            updated = existing.model_copy(
                update={"quantity": existing.quantity + amount, "updated_at": utcnow()}
            )
            products = dict(current)
            products[product_id] = updated
            self._commit(products)

        logger.info(f"Restocked product {product_id} by {amount} (now {updated.quantity})")
        return updated

    def delete(self, product_id: str) -> Product:
        """Permanently remove a product. Returns the removed record."""
        with self._lock:
            current = self._load_locked()
            existing = current.get(product_id)
            if existing is None:
                raise NotFoundError("product not found")

            products = {k: v for k, v in current.items() if k != product_id}
            self._commit(products)

        logger.info(f"Deleted product {product_id} ({existing.product_id})")
        return existing

    def reload(self) -> None:
        """Drop the cached snapshot so the next access rereads the file."""
        with self._lock:
            self._products = None


class NotificationHistory:
    """
    Append-only history of notification attempts.

    Stored next to the product file but persisted independently, with its
    own writer lock.
    """

    def __init__(self, data_dir: Optional[Path] = None, filename: str = "notifications.json"):
        self.data_dir = Path(data_dir) if data_dir is not None else DEFAULT_DATA_DIR
        self._file = SnapshotFile(self.data_dir / filename)
        self._lock = threading.Lock()
        self._records: Optional[tuple[NotificationRecord, ...]] = None

    def _load_locked(self) -> tuple[NotificationRecord, ...]:
        if self._records is None:
            try:
                self._records = tuple(
                    NotificationRecord.model_validate(item) for item in self._file.read()
                )
            except PydanticValidationError as e:
                raise PersistenceError(f"Corrupt notification record: {e}") from e
        return self._records

    def append(self, record: NotificationRecord) -> NotificationRecord:
        """Persist one more record at the end of the history."""
        with self._lock:
            records = self._load_locked() + (record,)
            self._file.write([r.to_dict() for r in records])
            self._records = records
        return record

    def _snapshot(self) -> tuple[NotificationRecord, ...]:
        records = self._records
        if records is None:
            with self._lock:
                records = self._load_locked()
        return records

    def recent(self, limit: int) -> list[NotificationRecord]:
        """Get up to `limit` records, most recent first."""
        if limit <= 0:
            return []
        return list(reversed(self._snapshot()[-limit:]))

    def count(self) -> int:
        return len(self._snapshot())
