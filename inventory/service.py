"""
Inventory mutation service.

Runs each product mutation against the store and then announces it on the
broadcast hub. The store does its blocking file I/O on a worker thread
while holding its writer lock. The hub publish happens afterwards on the
event loop, outside that lock, so a stalled stream subscriber can never hold
up the next write.

Worker threads can finish in any order once they leave the store lock, so
the service also holds an asyncio lock across commit and publish. Events
therefore go out in commit order and their revisions increase in that order.
Writes are already single-file at the store, so this costs no concurrency.

The service knows nothing about who is listening. Subscribers react to the
event by re-querying.
"""

import asyncio
from typing import Any

from fastapi.concurrency import run_in_threadpool

from inventory.data_store import ProductStore
from inventory.models import Product
from inventory.validation import validate_restock_delta
from realtime.hub import BroadcastHub, EventTypes


class InventoryService:
    """
    Mutation surface for products.

    Example:
        service = InventoryService(store, hub)
        product = await service.create_product({"productId": "SKU-1", ...})
        # every stream subscriber now has a product_created event queued
    """

    def __init__(self, store: ProductStore, hub: BroadcastHub):
        self.store = store
        self.hub = hub
        self._commit_order = asyncio.Lock()

    async def create_product(self, payload: Any) -> Product:
        async with self._commit_order:
            product = await run_in_threadpool(self.store.create, payload)
            self.hub.publish(EventTypes.PRODUCT_CREATED, {"productId": product.id})
        return product

    async def update_product(self, product_id: str, payload: Any) -> Product:
        async with self._commit_order:
            product = await run_in_threadpool(self.store.update, product_id, payload)
            self.hub.publish(EventTypes.PRODUCT_UPDATED, {"productId": product.id})
        return product

    async def restock_product(self, product_id: str, delta: Any) -> Product:
        amount = validate_restock_delta(delta)
        async with self._commit_order:
            product = await run_in_threadpool(self.store.restock, product_id, amount)
            self.hub.publish(EventTypes.PRODUCT_RESTOCKED, {"productId": product.id, "delta": amount})
        return product

    async def delete_product(self, product_id: str) -> Product:
        async with self._commit_order:
            product = await run_in_threadpool(self.store.delete, product_id)
            self.hub.publish(EventTypes.PRODUCT_DELETED, {"productId": product.id})
        return product
