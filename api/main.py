"""
FastAPI application for the inventory service.

This application provides:
1. The product query and mutation endpoints (/api/products...)
2. Stock alerts and alert notifications (/api/alerts, /api/alerts/notify)
3. Notification history (/api/notifications)
4. A server-sent-events stream of state changes (/api/stream)

Run with:
    uv run uvicorn api.main:app --reload

Then visit http://localhost:8000/docs for interactive API documentation.
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager, suppress
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from api.context import AppContext, get_context
from config import get_settings
from inventory.alerts import evaluate_alerts
from inventory.errors import (
    DuplicateKeyError,
    InventoryError,
    NotFoundError,
    PayloadError,
    PersistenceError,
    ValidationError,
)

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("inventory_api")

MAX_BODY_BYTES = 1024 * 1024

ERROR_STATUS = {
    PayloadError: 400,
    ValidationError: 400,
    NotFoundError: 404,
    DuplicateKeyError: 409,
    PersistenceError: 500,
}


# Application lifespan
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the stream keep-alive and evict subscribers on shutdown."""
    context = get_context()
    logger.info("Starting inventory service")
    keepalive = asyncio.create_task(
        context.hub.run_keepalive(context.settings.heartbeat_interval)
    )
    yield
    keepalive.cancel()
    with suppress(asyncio.CancelledError):
        await keepalive
    context.hub.close()
    logger.info("Shutting down")


# Create the FastAPI app
app = FastAPI(
    title="Inventory Service",
    description="""
    Inventory records kept in sync with live clients.

    ## Endpoints

    - `/api/products` - Query and mutate products
    - `/api/alerts` - Low-stock and out-of-stock summary
    - `/api/alerts/notify` - Send a best-effort email/SMS alert
    - `/api/notifications` - Notification history, most recent first
    - `/api/stream` - Server-sent events for every state change
    """,
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError) -> JSONResponse:
    """Render domain errors as {"error": message}."""
    status_code = ERROR_STATUS.get(type(exc), 500)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=status_code, content={"error": exc.message})


async def read_json(request: Request) -> Any:
    """
    Decode the request body as JSON.

    An empty body counts as {}. Raises PayloadError for oversized or
    undecodable bodies, before any field validation runs.
    """
    body = await request.body()
    if len(body) > MAX_BODY_BYTES:
        raise PayloadError("Payload too large")
    if not body.strip():
        return {}
    try:
        return json.loads(body)
    except ValueError:
        raise PayloadError("Invalid JSON payload") from None


# =============================================================================
# Health Check
# =============================================================================

@app.get("/api/health", tags=["Health"])
def health_check(context: AppContext = Depends(get_context)):
    """Health check endpoint."""
    return {
        "status": "ok",
        "revision": context.clock.current(),
        "activeStreamClients": context.hub.subscriber_count,
        "date": datetime.now(timezone.utc).isoformat(),
    }


# =============================================================================
# Products
# =============================================================================

@app.get("/api/products", tags=["Products"])
def list_products(context: AppContext = Depends(get_context)):
    """Get the full product snapshot and the current revision."""
    return {
        "products": [p.to_dict() for p in context.store.list()],
        "revision": context.clock.current(),
    }


@app.post("/api/products", status_code=201, tags=["Products"])
async def create_product(request: Request, context: AppContext = Depends(get_context)):
    """Create a product. The productId must not already exist."""
    payload = await read_json(request)
    product = await context.inventory.create_product(payload)
    return {"product": product.to_dict()}


@app.put("/api/products/{product_id}", tags=["Products"])
async def update_product(product_id: str, request: Request, context: AppContext = Depends(get_context)):
    """Replace a product's fields. Renaming productId is checked for collisions."""
    payload = await read_json(request)
    product = await context.inventory.update_product(product_id, payload)
    return {"product": product.to_dict()}


@app.patch("/api/products/{product_id}/restock", tags=["Products"])
async def restock_product(product_id: str, request: Request, context: AppContext = Depends(get_context)):
    """Add stock. Body: {"delta": <positive int>}, delta defaults to 1."""
    payload = await read_json(request)
    if not isinstance(payload, dict):
        raise PayloadError("Payload must be a JSON object")
    delta = payload.get("delta")
    product = await context.inventory.restock_product(product_id, 1 if delta is None else delta)
    return {"product": product.to_dict()}


@app.delete("/api/products/{product_id}", status_code=204, tags=["Products"])
async def delete_product(product_id: str, context: AppContext = Depends(get_context)):
    """Permanently delete a product."""
    await context.inventory.delete_product(product_id)
    return Response(status_code=204)


# =============================================================================
# Alerts and Notifications
# =============================================================================

@app.get("/api/alerts", tags=["Alerts"])
def get_alerts(context: AppContext = Depends(get_context)):
    """Low-stock and out-of-stock counts plus a capped list of low-stock items."""
    return evaluate_alerts(
        context.store.list(),
        threshold=context.settings.low_stock_threshold,
        max_items=context.settings.alert_items_limit,
    )


@app.post("/api/alerts/notify", status_code=201, tags=["Alerts"])
async def notify(request: Request, context: AppContext = Depends(get_context)):
    """
    Send an alert by email or SMS.

    Always answers 201 once the request is valid. Whether the message got
    through is reported in the returned record (delivered / mode /
    resultMessage).
    """
    payload = await read_json(request)
    if not isinstance(payload, dict):
        raise PayloadError("Payload must be a JSON object")
    record = await context.dispatcher.dispatch(
        channel=payload.get("channel"),
        recipient=payload.get("recipient"),
        subject=payload.get("subject"),
        message=payload.get("message"),
    )
    return {"notification": record.to_dict()}


@app.get("/api/notifications", tags=["Alerts"])
def list_notifications(
    limit: Optional[int] = Query(default=None, description="Clamped to 1..100"),
    context: AppContext = Depends(get_context),
):
    """Notification history, most recent first."""
    return {"notifications": [r.to_dict() for r in context.dispatcher.recent(limit)]}


# =============================================================================
# Live Stream
# =============================================================================

@app.get("/api/stream", tags=["Stream"])
async def stream(context: AppContext = Depends(get_context)):
    """
    Server-sent events for every state change.

    Each event carries type, revision, timestamp and the affected ids.
    Comment frames (": heartbeat") are sent periodically to keep idle
    connections open.
    """
    return StreamingResponse(
        context.hub.stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
