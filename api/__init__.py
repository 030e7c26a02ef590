"""
HTTP API for the inventory service.

This package provides the FastAPI application that exposes:
- Product queries and mutations
- Stock alerts and alert notifications
- Notification history
- The live server-sent-events stream
"""

from api.main import app

__all__ = ["app"]
