"""Ordering API package."""

from ordering.api.errors import register_error_handlers
from ordering.api.routes import admin_router, order_router

__all__ = ["order_router", "admin_router", "register_error_handlers"]
