"""Sales order routes."""

from __future__ import annotations

from distribution_service.routes.common import crud_routes
from distribution_service.routing import Router

orders_router = Router(prefix="/orders", tags=["orders"])

crud_routes(orders_router, "orders", "order", "orders", "order_id")
