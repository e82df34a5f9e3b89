"""Delivery routes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from distribution_service.repositories.seed import DELIVERY_ROUTES
from distribution_service.routes.common import crud_routes
from distribution_service.routing import Request, Router

if TYPE_CHECKING:
    from distribution_service.dispatcher import DataService

deliveries_router = Router(prefix="/deliveries", tags=["deliveries"])


@deliveries_router.get("/routes", summary="Fixed delivery route list")
def list_routes(service: "DataService", request: Request) -> dict[str, Any]:
    return {"routes": [dict(route) for route in DELIVERY_ROUTES], "total": len(DELIVERY_ROUTES)}


crud_routes(deliveries_router, "deliveries", "delivery", "deliveries", "delivery_id")
