"""Client and supplier routes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from distribution_service.models import PRICING_TIERS
from distribution_service.routes.common import crud_routes
from distribution_service.routing import Request, Router

if TYPE_CHECKING:
    from distribution_service.dispatcher import DataService

clients_router = Router(prefix="/clients", tags=["clients"])
suppliers_router = Router(prefix="/suppliers", tags=["suppliers"])


@clients_router.get("/pricing-tiers", summary="Fixed pricing tier list")
def pricing_tiers(service: "DataService", request: Request) -> dict[str, Any]:
    return {"tiers": list(PRICING_TIERS)}


crud_routes(clients_router, "clients", "client", "clients", "client_id")
crud_routes(suppliers_router, "suppliers", "supplier", "suppliers", "supplier_id")
