"""Warehouse routes, served under both ``/warehouse`` and ``/warehouses``."""

from __future__ import annotations

from distribution_service.routes.common import crud_routes
from distribution_service.routing import Router

warehouse_router = Router(prefix="/warehouse", tags=["warehouse"])
warehouses_router = Router(prefix="/warehouses", tags=["warehouse"])

for _router in (warehouse_router, warehouses_router):
    crud_routes(_router, "warehouses", "warehouse", "warehouses", "warehouse_id")
