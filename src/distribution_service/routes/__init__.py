"""Request routers, in dispatch order."""

from __future__ import annotations

from distribution_service.routing import Router

from .auth import auth_router
from .dashboard import dashboard_router
from .deliveries import deliveries_router
from .distribution import distribution_router
from .inventory import inventory_router
from .orders import orders_router
from .partners import clients_router, suppliers_router
from .products import categories_router, products_router
from .purchasing import purchase_orders_router
from .reports import reports_router
from .users import users_router
from .warehouses import warehouse_router, warehouses_router

api_router = Router()

for _router in (
    auth_router,
    dashboard_router,
    distribution_router,
    products_router,
    categories_router,
    clients_router,
    suppliers_router,
    orders_router,
    inventory_router,
    deliveries_router,
    purchase_orders_router,
    warehouse_router,
    warehouses_router,
    users_router,
    reports_router,
):
    api_router.include_router(_router)


__all__ = ["api_router"]
