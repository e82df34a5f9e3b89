"""Dashboard analytics routes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from distribution_service.routes.common import query_int
from distribution_service.routing import Request, Router

if TYPE_CHECKING:
    from distribution_service.dispatcher import DataService

dashboard_router = Router(prefix="/dashboard", tags=["dashboard"])


@dashboard_router.get("/kpis", summary="Headline KPIs")
def kpis(service: "DataService", request: Request) -> dict[str, Any]:
    return service.analytics.kpis()


@dashboard_router.get("/revenue-chart", summary="Daily revenue series")
def revenue_chart(service: "DataService", request: Request) -> list[dict[str, Any]]:
    return service.analytics.revenue_chart(request.query.get("days"), request.query.get("period"))


@dashboard_router.get("/top-products")
def top_products(service: "DataService", request: Request) -> list[dict[str, Any]]:
    return service.analytics.top_products(query_int(request.query, "limit", 5))


@dashboard_router.get("/top-clients")
def top_clients(service: "DataService", request: Request) -> list[dict[str, Any]]:
    return service.analytics.top_clients(query_int(request.query, "limit", 5))


@dashboard_router.get("/category-distribution")
def category_distribution(service: "DataService", request: Request) -> list[dict[str, Any]]:
    return service.analytics.category_distribution()


@dashboard_router.get("/inventory-status")
def inventory_status(service: "DataService", request: Request) -> dict[str, Any]:
    return service.analytics.inventory_status()


@dashboard_router.get("/recent-activity")
def recent_activity(service: "DataService", request: Request) -> list[dict[str, Any]]:
    return service.analytics.recent_activity(query_int(request.query, "limit", 10))


@dashboard_router.get("/pending-actions")
def pending_actions(service: "DataService", request: Request) -> dict[str, Any]:
    return service.analytics.pending_actions()


@dashboard_router.get("/order-pipeline", summary="Order flow by day")
def order_pipeline(service: "DataService", request: Request) -> dict[str, Any]:
    return service.analytics.order_pipeline(request.query.get("period", "7days"))


@dashboard_router.get("/order-visibility")
def order_visibility(service: "DataService", request: Request) -> dict[str, Any]:
    return service.analytics.order_visibility()


@dashboard_router.get("/duplicate-alerts", summary="Possible duplicate orders")
def duplicate_alerts(service: "DataService", request: Request) -> list[dict[str, Any]]:
    return service.analytics.duplicate_alerts(query_int(request.query, "days", 7))


@dashboard_router.get("/delivery-tracking")
def delivery_tracking(service: "DataService", request: Request) -> dict[str, Any]:
    return service.analytics.delivery_tracking()
