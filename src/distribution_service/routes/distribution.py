"""Distribution plan routes."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any

from distribution_service.models import OrderStatus, PlanStatus
from distribution_service.routes.common import created, dump, list_response, updated
from distribution_service.routing import Request, Router

if TYPE_CHECKING:
    from distribution_service.dispatcher import DataService

distribution_router = Router(prefix="/distribution/plans", tags=["distribution"])

# flat saving per order folded into a shared route
SAVING_PER_COMBINED_ORDER = 750


@distribution_router.get("", summary="List distribution plans")
def list_plans(service: "DataService", request: Request) -> dict[str, Any]:
    return list_response("plans", service.store.distribution_plans.list(request.query))


@distribution_router.post("/optimize", summary="Suggest route consolidation")
def optimize_plans(service: "DataService", request: Request) -> dict[str, Any]:
    """Group open orders by destination city and suggest combining them."""
    open_states = (OrderStatus.CONFIRMED.value, OrderStatus.PROCESSING.value)
    by_city = defaultdict(list)
    for order in service.store.orders:
        if order.status in open_states:
            city = getattr(order.client, "city", None) or "Unassigned"
            by_city[city].append(order.order_number)

    combinable = {city: numbers for city, numbers in by_city.items() if len(numbers) > 1}
    recommendations = [
        f"Combine {len(numbers)} orders for {city} ({', '.join(numbers)})"
        for city, numbers in sorted(combinable.items())
    ]
    combined = sum(len(numbers) - 1 for numbers in combinable.values())
    return {
        "success": True,
        "optimized_routes": len(by_city),
        "estimated_savings": combined * SAVING_PER_COMBINED_ORDER,
        "recommendations": recommendations,
    }


@distribution_router.post("/{plan_id}/execute", summary="Start executing a plan")
def execute_plan(service: "DataService", request: Request) -> dict[str, Any]:
    plan = service.store.distribution_plans.update(
        request.params["plan_id"], {"status": PlanStatus.EXECUTING.value}
    )
    return {"success": plan is not None}


@distribution_router.get("/{plan_id}", summary="Get a plan with its orders")
def get_plan(service: "DataService", request: Request) -> dict[str, Any]:
    plan = service.store.distribution_plans.get(request.params["plan_id"])
    if plan is None:
        return {"plan": None, "orders": []}
    orders = [service.store.orders.get(order_id) for order_id in plan.order_ids]
    return {"plan": dump(plan), "orders": [dump(order) for order in orders if order is not None]}


@distribution_router.post("", summary="Create a plan from selected orders")
def create_plan(service: "DataService", request: Request) -> dict[str, Any]:
    return created("plan", service.store.distribution_plans.create(request.body))


@distribution_router.put("/{plan_id}")
def update_plan(service: "DataService", request: Request) -> dict[str, Any]:
    return updated("plan", service.store.distribution_plans.update(request.params["plan_id"], request.body))
