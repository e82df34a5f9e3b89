"""Product and category routes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from distribution_service.routes.common import crud_routes
from distribution_service.routing import Request, Router

if TYPE_CHECKING:
    from distribution_service.dispatcher import DataService

products_router = Router(prefix="/products", tags=["catalog"])
categories_router = Router(prefix="/categories", tags=["catalog"])


@categories_router.get("/tree", summary="Category hierarchy")
def category_tree(service: "DataService", request: Request) -> dict[str, Any]:
    return {"categories": service.store.categories.tree()}


crud_routes(products_router, "products", "product", "products", "product_id")
crud_routes(categories_router, "categories", "category", "categories", "category_id", delete=True)
