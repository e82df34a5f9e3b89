"""Collection-specific repositories."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Mapping, Union

from pydantic import TypeAdapter

from distribution_service.config import get_settings
from distribution_service.models import (
    Category,
    Client,
    Delivery,
    DistributionPlan,
    InventoryRecord,
    Order,
    Product,
    PurchaseOrder,
    RecordId,
    StockMovement,
    Supplier,
    User,
    Warehouse,
)
from distribution_service.repositories.base import Embed, Repository, same_id

# caller-supplied collections are shape-checked before derivation walks them
_LINES = TypeAdapter(list[dict[str, Any]])
_IDS = TypeAdapter(list[Union[int, str]])
_AMOUNT = TypeAdapter(float)


def _amount(value: Any) -> float:
    return _AMOUNT.validate_python(value or 0)


def _source_id(snapshot: Any) -> Any:
    if isinstance(snapshot, dict):
        return snapshot.get("source_id")
    return getattr(snapshot, "source_id", None)


class _LineItemRepository(Repository):
    """Embeds a product snapshot in every line item and totals the document."""

    price_field = "unit_price"
    derived_from = ("items",)

    def prepare(self, data: dict[str, Any]) -> dict[str, Any]:
        items = data.get("items")
        if items is None:
            return data

        prepared = []
        for item in _LINES.validate_python(items):
            line = dict(item)
            product = self._lookup("products", line.get("product_id"))
            if product is not None:
                # an existing snapshot of the same product is kept as taken
                if not same_id(_source_id(line.get("product")), product.id):
                    line["product"] = self._snapshot_of("products", product.id)
                if line.get("unit_price") in (None, ""):
                    line["unit_price"] = getattr(product, self.price_field)
            prepared.append(line)

        data["items"] = prepared
        data["total_amount"] = sum(
            _amount(line.get("quantity")) * _amount(line.get("unit_price"))
            for line in prepared
        )
        return data


class OrderRepository(_LineItemRepository):
    price_field = "unit_price"


class PurchaseOrderRepository(_LineItemRepository):
    price_field = "cost_price"


class DistributionPlanRepository(Repository):
    derived_from = ("order_ids",)

    def prepare(self, data: dict[str, Any]) -> dict[str, Any]:
        order_ids = _IDS.validate_python(data.get("order_ids") or [])
        orders = [o for o in (self._lookup("orders", oid) for oid in order_ids) if o is not None]
        data["order_ids"] = [o.id for o in orders]
        data["total_value"] = sum(o.total_amount for o in orders)
        data["deliveries_count"] = len(orders)
        data["items_count"] = sum(len(o.items) for o in orders)
        return data


class CategoryRepository(Repository):
    def check(self, data: Mapping[str, Any], record_id: RecordId) -> None:
        """Walk the parent chain and refuse a link back to ``record_id``."""
        super().check(data, record_id)
        parent_id = data.get("parent_id")
        seen = set()
        while parent_id not in (None, ""):
            if same_id(parent_id, record_id):
                raise ValueError("Category cannot be its own ancestor")
            if str(parent_id) in seen:
                break
            seen.add(str(parent_id))
            parent = self.get(parent_id)
            parent_id = parent.parent_id if parent is not None else None

    def tree(self) -> list[dict[str, Any]]:
        """Nest categories under their parents, by name; orphans are roots."""
        known = {str(category.id) for category in self.records}
        children: dict[str, list[Category]] = defaultdict(list)
        roots = []
        for category in sorted(self.records, key=lambda c: c.name.lower()):
            parent = category.parent_id
            if parent is not None and str(parent) in known and not same_id(parent, category.id):
                children[str(parent)].append(category)
            else:
                roots.append(category)

        def node(category: Category, path: frozenset[str]) -> dict[str, Any]:
            path = path | {str(category.id)}
            nested = [node(child, path) for child in children[str(category.id)] if str(child.id) not in path]
            return {**category.model_dump(mode="json"), "children": nested}

        return [node(category, frozenset()) for category in roots]


class UserRepository(Repository):
    def public_list(self, filters=None) -> list[dict[str, Any]]:
        return [user.public() for user in self.list(filters)]


def build_repositories() -> dict[str, Repository]:
    """Create every collection in dispatch order."""
    settings = get_settings()
    return {
        "distribution_plans": DistributionPlanRepository(
            "distribution_plans",
            DistributionPlan,
            filter_fields=("status", "priority"),
            date_field="created_at",
            number_field="plan_number",
            number_format="DP-{year}-{id:03d}",
            newest_first=True,
        ),
        "products": Repository(
            "products",
            Product,
            unique_fields=("sku",),
            embeds=(Embed("category_id", "categories", "category"),),
            filter_fields=("category_id", "is_active"),
            search_fields=("name", "sku"),
        ),
        "categories": CategoryRepository(
            "categories",
            Category,
            filter_fields=("parent_id",),
            search_fields=("name",),
        ),
        "clients": Repository(
            "clients",
            Client,
            filter_fields=("pricing_tier", "city", "is_active"),
            search_fields=("business_name", "contact_person"),
        ),
        "suppliers": Repository(
            "suppliers",
            Supplier,
            filter_fields=("is_active",),
            search_fields=("name", "contact_person"),
        ),
        "orders": OrderRepository(
            "orders",
            Order,
            embeds=(Embed("client_id", "clients", "client"),),
            filter_fields=("status", "client_id"),
            search_fields=("order_number",),
            date_field="order_date",
            number_field="order_number",
            number_format="ORD-{year}-{id:04d}",
            newest_first=True,
        ),
        "purchase_orders": PurchaseOrderRepository(
            "purchase_orders",
            PurchaseOrder,
            embeds=(Embed("supplier_id", "suppliers", "supplier"),),
            filter_fields=("status", "supplier_id"),
            search_fields=("po_number",),
            date_field="order_date",
            number_field="po_number",
            number_format="PO-{year}-{id:04d}",
            newest_first=True,
        ),
        "inventory": Repository(
            "inventory",
            InventoryRecord,
            embeds=(
                Embed("product_id", "products", "product"),
                Embed("warehouse_id", "warehouses", "warehouse"),
            ),
            filter_fields=("warehouse_id", "product_id"),
        ),
        "stock_movements": Repository(
            "stock_movements",
            StockMovement,
            filter_fields=("type", "product_id", "warehouse_id"),
            date_field="created_at",
            newest_first=True,
        ),
        "deliveries": Repository(
            "deliveries",
            Delivery,
            embeds=(Embed("order_id", "orders", "order"),),
            filter_fields=("status", "driver_name", "order_id"),
            search_fields=("delivery_number", "driver_name"),
            date_field="scheduled_date",
            number_field="delivery_number",
            number_format="DEL-{year}-{id:04d}",
        ),
        "warehouses": Repository(
            "warehouses",
            Warehouse,
            string_ids=True,
            unique_fields=("code",),
            filter_fields=("is_active", "province"),
            search_fields=("name", "code"),
        ),
        "users": UserRepository(
            "users",
            User,
            string_ids=True,
            filter_fields=("role", "warehouse_id", "is_active"),
            search_fields=("name", "email"),
            defaults=lambda: {"password": settings.auth.default_user_password},
        ),
    }


__all__ = [
    "CategoryRepository",
    "DistributionPlanRepository",
    "OrderRepository",
    "PurchaseOrderRepository",
    "UserRepository",
    "build_repositories",
]
