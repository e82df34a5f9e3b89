"""Entity models."""

from distribution_service.models.entities import (
    PRICING_TIERS,
    Category,
    Client,
    Delivery,
    DeliveryStatus,
    DistributionPlan,
    InventoryRecord,
    LineItem,
    Order,
    OrderStatus,
    PlanStatus,
    Product,
    PurchaseOrder,
    PurchaseOrderStatus,
    Record,
    RecordId,
    Snapshot,
    StockMovement,
    Supplier,
    User,
    Warehouse,
    now,
    today,
)

__all__ = [
    "PRICING_TIERS",
    "Category",
    "Client",
    "Delivery",
    "DeliveryStatus",
    "DistributionPlan",
    "InventoryRecord",
    "LineItem",
    "Order",
    "OrderStatus",
    "PlanStatus",
    "Product",
    "PurchaseOrder",
    "PurchaseOrderStatus",
    "Record",
    "RecordId",
    "Snapshot",
    "StockMovement",
    "Supplier",
    "User",
    "Warehouse",
    "now",
    "today",
]
