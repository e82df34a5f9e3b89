"""Entity records held by the in-memory store."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

RecordId = Union[int, str]

PRICING_TIERS = ["Regular", "Wholesale", "Distributor", "VIP"]


def today() -> str:
    return date.today().isoformat()


def now() -> str:
    return datetime.now().isoformat(timespec="seconds")


# Lifecycle enumerations. Fields stay plain strings so unknown values are accepted.

class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PurchaseOrderStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    PARTIAL = "partial"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    IN_TRANSIT = "in-transit"
    DELIVERED = "delivered"
    FAILED = "failed"
    RETURNED = "returned"


class PlanStatus(str, Enum):
    DRAFT = "draft"
    APPROVED = "approved"
    EXECUTING = "executing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Snapshot(BaseModel):
    """Materialized copy of a referenced record taken when the owner was created.

    A snapshot is not a join: edits to the source record never reach it. The
    live reference is the owner's ``*_id`` field.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    source_id: RecordId
    captured_at: str = Field(default_factory=now)

    @classmethod
    def capture(cls, record: "Record", exclude: set[str] | None = None) -> "Snapshot":
        data = record.model_dump(mode="json", exclude={"id", *(exclude or set())})
        data.pop("source_id", None)
        data.pop("captured_at", None)
        return cls(source_id=record.id, **data)


class Record(BaseModel):
    """Base for stored entities; unknown caller fields are kept as extras."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: RecordId


class Warehouse(Record):
    id: str
    code: str = ""
    name: str = ""
    address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    capacity: int = 0
    is_active: bool = True


class Category(Record):
    id: int
    name: str = ""
    description: Optional[str] = None
    parent_id: Optional[int] = None
    product_count: int = 0


class Product(Record):
    id: int
    sku: str = ""
    name: str = ""
    category_id: Optional[int] = None
    category: Optional[Snapshot] = None
    unit: str = "piece"
    cost_price: float = 0
    unit_price: float = 0
    reorder_level: int = 0
    is_active: bool = True


class Client(Record):
    id: int
    business_name: str = ""
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    pricing_tier: str = "Regular"
    credit_limit: float = 0
    current_balance: float = 0
    is_active: bool = True


class Supplier(Record):
    id: int
    name: str = ""
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    payment_terms: int = 30
    is_active: bool = True


class LineItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    product_id: Optional[int] = None
    product: Optional[Snapshot] = None
    quantity: float = 0
    unit_price: float = 0

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price


class Order(Record):
    id: int
    order_number: str = ""
    client_id: Optional[int] = None
    client: Optional[Snapshot] = None
    items: list[LineItem] = Field(default_factory=list)
    status: str = OrderStatus.PENDING.value
    total_amount: float = 0
    order_date: str = Field(default_factory=today)
    delivery_date: Optional[str] = None
    notes: Optional[str] = None


class PurchaseOrder(Record):
    id: int
    po_number: str = ""
    supplier_id: Optional[int] = None
    supplier: Optional[Snapshot] = None
    items: list[LineItem] = Field(default_factory=list)
    status: str = PurchaseOrderStatus.PENDING.value
    total_amount: float = 0
    order_date: str = Field(default_factory=today)
    expected_date: Optional[str] = None
    received_date: Optional[str] = None


class InventoryRecord(Record):
    id: int
    product_id: Optional[int] = None
    product: Optional[Snapshot] = None
    warehouse_id: Optional[str] = None
    warehouse: Optional[Snapshot] = None
    quantity: int = 0
    reserved_quantity: int = 0
    reorder_level: int = 0
    unit_cost: float = 0
    location: Optional[str] = None

    @property
    def available(self) -> int:
        return self.quantity - self.reserved_quantity


class StockMovement(Record):
    """Manual stock change booked against one inventory record."""

    id: int
    inventory_id: Optional[int] = None
    product_id: Optional[int] = None
    warehouse_id: Optional[str] = None
    type: str = "adjustment"
    quantity: int = 0
    reference: Optional[str] = None
    notes: Optional[str] = None
    created_at: str = Field(default_factory=now)


class Delivery(Record):
    id: int
    delivery_number: str = ""
    order_id: Optional[int] = None
    order: Optional[Snapshot] = None
    status: str = DeliveryStatus.PENDING.value
    scheduled_date: str = Field(default_factory=now)
    driver_name: Optional[str] = None
    delivery_address: Optional[str] = None
    delivered_at: Optional[str] = None


class DistributionPlan(Record):
    id: int
    plan_number: str = ""
    status: str = PlanStatus.DRAFT.value
    order_ids: list[int] = Field(default_factory=list)
    total_value: float = 0
    deliveries_count: int = 0
    items_count: int = 0
    priority: str = "normal"
    notes: str = ""
    created_at: str = Field(default_factory=today)
    completed_at: Optional[str] = None


class User(Record):
    id: str
    name: str = ""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    email: str = ""
    role: str = "staff"
    warehouse_id: Optional[str] = None
    is_active: bool = True
    password: str = ""
    permissions: dict[str, Any] = Field(default_factory=dict)

    def public(self) -> dict[str, Any]:
        """Return the user without its credential."""
        return self.model_dump(mode="json", exclude={"password"})
