"""Dashboard analytics derived from the in-memory entities."""

from __future__ import annotations

import random
from collections import Counter, defaultdict
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

from distribution_service.models import (
    DeliveryStatus,
    InventoryRecord,
    Order,
    OrderStatus,
    PurchaseOrderStatus,
    now,
)
from distribution_service.repositories import EntityStore
from distribution_service.repositories.seed import FALLBACK_TOP_PRODUCTS

UNCATEGORIZED = "Uncategorized"

PERIOD_DAYS = {"7days": 7, "30days": 30, "90days": 90}
MAX_WINDOW_DAYS = max(PERIOD_DAYS.values())


def attr(obj: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a model, a snapshot, or a dumped snapshot dict."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def window_days(days: Any = None, period: Optional[str] = None, default: int = 7) -> int:
    """Resolve ``days=N`` or ``period=7days|30days|90days`` to a day count, capped at 90."""
    if period in PERIOD_DAYS:
        return PERIOD_DAYS[period]
    try:
        value = int(days)
    except (TypeError, ValueError):
        return default
    return min(value, MAX_WINDOW_DAYS) if value > 0 else default


def trailing_dates(days: int, end: Optional[date] = None) -> List[str]:
    end = end or date.today()
    return [(end - timedelta(days=offset)).isoformat() for offset in range(days - 1, -1, -1)]


def estimated_value(day: str, low: int, high: int) -> int:
    """Deterministic stand-in for an empty bucket, stable per calendar day."""
    return random.Random(date.fromisoformat(day).toordinal()).randint(low, high)


def active_orders(orders: Iterable[Order]) -> List[Order]:
    return [order for order in orders if order.status != OrderStatus.CANCELLED.value]


def stock_state(record: InventoryRecord) -> str:
    if record.quantity <= 0:
        return "out"
    if record.quantity <= record.reorder_level:
        return "low"
    return "healthy"


def percent(part: float, whole: float) -> float:
    return round(part / whole * 100, 1) if whole else 0


class AnalyticsService:
    """Service for dashboard KPIs, chart series and rankings."""

    def __init__(self, store: EntityStore):
        self.store = store

    # Shared lookups

    def category_name(self, product_id: Any = None, product_snapshot: Any = None) -> str:
        """Live category first, then the embedded snapshot, then ``Uncategorized``."""
        product = self.store.products.get(product_id) if product_id is not None else None
        if product is not None and product.category_id is not None:
            category = self.store.categories.get(product.category_id)
            if category is not None:
                return category.name

        for source in (product, product_snapshot):
            name = attr(attr(source, "category"), "name")
            if name:
                return name
        return UNCATEGORIZED

    def rank_products(self, orders: Iterable[Order], limit: int = 5, fallback: bool = True) -> List[Dict[str, Any]]:
        totals: Dict[Any, Dict[str, Any]] = {}
        for order in active_orders(orders):
            for item in order.items:
                key = item.product_id if item.product_id is not None else attr(item.product, "name")
                entry = totals.setdefault(key, {
                    "product_id": item.product_id,
                    "name": attr(item.product, "name") or f"Product {item.product_id}",
                    "quantity": 0,
                    "revenue": 0.0,
                })
                entry["quantity"] += item.quantity
                entry["revenue"] += item.line_total

        ranked = sorted(totals.values(), key=lambda entry: entry["revenue"], reverse=True)[:limit]
        if not ranked and fallback:
            return [dict(entry) for entry in FALLBACK_TOP_PRODUCTS[:limit]]
        return ranked

    def rank_clients(self, orders: Iterable[Order], limit: int = 5, fallback: bool = True) -> List[Dict[str, Any]]:
        totals: Dict[Any, Dict[str, Any]] = {}
        for order in active_orders(orders):
            entry = totals.setdefault(order.client_id, {
                "client_id": order.client_id,
                "name": attr(order.client, "business_name") or f"Client {order.client_id}",
                "orders": 0,
                "total": 0.0,
            })
            entry["orders"] += 1
            entry["total"] += order.total_amount

        ranked = sorted(totals.values(), key=lambda entry: entry["total"], reverse=True)[:limit]
        if not ranked and fallback:
            return [
                {"client_id": client.id, "name": client.business_name, "orders": 0, "total": 0.0}
                for client in self.store.clients.list({"is_active": True})[:limit]
            ]
        return ranked

    # Dashboard endpoints

    def kpis(self) -> Dict[str, Any]:
        today = date.today()
        day = today.isoformat()
        month = day[:7]
        last_month = (today.replace(day=1) - timedelta(days=1)).isoformat()[:7]

        orders = list(self.store.orders)
        counted = active_orders(orders)
        today_orders = [o for o in orders if o.order_date[:10] == day]
        month_orders = [o for o in orders if o.order_date[:7] == month]
        month_revenue = sum(o.total_amount for o in counted if o.order_date[:7] == month)
        last_month_revenue = sum(o.total_amount for o in counted if o.order_date[:7] == last_month)

        deliveries_today = [d for d in self.store.deliveries if d.scheduled_date[:10] == day]
        states = Counter(stock_state(record) for record in self.store.inventory)
        status_counts = Counter(o.status for o in orders)

        return {
            "today": {
                "orders": len(today_orders),
                "revenue": sum(o.total_amount for o in counted if o.order_date[:10] == day),
                "deliveries": len(deliveries_today),
                "completed_deliveries": sum(
                    1 for d in deliveries_today if d.status == DeliveryStatus.DELIVERED.value
                ),
            },
            "this_month": {
                "orders": len(month_orders),
                "revenue": month_revenue,
                "growth": percent(month_revenue - last_month_revenue, last_month_revenue),
            },
            "pending_orders": {
                "pending": status_counts[OrderStatus.PENDING.value],
                "confirmed": status_counts[OrderStatus.CONFIRMED.value],
                "processing": status_counts[OrderStatus.PROCESSING.value],
            },
            "pending_deliveries": sum(
                1 for d in self.store.deliveries
                if d.status in (DeliveryStatus.PENDING.value, DeliveryStatus.ASSIGNED.value)
            ),
            "alerts": {"low_stock": states["low"], "out_of_stock": states["out"]},
            "active_clients": sum(1 for c in self.store.clients if c.is_active),
            "active_products": sum(1 for p in self.store.products if p.is_active),
            "inventory_value": sum(r.quantity * r.unit_cost for r in self.store.inventory),
        }

    def revenue_chart(self, days: Any = None, period: Optional[str] = None) -> List[Dict[str, Any]]:
        """Daily revenue over the trailing window; empty days are estimated."""
        by_day: Dict[str, List[Order]] = defaultdict(list)
        for order in active_orders(self.store.orders):
            by_day[order.order_date[:10]].append(order)

        series = []
        for day in trailing_dates(window_days(days, period)):
            orders = by_day.get(day, [])
            if orders:
                series.append({
                    "date": day,
                    "revenue": sum(o.total_amount for o in orders),
                    "orders": len(orders),
                    "estimated": False,
                })
            else:
                series.append({
                    "date": day,
                    "revenue": estimated_value(day, 15000, 45000),
                    "orders": 0,
                    "estimated": True,
                })
        return series

    def top_products(self, limit: int = 5) -> List[Dict[str, Any]]:
        return self.rank_products(self.store.orders, limit)

    def top_clients(self, limit: int = 5) -> List[Dict[str, Any]]:
        return self.rank_clients(self.store.orders, limit)

    def category_distribution(self) -> List[Dict[str, Any]]:
        counts: Counter = Counter()
        for product in self.store.products:
            counts[self.category_name(product.id, product)] += 1
        for category in self.store.categories:
            counts.setdefault(category.name, 0)
        return [{"name": name, "value": value} for name, value in counts.most_common()]

    def inventory_status(self) -> Dict[str, Any]:
        states = Counter(stock_state(record) for record in self.store.inventory)
        by_warehouse = []
        for warehouse in self.store.warehouses.list({"is_active": True}):
            records = self.store.inventory.list({"warehouse_id": warehouse.id})
            by_warehouse.append({
                "id": warehouse.id,
                "name": warehouse.name,
                "code": warehouse.code,
                "products": len({r.product_id for r in records}),
                "total_stock": sum(r.quantity for r in records),
                "stock_value": sum(r.quantity * r.unit_cost for r in records),
            })
        return {
            "healthy": states["healthy"],
            "low": states["low"],
            "out": states["out"],
            "by_warehouse": by_warehouse,
        }

    def recent_activity(self, limit: int = 10) -> List[Dict[str, Any]]:
        activity = []
        for order in self.store.orders:
            activity.append({
                "type": "order",
                "reference": order.order_number,
                "message": f"Order {order.order_number} from {attr(order.client, 'business_name', 'a client')}",
                "status": order.status,
                "timestamp": order.order_date,
            })
        for delivery in self.store.deliveries:
            activity.append({
                "type": "delivery",
                "reference": delivery.delivery_number,
                "message": f"Delivery {delivery.delivery_number} is {delivery.status}",
                "status": delivery.status,
                "timestamp": delivery.delivered_at or delivery.scheduled_date,
            })
        for po in self.store.purchase_orders:
            activity.append({
                "type": "purchase_order",
                "reference": po.po_number,
                "message": f"Purchase order {po.po_number} to {attr(po.supplier, 'name', 'a supplier')}",
                "status": po.status,
                "timestamp": po.received_date or po.order_date,
            })
        activity.sort(key=lambda entry: str(entry["timestamp"]), reverse=True)
        return activity[:limit]

    def pending_actions(self) -> Dict[str, int]:
        today = date.today()
        cutoff = (today - timedelta(days=2)).isoformat()
        in_progress = (OrderStatus.CONFIRMED.value, OrderStatus.PROCESSING.value)
        states = Counter(stock_state(record) for record in self.store.inventory)
        return {
            "pending_orders": sum(1 for o in self.store.orders if o.status == OrderStatus.PENDING.value),
            "delayed_orders": sum(
                1 for o in self.store.orders if o.status in in_progress and o.order_date[:10] < cutoff
            ),
            "pending_pos": sum(
                1 for po in self.store.purchase_orders if po.status == PurchaseOrderStatus.PENDING.value
            ),
            "today_deliveries_pending": sum(
                1 for d in self.store.deliveries
                if d.scheduled_date[:10] == today.isoformat()
                and d.status in (DeliveryStatus.PENDING.value, DeliveryStatus.ASSIGNED.value)
            ),
            "active_alerts": states["low"] + states["out"],
            "pending_receipts": sum(
                1 for po in self.store.purchase_orders
                if po.status in (PurchaseOrderStatus.APPROVED.value, PurchaseOrderStatus.PARTIAL.value)
            ),
        }

    def order_pipeline(self, period: Optional[str] = "7days") -> Dict[str, Any]:
        dates = trailing_dates(window_days(period=period))
        start = dates[0]
        orders = [o for o in self.store.orders if o.order_date[:10] >= start]

        flow = {day: Counter() for day in dates}
        for order in orders:
            counter = flow.get(order.order_date[:10])
            if counter is not None:
                counter["created"] += 1
                counter[order.status] += 1

        lead_times = []
        for order in orders:
            if order.status == OrderStatus.DELIVERED.value and order.delivery_date:
                try:
                    delta = date.fromisoformat(order.delivery_date[:10]) - date.fromisoformat(order.order_date[:10])
                except ValueError:
                    continue
                lead_times.append(delta.days)

        return {
            "daily_flow": [
                {
                    "date": day,
                    "created": counter["created"],
                    "confirmed": counter[OrderStatus.CONFIRMED.value],
                    "shipped": counter[OrderStatus.SHIPPED.value],
                    "delivered": counter[OrderStatus.DELIVERED.value],
                    "cancelled": counter[OrderStatus.CANCELLED.value],
                }
                for day, counter in flow.items()
            ],
            "processing_times": {
                "avg_delivery_days": round(sum(lead_times) / len(lead_times), 1) if lead_times else None,
            },
            "top_clients": self.rank_clients(orders, limit=10, fallback=False),
        }

    def order_visibility(self) -> Dict[str, Any]:
        today = date.today().isoformat()
        since = (date.today() - timedelta(days=30)).isoformat()
        recent = [o for o in self.store.orders if o.order_date[:10] >= since]

        status_counts = []
        for status in OrderStatus:
            matching = [o for o in recent if o.status == status.value]
            if matching:
                status_counts.append({
                    "status": status.value,
                    "count": len(matching),
                    "total_value": sum(o.total_amount for o in matching),
                })

        todays = [o for o in self.store.orders if o.order_date[:10] == today]
        in_progress = (OrderStatus.CONFIRMED.value, OrderStatus.PROCESSING.value)
        closed = (OrderStatus.DELIVERED.value, OrderStatus.CANCELLED.value)

        attention = []
        for order in self.store.orders:
            reason = None
            if order.status == OrderStatus.PENDING.value and order.order_date[:10] < today:
                reason = "pending_too_long"
            elif order.delivery_date and order.delivery_date[:10] < today and order.status not in closed:
                reason = "overdue"
            if reason:
                attention.append({
                    "id": order.id,
                    "order_number": order.order_number,
                    "status": order.status,
                    "total_amount": order.total_amount,
                    "order_date": order.order_date,
                    "client_name": attr(order.client, "business_name"),
                    "client_phone": attr(order.client, "phone"),
                    "attention_reason": reason,
                })

        return {
            "status_counts": status_counts,
            "today_summary": {
                "total_orders": len(todays),
                "pending": sum(1 for o in todays if o.status == OrderStatus.PENDING.value),
                "in_progress": sum(1 for o in todays if o.status in in_progress),
                "dispatched": sum(1 for o in todays if o.status == OrderStatus.SHIPPED.value),
                "delivered": sum(1 for o in todays if o.status == OrderStatus.DELIVERED.value),
                "total_value": sum(o.total_amount for o in todays),
            },
            "attention_required": attention[:20],
        }

    def duplicate_alerts(self, days: int = 7) -> List[Dict[str, Any]]:
        """Pairs of orders from one client, ``days`` apart at most, with the same products."""
        by_client: Dict[Any, List[Order]] = defaultdict(list)
        for order in active_orders(self.store.orders):
            by_client[order.client_id].append(order)

        alerts = []
        for client_orders in by_client.values():
            client_orders.sort(key=lambda o: (o.order_date, o.id))
            for index, later in enumerate(client_orders):
                products = Counter(item.product_id for item in later.items)
                if not products:
                    continue
                for earlier in client_orders[:index]:
                    try:
                        gap = (date.fromisoformat(later.order_date[:10])
                               - date.fromisoformat(earlier.order_date[:10])).days
                    except ValueError:
                        continue
                    if gap <= days and Counter(item.product_id for item in earlier.items) == products:
                        alerts.append({
                            "order_id": later.id,
                            "order_number": later.order_number,
                            "duplicate_of_id": earlier.id,
                            "duplicate_of_number": earlier.order_number,
                            "client_id": later.client_id,
                            "client_name": attr(later.client, "business_name"),
                            "total_amount": later.total_amount,
                            "status": later.status,
                            "days_apart": gap,
                        })
        alerts.sort(key=lambda alert: alert["order_id"], reverse=True)
        return alerts

    def delivery_tracking(self) -> Dict[str, Any]:
        today = date.today().isoformat()
        open_states = [DeliveryStatus.IN_TRANSIT.value, DeliveryStatus.ASSIGNED.value, DeliveryStatus.PENDING.value]
        active = [d for d in self.store.deliveries if d.status in open_states]
        active.sort(key=lambda d: (open_states.index(d.status), d.scheduled_date))

        todays = [d for d in self.store.deliveries if d.scheduled_date[:10] == today]
        drivers: Dict[str, Dict[str, Any]] = {}
        for delivery in active:
            if delivery.driver_name and delivery.driver_name not in drivers:
                drivers[delivery.driver_name] = {
                    "driver_name": delivery.driver_name,
                    "status": "on_delivery" if delivery.status == DeliveryStatus.IN_TRANSIT.value else "assigned",
                    "delivery_id": delivery.id,
                    "delivery_number": delivery.delivery_number,
                }

        return {
            "active_deliveries": [
                {
                    "id": d.id,
                    "delivery_number": d.delivery_number,
                    "status": d.status,
                    "scheduled_date": d.scheduled_date,
                    "driver_name": d.driver_name,
                    "delivery_address": d.delivery_address,
                    "order_number": attr(d.order, "order_number"),
                    "client_name": attr(attr(d.order, "client"), "business_name"),
                    "total_amount": attr(d.order, "total_amount"),
                }
                for d in active
            ],
            "drivers": list(drivers.values()),
            "today_stats": {
                "total_deliveries": len(todays),
                "scheduled": sum(1 for d in todays if d.status in (DeliveryStatus.PENDING.value, DeliveryStatus.ASSIGNED.value)),
                "in_transit": sum(1 for d in todays if d.status == DeliveryStatus.IN_TRANSIT.value),
                "completed": sum(1 for d in todays if d.status == DeliveryStatus.DELIVERED.value),
                "failed": sum(1 for d in todays if d.status == DeliveryStatus.FAILED.value),
            },
        }

    # Inventory views

    def stock_alerts(self) -> List[Dict[str, Any]]:
        alerts = []
        for record in self.store.inventory:
            if record.quantity > record.reorder_level:
                continue
            name = attr(record.product, "name", "Unknown Product")
            out = record.quantity <= 0
            alerts.append({
                "id": record.id,
                "product_id": record.product_id,
                "product_name": name,
                "product_sku": attr(record.product, "sku", ""),
                "alert_type": "out_of_stock" if out else "low_stock",
                "status": "active",
                "message": (
                    f"{name} is out of stock!" if out
                    else f"{name} is running low ({record.quantity} remaining, reorder at {record.reorder_level})"
                ),
                "warehouse_name": attr(record.warehouse, "name", "Main Warehouse"),
                "current_quantity": record.quantity,
                "threshold_quantity": record.reorder_level,
                "created_at": now(),
            })
        return alerts

    def inventory_transactions(self, movement_type: Optional[str] = None) -> List[Dict[str, Any]]:
        """Booked stock movements plus those implied by received purchase orders and delivered orders."""
        rows = []
        received = (PurchaseOrderStatus.RECEIVED.value, PurchaseOrderStatus.PARTIAL.value)
        for po in self.store.purchase_orders:
            if po.status not in received:
                continue
            for item in po.items:
                quantity = attr(item, "received_quantity", item.quantity)
                rows.append(self._movement(item, "in", quantity, po.po_number,
                                           po.received_date or po.order_date, "Goods received"))
        for order in self.store.orders:
            if order.status != OrderStatus.DELIVERED.value:
                continue
            for item in order.items:
                rows.append(self._movement(item, "out", item.quantity, order.order_number,
                                           order.delivery_date or order.order_date, "Sold to client"))
        for movement in self.store.stock_movements:
            product = self.store.products.get(movement.product_id) if movement.product_id is not None else None
            rows.append({
                "id": None,
                "product_id": movement.product_id,
                "product": product.model_dump(mode="json") if product is not None else None,
                "type": movement.type,
                "quantity": movement.quantity,
                "reference": movement.reference,
                "created_at": movement.created_at,
                "notes": movement.notes,
            })

        if movement_type:
            rows = [row for row in rows if row["type"] == movement_type]
        rows.sort(key=lambda row: str(row["created_at"]), reverse=True)
        for index, row in enumerate(rows, start=1):
            row["id"] = index
        return rows

    @staticmethod
    def _movement(item, kind: str, quantity: Any, reference: str, when: Any, notes: str) -> Dict[str, Any]:
        product = item.product.model_dump(mode="json") if item.product is not None else None
        return {
            "id": None,
            "product_id": item.product_id,
            "product": product,
            "type": kind,
            "quantity": quantity,
            "reference": reference,
            "created_at": when,
            "notes": notes,
        }


__all__ = [
    "AnalyticsService",
    "MAX_WINDOW_DAYS",
    "UNCATEGORIZED",
    "active_orders",
    "attr",
    "estimated_value",
    "percent",
    "stock_state",
    "trailing_dates",
    "window_days",
]
