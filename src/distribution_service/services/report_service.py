"""Sales, inventory, delivery and financial reports."""

from __future__ import annotations

from collections import Counter, defaultdict
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from distribution_service.models import DeliveryStatus, PurchaseOrderStatus
from distribution_service.repositories import EntityStore
from distribution_service.repositories.seed import FALLBACK_DRIVERS
from distribution_service.services.analytics_service import (
    AnalyticsService,
    active_orders,
    attr,
    estimated_value,
    percent,
    stock_state,
    trailing_dates,
)

# Net profit after an assumed flat tax and overhead share.
NET_PROFIT_RATIO = 0.75

# Aging is approximated from totals, not tracked per document.
RECEIVABLES_RATIO = 0.05
RECEIVABLES_SPLIT = (0.64, 0.24, 0.12)
PAYABLES_RATIO = 0.045
PAYABLES_SPLIT = (0.70, 0.24, 0.06)


def _aging(total: float, split: tuple[float, float, float]) -> Dict[str, float]:
    current, days_30, days_60 = split
    return {
        "total": round(total, 2),
        "current": round(total * current, 2),
        "days_30": round(total * days_30, 2),
        "days_60": round(total * days_60, 2),
    }


def _minutes_between(start: Any, end: Any) -> Optional[float]:
    try:
        delta = datetime.fromisoformat(str(end)) - datetime.fromisoformat(str(start))
    except (TypeError, ValueError):
        return None
    return delta.total_seconds() / 60


def _date_filters(filters: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    filters = filters or {}
    return {key: filters[key] for key in ("start_date", "end_date") if filters.get(key)}


class ReportService:
    """Service for the report pages; every call rescans the store."""

    def __init__(self, store: EntityStore, analytics: Optional[AnalyticsService] = None):
        self.store = store
        self.analytics = analytics or AnalyticsService(store)

    def build(self, report_type: str, filters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Dispatch by report name; unknown names yield an empty report."""
        builders = {
            "sales": self.sales,
            "inventory": self.inventory,
            "delivery": self.delivery_performance,
            "delivery-performance": self.delivery_performance,
            "financial": self.financial,
        }
        builder = builders.get(report_type)
        return builder(filters) if builder else {}

    def sales(self, filters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        orders = active_orders(self.store.orders.list(filters))
        total_sales = sum(order.total_amount for order in orders)

        daily: Dict[str, Dict[str, Any]] = {}
        by_category: Dict[str, float] = defaultdict(float)
        for order in orders:
            day = order.order_date[:10]
            bucket = daily.setdefault(day, {"date": day, "total": 0.0, "orders": 0})
            bucket["total"] += order.total_amount
            bucket["orders"] += 1
            for item in order.items:
                by_category[self.analytics.category_name(item.product_id, item.product)] += item.line_total

        return {
            "summary": {
                "total_sales": total_sales,
                "total_orders": len(orders),
                "avg_order_value": total_sales / len(orders) if orders else 0,
                "total_items": sum(item.quantity for order in orders for item in order.items),
                "unique_clients": len({order.client_id for order in orders}),
            },
            "daily_sales": [daily[day] for day in sorted(daily)],
            "top_products": self.analytics.rank_products(orders, limit=10),
            "top_clients": self.analytics.rank_clients(orders, limit=10),
            "by_category": sorted(
                ({"category": name, "total": total} for name, total in by_category.items()),
                key=lambda row: row["total"],
                reverse=True,
            ),
        }

    def inventory(self, filters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        records = self.store.inventory.list(filters)
        states = Counter(stock_state(record) for record in records)

        by_category: Dict[str, Dict[str, Any]] = {}
        by_warehouse: Dict[str, Dict[str, Any]] = {}
        low_stock_items = []
        for record in records:
            name = self.analytics.category_name(record.product_id, record.product)
            value = record.quantity * record.unit_cost
            category = by_category.setdefault(name, {"name": name, "units": 0, "value": 0.0})
            category["units"] += record.quantity
            category["value"] += value

            warehouse_name = attr(record.warehouse, "name") or f"Warehouse {record.warehouse_id}"
            warehouse = by_warehouse.setdefault(
                warehouse_name, {"warehouse": warehouse_name, "units": 0, "value": 0.0}
            )
            warehouse["units"] += record.quantity
            warehouse["value"] += value

            if record.quantity <= record.reorder_level:
                low_stock_items.append({
                    "product": attr(record.product, "name", "Unknown Product"),
                    "sku": attr(record.product, "sku", ""),
                    "category": name,
                    "warehouse": warehouse_name,
                    "quantity": record.quantity,
                    "reorder_level": record.reorder_level,
                })

        return {
            "summary": {
                "total_products": len({record.product_id for record in records}),
                "total_units": sum(record.quantity for record in records),
                "total_value": sum(record.quantity * record.unit_cost for record in records),
                "low_stock": states["low"],
                "out_of_stock": states["out"],
                "healthy_stock": states["healthy"],
            },
            "by_category": sorted(by_category.values(), key=lambda row: row["value"], reverse=True),
            "by_warehouse": list(by_warehouse.values()),
            "low_stock_items": low_stock_items,
        }

    def delivery_performance(self, filters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        deliveries = self.store.deliveries.list(filters)
        statuses = Counter(delivery.status for delivery in deliveries)
        delivered = statuses[DeliveryStatus.DELIVERED.value]
        failed = statuses[DeliveryStatus.FAILED.value]
        returned = statuses[DeliveryStatus.RETURNED.value]

        durations = [
            minutes for minutes in (
                _minutes_between(d.scheduled_date, d.delivered_at)
                for d in deliveries
                if d.status == DeliveryStatus.DELIVERED.value and d.delivered_at
            )
            if minutes is not None
        ]

        per_day: Dict[str, Counter] = defaultdict(Counter)
        for delivery in deliveries:
            per_day[delivery.scheduled_date[:10]][delivery.status] += 1
        daily = []
        for day in trailing_dates(7):
            counts = per_day.get(day)
            if counts:
                daily.append({
                    "date": day,
                    "delivered": counts[DeliveryStatus.DELIVERED.value],
                    "failed": counts[DeliveryStatus.FAILED.value],
                    "estimated": False,
                })
            else:
                daily.append({
                    "date": day,
                    "delivered": estimated_value(day, 3, 12),
                    "failed": estimated_value(day, 0, 1),
                    "estimated": True,
                })

        drivers: Dict[str, Dict[str, Any]] = {}
        for delivery in deliveries:
            if not delivery.driver_name:
                continue
            row = drivers.setdefault(
                delivery.driver_name,
                {"name": delivery.driver_name, "total": 0, "delivered": 0, "failed": 0},
            )
            row["total"] += 1
            if delivery.status == DeliveryStatus.DELIVERED.value:
                row["delivered"] += 1
            elif delivery.status == DeliveryStatus.FAILED.value:
                row["failed"] += 1
        for row in drivers.values():
            row["success_rate"] = percent(row["delivered"], row["total"])
        driver_performance = sorted(drivers.values(), key=lambda row: row["delivered"], reverse=True)

        return {
            "summary": {
                "total": len(deliveries),
                "delivered": delivered,
                "failed": failed,
                "returned": returned,
                "in_transit": statuses[DeliveryStatus.IN_TRANSIT.value],
                "pending": statuses[DeliveryStatus.PENDING.value] + statuses[DeliveryStatus.ASSIGNED.value],
                "success_rate": percent(delivered, delivered + failed + returned),
                "avg_delivery_time": round(sum(durations) / len(durations)) if durations else 0,
            },
            "daily_deliveries": daily,
            "driver_performance": driver_performance or [dict(row) for row in FALLBACK_DRIVERS],
        }

    def financial(self, filters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Profit and loss approximation; receivables and payables are fixed ratios."""
        period = _date_filters(filters)
        orders = active_orders(self.store.orders.list(period))
        purchases = [
            po for po in self.store.purchase_orders.list(period)
            if po.status != PurchaseOrderStatus.CANCELLED.value
        ]

        revenue = sum(order.total_amount for order in orders)
        expenses = sum(po.total_amount for po in purchases)
        gross = revenue - expenses
        net = gross * NET_PROFIT_RATIO

        trend: Dict[str, Dict[str, Any]] = {}
        for order in orders:
            day = order.order_date[:10]
            trend.setdefault(day, {"date": day, "revenue": 0.0, "expenses": 0.0})["revenue"] += order.total_amount
        for po in purchases:
            day = po.order_date[:10]
            trend.setdefault(day, {"date": day, "revenue": 0.0, "expenses": 0.0})["expenses"] += po.total_amount
        for row in trend.values():
            row["profit"] = row["revenue"] - row["expenses"]
            row["profit_margin"] = percent(row["profit"], row["revenue"])

        expenses_by_category: Dict[str, float] = defaultdict(float)
        for po in purchases:
            for item in po.items:
                expenses_by_category[self.analytics.category_name(item.product_id, item.product)] += item.line_total

        return {
            "summary": {
                "total_revenue": revenue,
                "total_expenses": expenses,
                "gross_profit": gross,
                "net_profit": net,
                "gross_margin": percent(gross, revenue),
                "net_margin": percent(net, revenue),
            },
            "trend": [trend[day] for day in sorted(trend)],
            "expenses_by_category": [
                {"category": name, "total": total}
                for name, total in sorted(expenses_by_category.items(), key=lambda pair: pair[1], reverse=True)
            ],
            "receivables": _aging(revenue * RECEIVABLES_RATIO, RECEIVABLES_SPLIT),
            "payables": _aging(expenses * PAYABLES_RATIO, PAYABLES_SPLIT),
            "generated_at": date.today().isoformat(),
        }


__all__ = ["NET_PROFIT_RATIO", "ReportService"]
