from __future__ import annotations

from datetime import date

import pytest

from distribution_service.repositories import EntityStore
from distribution_service.repositories.seed import FALLBACK_DRIVERS
from distribution_service.services import ReportService
from distribution_service.services.report_service import NET_PROFIT_RATIO


def graph(order_totals, po_totals=()):
    today = date.today().isoformat()
    return {
        "collections": {
            "orders": [
                {"id": i, "client_id": i % 2, "status": "confirmed", "total_amount": total, "order_date": today}
                for i, total in enumerate(order_totals, start=1)
            ],
            "purchase_orders": [
                {"id": i, "status": "received", "total_amount": total, "order_date": today}
                for i, total in enumerate(po_totals, start=1)
            ],
        }
    }


def test_sales_totals_are_exact():
    reports = ReportService(EntityStore(graph=graph([120.5, 79.5, 300])))

    summary = reports.sales()["summary"]
    assert summary["total_sales"] == 500
    assert summary["total_orders"] == 3
    assert summary["avg_order_value"] == pytest.approx(500 / 3)
    assert summary["unique_clients"] == 2


def test_sales_average_guards_zero_orders():
    summary = ReportService(EntityStore(graph={})).sales()["summary"]

    assert summary["total_sales"] == 0
    assert summary["avg_order_value"] == 0


def test_sales_exclude_cancelled(store):
    reports = ReportService(store)
    expected = sum(o.total_amount for o in store.orders if o.status != "cancelled")

    store.orders.update(1, {"status": "cancelled"})

    assert reports.sales()["summary"]["total_sales"] == expected - store.orders.get(1).total_amount


def test_financial_arithmetic():
    report = ReportService(EntityStore(graph=graph([1000], [600]))).financial()
    summary = report["summary"]

    assert summary["gross_profit"] == 400
    assert summary["net_profit"] == 400 * NET_PROFIT_RATIO
    assert summary["gross_margin"] == 40.0
    assert summary["net_margin"] == 30.0
    assert report["receivables"]["total"] == 50
    assert report["receivables"]["current"] == 32
    assert report["payables"]["total"] == 27
    assert report["trend"][0]["profit"] == 400


def test_financial_margins_zero_without_revenue():
    summary = ReportService(EntityStore(graph=graph([], [600]))).financial()["summary"]

    assert summary["gross_profit"] == -600
    assert summary["gross_margin"] == 0
    assert summary["net_margin"] == 0


def test_inventory_report_by_category(store):
    report = ReportService(store).inventory()

    assert report["summary"]["total_products"] == 10
    assert report["summary"]["total_units"] == sum(r.quantity for r in store.inventory)
    assert {row["name"] for row in report["by_category"]} >= {"Beverages", "Household"}
    assert all(item["quantity"] <= item["reorder_level"] for item in report["low_stock_items"])


def test_delivery_performance(store):
    report = ReportService(store).delivery_performance()

    assert report["summary"]["delivered"] == 1
    assert report["summary"]["success_rate"] == 100.0
    assert report["summary"]["avg_delivery_time"] == 150
    assert len(report["daily_deliveries"]) == 7
    assert report["driver_performance"][0]["name"] == "Pedro Reyes"


def test_delivery_performance_falls_back_without_drivers():
    report = ReportService(EntityStore(graph={})).delivery_performance()

    assert report["driver_performance"] == FALLBACK_DRIVERS
    assert all(row["estimated"] for row in report["daily_deliveries"])


def test_unknown_report_is_empty(store):
    assert ReportService(store).build("nonsense") == {}
