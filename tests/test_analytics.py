from __future__ import annotations

from datetime import date, timedelta

import pytest

from distribution_service.repositories import EntityStore
from distribution_service.repositories.seed import FALLBACK_TOP_PRODUCTS
from distribution_service.services import AnalyticsService
from distribution_service.services.analytics_service import MAX_WINDOW_DAYS, window_days


def day(offset: int) -> str:
    return (date.today() - timedelta(days=offset)).isoformat()


def order(oid, client_id, products, *, status="confirmed", age=0, total=None, name="Shop"):
    items = [
        {"product_id": pid, "product": {"source_id": pid, "name": f"P{pid}"}, "quantity": qty, "unit_price": price}
        for pid, qty, price in products
    ]
    return {
        "id": oid,
        "order_number": f"ORD-{oid}",
        "client_id": client_id,
        "client": {"source_id": client_id, "business_name": name},
        "items": items,
        "status": status,
        "total_amount": total if total is not None else sum(q * p for _, q, p in products),
        "order_date": day(age),
    }


@pytest.fixture
def analytics():
    store = EntityStore.from_graph({
        "collections": {
            "categories": [{"id": 1, "name": "Beverages"}],
            "products": [
                {"id": 1, "name": "Cola", "category_id": 1},
                {"id": 2, "name": "Chips", "category_id": 99, "category": {"source_id": 99, "name": "Snacks"}},
                {"id": 3, "name": "Loose"},
            ],
            "orders": [
                order(1, 1, [(1, 2, 50)], age=0),
                order(2, 1, [(1, 1, 50)], age=3),
                order(3, 2, [(2, 10, 10)], age=1, status="cancelled"),
                order(4, 2, [(2, 5, 10), (3, 1, 100)], age=40, status="delivered"),
            ],
            "inventory": [
                {"id": 1, "product_id": 1, "quantity": 0, "reorder_level": 10, "unit_cost": 5},
                {"id": 2, "product_id": 2, "quantity": 5, "reorder_level": 10, "unit_cost": 2},
                {"id": 3, "product_id": 3, "quantity": 50, "reorder_level": 10, "unit_cost": 1},
            ],
            "clients": [{"id": 1, "business_name": "Shop"}, {"id": 2, "business_name": "Mart", "is_active": False}],
        },
    })
    return AnalyticsService(store)


def test_kpis_count_today_and_stock(analytics):
    kpis = analytics.kpis()

    assert kpis["today"]["orders"] == 1
    assert kpis["today"]["revenue"] == 100
    assert kpis["alerts"] == {"low_stock": 1, "out_of_stock": 1}
    assert kpis["active_clients"] == 1
    assert kpis["inventory_value"] == 0 * 5 + 5 * 2 + 50 * 1
    assert kpis["pending_orders"]["confirmed"] == 2


def test_revenue_chart_marks_estimated_buckets(analytics):
    first = analytics.revenue_chart(days=7)
    second = analytics.revenue_chart(period="7days")

    assert len(first) == 7
    assert first[-1] == {"date": day(0), "revenue": 100, "orders": 1, "estimated": False}
    assert first[-2]["estimated"] is True
    assert first == second
    assert len(analytics.revenue_chart(period="30days")) == 30


@pytest.mark.parametrize(
    ("days", "period", "expected"),
    [
        ("14", None, 14),
        (1_000_000, None, MAX_WINDOW_DAYS),
        ("0", None, 7),
        ("soon", None, 7),
        (3, "30days", 30),
    ],
)
def test_window_days_bounds(days, period, expected):
    assert window_days(days, period) == expected


def test_top_products_skip_cancelled_orders(analytics):
    top = analytics.top_products(limit=2)

    assert [entry["name"] for entry in top] == ["P1", "P3"]
    assert top[0]["revenue"] == 150


def test_top_products_fall_back_when_empty():
    assert AnalyticsService(EntityStore(graph={})).top_products(3) == FALLBACK_TOP_PRODUCTS[:3]


def test_category_names_resolve_live_then_snapshot(analytics):
    distribution = {row["name"]: row["value"] for row in analytics.category_distribution()}

    assert distribution == {"Beverages": 1, "Snacks": 1, "Uncategorized": 1}


def test_inventory_status(analytics):
    status = analytics.inventory_status()

    assert (status["healthy"], status["low"], status["out"]) == (1, 1, 1)


def test_duplicate_alerts_match_same_products_within_window(analytics):
    alerts = analytics.duplicate_alerts()

    assert [(a["order_id"], a["duplicate_of_id"]) for a in alerts] == [(1, 2)]
    assert alerts[0]["days_apart"] == 3
    assert analytics.duplicate_alerts(days=2) == []


def test_stock_alerts_and_transactions(analytics):
    alerts = analytics.stock_alerts()

    assert [(a["id"], a["alert_type"]) for a in alerts] == [(1, "out_of_stock"), (2, "low_stock")]

    moves = analytics.inventory_transactions()
    assert {m["type"] for m in moves} == {"out"}
    assert [m["reference"] for m in moves] == ["ORD-4", "ORD-4"]


def test_order_pipeline_window(analytics):
    pipeline = analytics.order_pipeline("7days")

    assert len(pipeline["daily_flow"]) == 7
    assert sum(row["created"] for row in pipeline["daily_flow"]) == 3
    assert pipeline["top_clients"][0]["name"] == "Shop"


def test_seeded_dashboard_endpoints_have_data(store):
    analytics = AnalyticsService(store)

    assert analytics.pending_actions()["pending_pos"] == 1
    assert analytics.order_visibility()["status_counts"]
    assert analytics.delivery_tracking()["active_deliveries"][0]["status"] == "in-transit"
    assert analytics.recent_activity(limit=3)
