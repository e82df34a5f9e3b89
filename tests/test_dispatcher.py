from __future__ import annotations

import anyio
import pytest

from distribution_service.app import create_service
from distribution_service.config import Settings
from distribution_service.dispatcher import DataService
from distribution_service.errors import AuthenticationError, InvalidCredentialsError, UnauthorizedError
from distribution_service.models import PRICING_TIERS
from distribution_service.repositories import EntityStore, build_seed_graph
from distribution_service.services import ExportBlob
from distribution_service.storage import SnapshotStorage


@pytest.mark.anyio(backend="asyncio")
async def test_order_against_new_client_embeds_snapshot(service):
    created = await service.post("/clients", {"business_name": "Corner Shop", "credit_limit": 10000})
    client_id = created["client"]["id"]

    result = await service.post("/orders", {
        "client_id": client_id,
        "items": [
            {"product_id": 1, "quantity": 2, "unit_price": 50},
            {"product_id": 2, "quantity": 1, "unit_price": 100},
        ],
    })

    assert result["success"] is True
    assert result["order"]["total_amount"] == 200
    assert result["order"]["client"]["credit_limit"] == 10000

    await service.put(f"/clients/{client_id}", {"credit_limit": 5})
    order = await service.get(f"/orders/{result['order']['id']}")
    assert order["client"]["credit_limit"] == 10000


@pytest.mark.anyio(backend="asyncio")
async def test_restart_with_same_version_restores_orders(service, engine):
    await service.post("/orders", {"client_id": 1, "items": [{"product_id": 3, "quantity": 4}]})
    before = await service.get("/orders")

    restarted = DataService(EntityStore.open(SnapshotStorage(engine, prefix="tm_", schema_version="1.0")))
    after = await restarted.get("/orders")

    assert after["total"] == before["total"] == 8
    assert [o["total_amount"] for o in after["orders"]] == [o["total_amount"] for o in before["orders"]]


@pytest.mark.anyio(backend="asyncio")
async def test_version_bump_resets_to_default_graph(service, engine):
    created = await service.post("/orders", {"client_id": 1, "items": []})

    bumped = SnapshotStorage(engine, prefix="tm_", schema_version="2.0")
    restarted = DataService(EntityStore.open(bumped, default=build_seed_graph()))
    orders = await restarted.get("/orders")

    assert orders["total"] == 7
    assert created["order"]["id"] not in [o["id"] for o in orders["orders"]]
    assert bumped.keys() == []


@pytest.mark.anyio(backend="asyncio")
async def test_created_order_is_listed_exactly_once(service):
    created = await service.post("/orders", {"client_id": 2, "items": [{"product_id": 1, "quantity": 1}]})
    listing = await service.get("/orders")

    ids = [order["id"] for order in listing["orders"]]
    assert ids.count(created["order"]["id"]) == 1
    assert listing["total"] == len(ids)


@pytest.mark.anyio(backend="asyncio")
async def test_pricing_tiers_is_not_a_client_dump(service):
    result = await service.get("/clients/pricing-tiers")

    assert result == {"tiers": PRICING_TIERS}


@pytest.mark.anyio(backend="asyncio")
async def test_wrong_credentials_raise_and_persist_nothing(service, storage):
    with pytest.raises(InvalidCredentialsError) as exc_info:
        await service.post("/auth/login", {"email": "admin@tresmarias.ph", "password": "wrong"})

    assert exc_info.value.message == "Invalid email or password"
    assert isinstance(exc_info.value, AuthenticationError)
    assert storage.exists("token") is False
    assert storage.exists("user") is False


@pytest.mark.anyio(backend="asyncio")
async def test_login_me_logout(service, storage):
    result = await service.post("/auth/login", {"email": "Admin@TresMarias.ph", "password": "admin123"})

    assert result["token"].startswith("mock-jwt-token-")
    assert "password" not in result["user"]
    assert storage.load("token") == result["token"]

    me = await service.get("/auth/me")
    assert me["user"]["email"] == "admin@tresmarias.ph"

    await service.post("/auth/logout")
    with pytest.raises(UnauthorizedError):
        await service.get("/auth/me")


@pytest.mark.anyio(backend="asyncio")
async def test_unmatched_route_is_empty_for_every_verb(service):
    assert await service.get("/nowhere") == {}
    assert await service.post("/nowhere", {"a": 1}) == {}
    assert await service.put("/nowhere/1", {}) == {}
    assert await service.delete("/orders/1") == {}


@pytest.mark.anyio(backend="asyncio")
async def test_not_found_reads_and_updates(service):
    assert await service.get("/products/999") is None
    assert await service.put("/products/999", {"name": "x"}) == {"success": False, "product": None}
    assert await service.get("/distribution/plans/999") == {"plan": None, "orders": []}


@pytest.mark.anyio(backend="asyncio")
async def test_invalid_field_types_are_reported_not_raised(service):
    result = await service.post("/products", {"name": "Bad", "unit_price": "not a number"})

    assert result["success"] is False
    assert result["errors"][0]["loc"] == ("unit_price",)


@pytest.mark.anyio(backend="asyncio")
async def test_users_never_expose_credentials(service):
    listing = await service.get("/users")
    created = await service.post("/users", {"name": "New", "email": "new@tresmarias.ph"})
    fetched = await service.get(f"/users/{created['user']['id']}")

    assert all("password" not in user for user in listing["users"])
    assert "password" not in created["user"]
    assert "password" not in fetched
    assert service.store.users.get(created["user"]["id"]).password == "password123"
    assert (await service.delete(f"/users/{created['user']['id']}")) == {"success": True}


@pytest.mark.anyio(backend="asyncio")
async def test_plan_lifecycle(service):
    created = await service.post("/distribution/plans", {"order_ids": [3, 4], "notes": "Friday run"})
    plan_id = created["plan"]["id"]

    assert (await service.post(f"/distribution/plans/{plan_id}/execute")) == {"success": True}
    detail = await service.get(f"/distribution/plans/{plan_id}")

    assert detail["plan"]["status"] == "executing"
    assert [order["id"] for order in detail["orders"]] == [3, 4]

    optimized = await service.post("/distribution/plans/optimize", {})
    assert optimized["success"] is True
    assert optimized["recommendations"]


@pytest.mark.anyio(backend="asyncio")
async def test_goods_receipt_updates_po_and_inventory(service, storage):
    before = service.store.inventory.get(4).quantity

    result = await service.post("/purchase-orders/2/receive", {"warehouse_id": "1"})

    assert result["success"] is True
    assert result["purchase_order"]["status"] == "received"
    assert service.store.inventory.get(4).quantity == before + 1500
    new_rows = [r for r in service.store.inventory if r.product_id == 4]
    assert len(new_rows) == 1
    persisted = storage.load("store")
    assert persisted == service.store.to_graph()


@pytest.mark.anyio(backend="asyncio")
async def test_partial_receipt_into_new_warehouse(service):
    result = await service.post("/purchase-orders/3/receive", {
        "warehouse_id": "2",
        "items": [{"product_id": 6, "quantity_received": 100}],
    })

    assert result["purchase_order"]["status"] == "partial"
    created = [r for r in service.store.inventory if r.warehouse_id == "2"]
    assert [(r.product_id, r.quantity) for r in created] == [(6, 100)]
    assert created[0].warehouse.name == "Northern Distribution Center"


@pytest.mark.anyio(backend="asyncio")
async def test_category_and_user_are_the_only_deletes(service):
    assert await service.delete("/categories/6") == {"success": True}
    assert await service.get("/categories/6") is None
    assert await service.delete("/products/1") == {}


@pytest.mark.anyio(backend="asyncio")
async def test_warehouse_routes_answer_both_spellings(service):
    singular = await service.get("/warehouse/1")
    plural = await service.get("/warehouses")

    assert singular["code"] == "WH-MAIN"
    assert plural["total"] == 2


@pytest.mark.anyio(backend="asyncio")
async def test_export_returns_blob(service):
    blob = await service.get("/reports/export/csv/sales")

    assert isinstance(blob, ExportBlob)
    assert blob.content_type == "text/csv"
    assert blob.content.startswith(b"metric,value")

    text = await service.get("/reports/export/pdf/financial")
    assert text.content.startswith(b"Financial Report")


@pytest.mark.anyio(backend="asyncio")
async def test_calls_complete_out_of_issue_order(service):
    service.settings = Settings(read_latency_ms=30, write_latency_ms=0, update_latency_ms=0)
    finished: list[str] = []

    async def read():
        await service.get("/orders")
        finished.append("read")

    async def write():
        await service.post("/clients", {"business_name": "Fast"})
        finished.append("write")

    async with anyio.create_task_group() as tg:
        tg.start_soon(read)
        tg.start_soon(write)

    assert finished == ["write", "read"]


def test_create_service_wires_everything(engine):
    service = create_service(engine=engine)

    assert isinstance(service, DataService)
    assert len(service.store.orders) == 7
    assert service.storage is service.store.storage


@pytest.mark.anyio(backend="asyncio")
async def test_duplicate_keys_and_cycles_are_rejected(service):
    sku = await service.post("/products", {"sku": "BEV-001", "name": "Copy"})
    code = await service.post("/warehouses", {"code": "WH-MAIN", "name": "Copy"})
    cycle = await service.put("/categories/1", {"parent_id": 1})

    for result in (sku, code, cycle):
        assert result["success"] is False
        assert result["errors"]
    assert [p.sku for p in service.store.products].count("BEV-001") == 1
    assert len(service.store.warehouses) == 2
    assert service.store.categories.get(1).parent_id is None


@pytest.mark.anyio(backend="asyncio")
async def test_malformed_bodies_degrade_to_errors(service):
    results = [
        await service.post("/orders", {"client_id": 1, "items": 5}),
        await service.post("/purchase-orders", {"supplier_id": 1, "items": [1, 2]}),
        await service.post("/distribution/plans", {"order_ids": 3}),
        await service.post("/purchase-orders/2/receive", {"items": ["x"]}),
        await service.post("/purchase-orders/2/receive", {"items": [{"product_id": 4, "quantity": {}}]}),
        await service.post("/orders", {"client_id": 1, "items": [{"product_id": 1, "quantity": {}}]}),
        await service.post("/clients", ["not", "a", "mapping"]),
    ]

    for result in results:
        assert result["success"] is False
    assert len(service.store.orders) == 7
    assert service.store.purchase_orders.get(2).status == "approved"


@pytest.mark.anyio(backend="asyncio")
async def test_revenue_chart_window_is_capped(service):
    huge = await service.get("/dashboard/revenue-chart?days=1000000")
    negative = await service.get("/dashboard/revenue-chart?days=-4")

    assert len(huge) == 90
    assert len(negative) == 7


@pytest.mark.anyio(backend="asyncio")
async def test_adjust_stock_books_a_movement(service):
    result = await service.post("/inventory/adjust", {
        "product_id": 1, "warehouse_id": "1", "adjustment_quantity": -50, "reason": "Damaged",
    })

    assert result["success"] is True
    assert result["previous_quantity"] == 450
    assert result["item"]["quantity"] == 400

    moves = await service.get("/inventory/transactions?type=adjustment")
    assert moves["total"] == 1
    assert moves["transactions"][0]["quantity"] == -50
    assert moves["transactions"][0]["notes"] == "Damaged"

    too_much = await service.post("/inventory/adjust", {
        "product_id": 1, "warehouse_id": "1", "adjustment_quantity": -1000,
    })
    missing = await service.post("/inventory/adjust", {
        "product_id": 1, "warehouse_id": "2", "adjustment_quantity": 5,
    })
    assert too_much["success"] is False
    assert missing == {"success": False, "message": "Inventory record not found"}
    assert service.store.inventory.get(1).quantity == 400


@pytest.mark.anyio(backend="asyncio")
async def test_transfer_moves_stock_between_warehouses(service, storage):
    result = await service.post("/inventory/transfer", {
        "product_id": 1, "from_warehouse_id": "1", "to_warehouse_id": "2", "quantity": 100,
    })

    assert result["success"] is True
    assert result["source"]["quantity"] == 350
    assert result["destination"]["warehouse_id"] == "2"
    assert result["destination"]["quantity"] == 100

    persisted = EntityStore.open(storage)
    assert [m.type for m in persisted.stock_movements] == ["transfer_in", "transfer_out"]

    short = await service.post("/inventory/transfer", {
        "product_id": 1, "from_warehouse_id": "1", "to_warehouse_id": "2", "quantity": 5000,
    })
    assert short["success"] is False
    assert short["message"] == "Insufficient inventory for transfer. Available: 350"

    invalid = await service.post("/inventory/transfer", {
        "product_id": 1, "from_warehouse_id": "1", "to_warehouse_id": "2", "quantity": 0,
    })
    assert invalid["success"] is False
    assert service.store.inventory.get(1).quantity == 350


@pytest.mark.anyio(backend="asyncio")
async def test_category_tree_route(service):
    await service.post("/categories", {"name": "Soft Drinks", "parent_id": 1})

    result = await service.get("/categories/tree")
    beverages = next(node for node in result["categories"] if node["id"] == 1)

    assert [child["name"] for child in beverages["children"]] == ["Soft Drinks"]
    assert all(node["parent_id"] is None for node in result["categories"])
