from __future__ import annotations

from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from distribution_service.models import Snapshot
from distribution_service.repositories import EntityStore, build_seed_graph, same_id


def test_seed_graph_populates_every_collection(store):
    assert len(store.users) == 3
    assert len(store.warehouses) == 2
    assert len(store.products) == 10
    assert len(store.orders) == 7
    assert store.orders.next_id == 8
    assert store.distribution_plans.records[0].id == 4


def test_ids_are_monotonic_per_collection(store):
    first = store.clients.create({"business_name": "A"})
    store.products.create({"name": "Other collection"})
    second = store.clients.create({"business_name": "B"})
    third = store.clients.create({"business_name": "C"})

    assert first.id < second.id < third.id
    assert len({first.id, second.id, third.id}) == 3


def test_ids_survive_removal(store):
    category = store.categories.create({"name": "Temporary"})
    store.categories.remove(category.id)

    assert store.categories.create({"name": "Next"}).id == category.id + 1


def test_string_ids_for_warehouses_and_users(store):
    warehouse = store.warehouses.create({"name": "South Hub"})

    assert warehouse.id == "3"
    assert store.warehouses.get(3) is warehouse
    assert same_id("3", 3)


def test_order_total_and_document_number(store):
    client = store.clients.create({"business_name": "Corner Shop", "credit_limit": 10000})
    order = store.orders.create({
        "client_id": client.id,
        "items": [
            {"product_id": 1, "quantity": 2, "unit_price": 50},
            {"product_id": 2, "quantity": 1, "unit_price": 100},
        ],
    })

    assert order.total_amount == 200
    assert order.order_number == f"ORD-{date.today().year}-{order.id:04d}"
    assert isinstance(order.client, Snapshot)
    assert order.client.credit_limit == 10000
    assert order.items[0].product.name == "Coca-Cola 1.5L"
    assert store.orders.records[0] is order


def test_missing_unit_price_comes_from_product(store):
    order = store.orders.create({"client_id": 1, "items": [{"product_id": 10, "quantity": 2}]})
    po = store.purchase_orders.create({"supplier_id": 1, "items": [{"product_id": 10, "quantity": 2}]})

    assert order.total_amount == 430
    assert po.total_amount == 360
    assert po.po_number.startswith("PO-")


def test_embedded_snapshot_is_not_a_live_join(store):
    client = store.clients.create({"business_name": "Before", "credit_limit": 10000})
    order = store.orders.create({"client_id": client.id, "items": []})

    store.clients.update(client.id, {"business_name": "After", "credit_limit": 1})

    stored = store.orders.get(order.id)
    assert stored.client.business_name == "Before"
    assert stored.client.credit_limit == 10000
    assert stored.client.source_id == client.id


def test_snapshot_is_frozen(store):
    order = store.orders.get(1)
    with pytest.raises(Exception):
        order.client.business_name = "changed"


def test_update_merges_and_returns_none_when_absent(store):
    updated = store.products.update(1, {"unit_price": 60, "promo": "summer"})

    assert updated.unit_price == 60
    assert updated.promo == "summer"
    assert updated.name == "Coca-Cola 1.5L"
    assert store.products.update(999, {"unit_price": 1}) is None


def test_updating_items_recomputes_total_and_keeps_snapshots(store):
    order = store.orders.get(1)
    taken = order.items[0].product.captured_at
    store.products.update(order.items[0].product_id, {"name": "Renamed"})

    items = [item.model_dump() for item in order.items]
    items[0]["quantity"] = 1
    updated = store.orders.update(order.id, {"items": items})

    assert updated.total_amount == sum(i.quantity * i.unit_price for i in updated.items)
    assert updated.items[0].product.captured_at == taken
    assert updated.items[0].product.name != "Renamed"


def test_list_filters(store):
    assert {o.status for o in store.orders.list({"status": "confirmed"})} == {"confirmed"}
    assert len(store.orders.list({"status": "confirmed,processing"})) == 6
    assert len(store.orders.list({"unknown": "x"})) == 7
    assert [c.business_name for c in store.clients.list({"search": "metro"})] == ["Metro Fresh Mart"]

    since = (date.today() - timedelta(days=3)).isoformat()
    assert [o.id for o in store.orders.list({"start_date": since})] == [7, 6, 5]
    assert [o.id for o in store.orders.list({"end_date": since, "status": "delivered"})] == [1]


def test_plan_derives_totals_from_orders(store):
    plan = store.distribution_plans.create({"order_ids": [1, 2, 999], "priority": "high"})

    assert plan.order_ids == [1, 2]
    assert plan.deliveries_count == 2
    assert plan.items_count == 4
    assert plan.total_value == store.orders.get(1).total_amount + store.orders.get(2).total_amount
    assert plan.plan_number.endswith("-005")


def test_remove_does_not_cascade(store):
    assert store.categories.remove(1) is True
    assert store.products.get(1).category_id == 1
    assert store.categories.remove(1) is False


def test_mutations_persist_whole_graph(store, storage):
    store.clients.create({"business_name": "Persisted"})

    reopened = EntityStore.open(storage)
    assert reopened.to_graph() == store.to_graph()


def test_unit_of_work_writes_once_and_rolls_back(store, storage):
    before = store.to_graph()

    with pytest.raises(RuntimeError):
        with store.unit_of_work():
            store.clients.create({"business_name": "Ghost"})
            raise RuntimeError("boom")

    assert store.to_graph() == before
    assert storage.load("store") is None

    with store.unit_of_work():
        store.clients.create({"business_name": "Real"})
        assert storage.load("store") is None
    assert storage.load("store") == store.to_graph()


def test_reset_restores_seed(store):
    store.clients.create({"business_name": "Extra"})
    store.reset()

    assert len(store.clients) == 5
    assert store.to_graph()["next_ids"] == build_seed_graph()["next_ids"]


def test_sku_and_code_must_be_unique(store):
    with pytest.raises(ValueError, match="sku"):
        store.products.create({"sku": "BEV-001", "name": "Copy"})
    with pytest.raises(ValueError, match="code"):
        store.warehouses.create({"code": "wh-main", "name": "Copy"})
    with pytest.raises(ValueError, match="sku"):
        store.products.update(2, {"sku": "BEV-001"})

    assert len(store.products) == 10
    assert store.products.create({"name": "No SKU"}).id == 11
    assert store.products.update(1, {"sku": "BEV-001", "name": "Renamed"}).name == "Renamed"


def test_category_parent_chain_rejects_cycles(store):
    child = store.categories.create({"name": "Soft Drinks", "parent_id": 1})
    grandchild = store.categories.create({"name": "Cola", "parent_id": child.id})

    with pytest.raises(ValueError, match="ancestor"):
        store.categories.update(1, {"parent_id": 1})
    with pytest.raises(ValueError, match="ancestor"):
        store.categories.update(1, {"parent_id": grandchild.id})
    with pytest.raises(ValueError, match="ancestor"):
        store.categories.create({"name": "Loop", "parent_id": store.categories.next_id})

    assert store.categories.get(1).parent_id is None
    assert store.categories.update(grandchild.id, {"parent_id": 2}).parent_id == 2


def test_category_tree_nests_children(store):
    drinks = store.categories.create({"name": "Soft Drinks", "parent_id": 1})
    store.categories.create({"name": "Cola", "parent_id": drinks.id})
    store.categories.create({"name": "Orphan", "parent_id": 99})

    tree = store.categories.tree()
    roots = [node["name"] for node in tree]
    beverages = next(node for node in tree if node["id"] == 1)

    assert roots == sorted(roots, key=str.lower)
    assert "Orphan" in roots
    assert [child["name"] for child in beverages["children"]] == ["Soft Drinks"]
    assert beverages["children"][0]["children"][0]["name"] == "Cola"


def test_line_items_must_be_a_list_of_objects(store):
    with pytest.raises(ValidationError):
        store.orders.create({"client_id": 1, "items": 5})
    with pytest.raises(ValidationError):
        store.purchase_orders.create({"supplier_id": 1, "items": ["x"]})
    with pytest.raises(ValidationError):
        store.distribution_plans.create({"order_ids": 3})

    assert len(store.orders) == 7
    assert store.orders.next_id == 8
