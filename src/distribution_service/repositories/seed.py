"""Static fixture data the store starts from."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from distribution_service.models import (
    Category,
    Client,
    Delivery,
    DistributionPlan,
    InventoryRecord,
    LineItem,
    Order,
    Product,
    PurchaseOrder,
    Snapshot,
    Supplier,
    User,
    Warehouse,
)

DELIVERY_ROUTES = [
    {"id": 1, "name": "North Route - San Fernando", "driver": "Pedro Reyes", "vehicle": "Truck A - ABC 123", "stops": 5, "status": "active", "distance": 45},
    {"id": 2, "name": "South Route - Bauang", "driver": "Juan Santos", "vehicle": "Truck B - XYZ 456", "stops": 4, "status": "active", "distance": 38},
    {"id": 3, "name": "East Route - Naguilian", "driver": "Mario Cruz", "vehicle": "Van C - DEF 789", "stops": 6, "status": "inactive", "distance": 52},
]

# Shown when there are no orders to rank yet.
FALLBACK_TOP_PRODUCTS = [
    {"name": "Coca-Cola 1.5L", "quantity": 1250, "revenue": 68750},
    {"name": "Century Tuna 180g", "quantity": 980, "revenue": 41160},
    {"name": "Tide Powder 2kg", "quantity": 320, "revenue": 68800},
    {"name": "Piattos Cheese 85g", "quantity": 850, "revenue": 25500},
    {"name": "Safeguard Soap 135g", "quantity": 720, "revenue": 34560},
]

FALLBACK_DRIVERS = [
    {"name": "Pedro Reyes", "total": 18, "delivered": 17, "failed": 1, "success_rate": 94.4},
    {"name": "Juan Santos", "total": 15, "delivered": 14, "failed": 1, "success_rate": 93.3},
]


def _day(offset: int) -> str:
    return (date.today() - timedelta(days=offset)).isoformat()


def _snap(record) -> Snapshot:
    return Snapshot.capture(record, exclude={"password"})


def build_seed_graph() -> dict[str, Any]:
    """Return a fresh default entity graph in the persisted layout."""
    users = [
        User(id="1", email="admin@tresmarias.ph", password="admin123", name="System Administrator",
             first_name="System", last_name="Administrator", username="admin", role="admin",
             permissions={"all": True}),
        User(id="2", email="manager@tresmarias.ph", password="manager123", name="Juan Dela Cruz",
             first_name="Juan", last_name="Dela Cruz", username="jdelacruz", role="manager", warehouse_id="1",
             permissions={"inventory": True, "orders": True, "reports": True}),
        User(id="3", email="sales@tresmarias.ph", password="sales123", name="Maria Santos",
             first_name="Maria", last_name="Santos", username="msantos", role="sales", warehouse_id="1",
             permissions={"orders": True, "clients": True}),
    ]

    warehouses = [
        Warehouse(id="1", code="WH-MAIN", name="Tres Marias Main Warehouse", address="123 MacArthur Highway",
                  city="San Fernando City", province="La Union", capacity=10000),
        Warehouse(id="2", code="WH-NORTH", name="Northern Distribution Center", address="456 National Road",
                  city="Vigan City", province="Ilocos Sur", capacity=5000),
    ]

    categories = [
        Category(id=1, name="Beverages", description="Soft drinks, juices, water", product_count=45),
        Category(id=2, name="Snacks", description="Chips, crackers, cookies", product_count=78),
        Category(id=3, name="Canned Goods", description="Canned meat, fish, vegetables", product_count=56),
        Category(id=4, name="Condiments", description="Sauces, vinegar, seasonings", product_count=34),
        Category(id=5, name="Personal Care", description="Soap, shampoo, toiletries", product_count=42),
        Category(id=6, name="Household", description="Cleaning supplies, detergents", product_count=28),
    ]

    product_rows = [
        (1, "BEV-001", "Coca-Cola 1.5L", 1, "bottle", 45, 55, 100),
        (2, "BEV-002", "Sprite 1.5L", 1, "bottle", 45, 55, 100),
        (3, "BEV-003", "Royal 500ml", 1, "bottle", 18, 25, 200),
        (4, "SNK-001", "Piattos Cheese 85g", 2, "pack", 22, 30, 150),
        (5, "SNK-002", "Nova Country Cheddar 78g", 2, "pack", 20, 28, 150),
        (6, "CAN-001", "Century Tuna Flakes 180g", 3, "can", 32, 42, 200),
        (7, "CAN-002", "Argentina Corned Beef 260g", 3, "can", 55, 68, 150),
        (8, "CON-001", "Silver Swan Soy Sauce 1L", 4, "bottle", 45, 58, 100),
        (9, "PER-001", "Safeguard Soap 135g", 5, "piece", 38, 48, 200),
        (10, "HOU-001", "Tide Powder 2kg", 6, "pack", 180, 215, 50),
    ]
    products = [
        Product(id=pid, sku=sku, name=name, category_id=cid, category=_snap(categories[cid - 1]), unit=unit,
                cost_price=cost, unit_price=price, reorder_level=reorder)
        for pid, sku, name, cid, unit, cost, price, reorder in product_rows
    ]

    clients = [
        Client(id=1, business_name="Sari-Sari Store ni Aling Nena", contact_person="Nena Cruz", email="nena@email.com",
               phone="+63 917 111 2222", address="123 Rizal St, San Fernando", city="San Fernando City",
               province="La Union", pricing_tier="Regular", credit_limit=10000, current_balance=2500),
        Client(id=2, business_name="JM Grocery & Gen. Mdse.", contact_person="Jose Martinez",
               email="jm.grocery@email.com", phone="+63 918 222 3333", address="456 Quezon Ave, Bauang",
               city="Bauang", province="La Union", pricing_tier="Wholesale", credit_limit=50000,
               current_balance=15000),
        Client(id=3, business_name="Northpoint Supermarket", contact_person="Anna Reyes", email="northpoint@email.com",
               phone="+63 919 333 4444", address="789 National Highway, San Juan", city="San Juan",
               province="La Union", pricing_tier="Distributor", credit_limit=200000, current_balance=45000),
        Client(id=4, business_name="Barangay Store Express", contact_person="Pedro Santos",
               email="pedro.santos@email.com", phone="+63 920 444 5555", address="321 Mabini St, Agoo",
               city="Agoo", province="La Union", pricing_tier="Regular", credit_limit=15000, current_balance=0),
        Client(id=5, business_name="Metro Fresh Mart", contact_person="Linda Tan", email="metrofresh@email.com",
               phone="+63 921 555 6666", address="654 Governor Luna St, San Fernando", city="San Fernando City",
               province="La Union", pricing_tier="VIP", credit_limit=100000, current_balance=28000),
    ]

    suppliers = [
        Supplier(id=1, name="Coca-Cola Bottlers Phils.", contact_person="Roberto Cruz", email="rcola@supplier.com",
                 phone="+63 2 888 1111", address="SLEX Industrial Park, Laguna", payment_terms=30),
        Supplier(id=2, name="Universal Robina Corp.", contact_person="Maria Lopez", email="urc@supplier.com",
                 phone="+63 2 888 2222", address="Pasig City, Metro Manila", payment_terms=45),
        Supplier(id=3, name="Century Pacific Food Inc.", contact_person="John Reyes", email="century@supplier.com",
                 phone="+63 2 888 3333", address="Taguig City, Metro Manila", payment_terms=30),
        Supplier(id=4, name="Procter & Gamble Phils.", contact_person="Sarah Tan", email="pg@supplier.com",
                 phone="+63 2 888 4444", address="Makati City, Metro Manila", payment_terms=30),
    ]

    def line(product_id: int, quantity: int, price_field: str = "unit_price") -> LineItem:
        product = products[product_id - 1]
        return LineItem(product_id=product_id, product=_snap(product), quantity=quantity,
                        unit_price=getattr(product, price_field))

    order_rows = [
        (1, 1, "delivered", 6, 5, [(1, 50), (4, 100)]),
        (2, 2, "processing", 5, 3, [(6, 200), (7, 150)]),
        (3, 3, "confirmed", 4, 2, [(2, 300), (10, 100)]),
        (4, 5, "confirmed", 4, 2, [(3, 400), (8, 150)]),
        (5, 4, "processing", 3, 1, [(5, 100), (9, 100)]),
        (6, 1, "confirmed", 3, 1, [(1, 100), (6, 150)]),
        (7, 2, "processing", 3, 0, [(7, 200), (10, 60)]),
    ]
    orders = []
    for oid, cid, status, age, lead, lines in order_rows:
        items = [line(pid, qty) for pid, qty in lines]
        orders.append(Order(
            id=oid, order_number=f"ORD-{date.today().year}-{oid:04d}", client_id=cid,
            client=_snap(clients[cid - 1]), items=items, status=status,
            total_amount=sum(item.line_total for item in items),
            order_date=_day(age), delivery_date=_day(lead),
        ))
    orders.reverse()

    inventory_rows = [
        (1, 450, "A-01-01"), (2, 380, "A-01-02"), (3, 720, "A-02-01"), (4, 85, "B-01-01"),
        (5, 120, "B-01-02"), (6, 340, "C-01-01"), (7, 45, "C-01-02"), (8, 180, "D-01-01"),
        (9, 520, "E-01-01"), (10, 65, "F-01-01"),
    ]
    inventory = [
        InventoryRecord(id=pid, product_id=pid, product=_snap(products[pid - 1]), warehouse_id="1",
                        warehouse=_snap(warehouses[0]), quantity=qty, unit_cost=products[pid - 1].cost_price,
                        location=location, reorder_level=products[pid - 1].reorder_level)
        for pid, qty, location in inventory_rows
    ]

    by_id = {o.id: o for o in orders}
    deliveries = [
        Delivery(id=1, delivery_number=f"DEL-{date.today().year}-0001", order_id=1, order=_snap(by_id[1]),
                 status="delivered", scheduled_date=f"{_day(5)}T09:00:00", driver_name="Pedro Reyes",
                 delivery_address="123 Rizal St, San Fernando", delivered_at=f"{_day(5)}T11:30:00"),
        Delivery(id=2, delivery_number=f"DEL-{date.today().year}-0002", order_id=2, order=_snap(by_id[2]),
                 status="in-transit", scheduled_date=f"{_day(0)}T08:00:00", driver_name="Juan Santos",
                 delivery_address="456 Quezon Ave, Bauang"),
        Delivery(id=3, delivery_number=f"DEL-{date.today().year}-0003", order_id=4, order=_snap(by_id[4]),
                 status="assigned", scheduled_date=f"{_day(-1)}T10:00:00", driver_name="Pedro Reyes",
                 delivery_address="654 Governor Luna St, San Fernando"),
    ]

    po_rows = [
        (1, 1, "received", 10, [(1, 1000), (2, 800)]),
        (2, 2, "approved", 2, [(4, 1500), (5, 1200)]),
        (3, 3, "pending", 1, [(6, 600), (7, 300)]),
    ]
    purchase_orders = []
    for pid, sid, status, age, lines in po_rows:
        items = [line(product_id, qty, "cost_price") for product_id, qty in lines]
        purchase_orders.append(PurchaseOrder(
            id=pid, po_number=f"PO-{date.today().year}-{pid:04d}", supplier_id=sid,
            supplier=_snap(suppliers[sid - 1]), items=items, status=status,
            total_amount=sum(item.line_total for item in items), order_date=_day(age),
            expected_date=_day(age - 7),
        ))
    purchase_orders.reverse()

    year = date.today().year
    plans = [
        DistributionPlan(id=4, plan_number=f"DP-{year}-004", status="draft", order_ids=[7],
                         total_value=by_id[7].total_amount, created_at=_day(0), deliveries_count=1, items_count=2),
        DistributionPlan(id=3, plan_number=f"DP-{year}-003", status="approved", order_ids=[3, 4, 6],
                         total_value=sum(by_id[i].total_amount for i in (3, 4, 6)), created_at=_day(1),
                         deliveries_count=3, items_count=6),
        DistributionPlan(id=2, plan_number=f"DP-{year}-002", status="executing", order_ids=[2, 5],
                         total_value=sum(by_id[i].total_amount for i in (2, 5)), created_at=_day(3),
                         deliveries_count=2, items_count=4),
        DistributionPlan(id=1, plan_number=f"DP-{year}-001", status="completed", order_ids=[1],
                         total_value=by_id[1].total_amount, created_at=_day(6), completed_at=_day(5),
                         deliveries_count=1, items_count=2),
    ]

    collections = {
        "distribution_plans": plans,
        "products": products,
        "categories": categories,
        "clients": clients,
        "suppliers": suppliers,
        "orders": orders,
        "purchase_orders": purchase_orders,
        "inventory": inventory,
        "stock_movements": [],
        "deliveries": deliveries,
        "warehouses": warehouses,
        "users": users,
    }
    return {
        "collections": {
            name: [record.model_dump(mode="json") for record in records]
            for name, records in collections.items()
        },
        "next_ids": {name: len(records) + 1 for name, records in collections.items()},
    }


__all__ = ["DELIVERY_ROUTES", "FALLBACK_DRIVERS", "FALLBACK_TOP_PRODUCTS", "build_seed_graph"]
