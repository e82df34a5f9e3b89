"""Inventory, stock alert and stock movement routes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, Field

from distribution_service.logging import logger
from distribution_service.models import InventoryRecord
from distribution_service.repositories import EntityStore, same_id
from distribution_service.routes.common import crud_routes, dump
from distribution_service.routing import Request, Router

if TYPE_CHECKING:
    from distribution_service.dispatcher import DataService

inventory_router = Router(prefix="/inventory", tags=["inventory"])


class StockAdjustmentRequest(BaseModel):
    """Signed correction of one product's stock in one warehouse."""
    product_id: int
    warehouse_id: str
    adjustment_quantity: int
    reason: Optional[str] = None
    notes: Optional[str] = None


class StockTransferRequest(BaseModel):
    """Move units of one product between two warehouses."""
    product_id: int
    from_warehouse_id: str
    to_warehouse_id: str
    quantity: int = Field(gt=0)
    notes: Optional[str] = None


def find_stock(store: EntityStore, product_id: Any, warehouse_id: Any) -> Optional[InventoryRecord]:
    for record in store.inventory:
        if same_id(record.product_id, product_id) and same_id(record.warehouse_id, warehouse_id):
            return record
    return None


def stock_in(store: EntityStore, product_id: Any, warehouse_id: str, quantity: float, unit_cost: float):
    """Add units to the matching inventory record, creating it when missing."""
    record = find_stock(store, product_id, warehouse_id)
    if record is not None:
        return store.inventory.update(record.id, {"quantity": record.quantity + int(quantity)})

    product = store.products.get(product_id)
    return store.inventory.create({
        "product_id": product_id,
        "warehouse_id": warehouse_id,
        "quantity": int(quantity),
        "unit_cost": unit_cost,
        "reorder_level": product.reorder_level if product is not None else 0,
    })


@inventory_router.get("/transactions", summary="Stock movements")
def list_transactions(service: "DataService", request: Request) -> dict[str, Any]:
    transactions = service.analytics.inventory_transactions(request.query.get("type"))
    return {"transactions": transactions, "total": len(transactions)}


@inventory_router.get("/alerts", summary="Low and out-of-stock alerts")
def list_alerts(service: "DataService", request: Request) -> dict[str, Any]:
    alerts = service.analytics.stock_alerts()
    return {"alerts": alerts, "total": len(alerts)}


@inventory_router.put("/alerts/{alert_id}", summary="Acknowledge an alert")
def acknowledge_alert(service: "DataService", request: Request) -> dict[str, Any]:
    # alerts are recomputed on every read, there is nothing to store
    return {"success": True}


@inventory_router.post("/adjust", summary="Correct the stock of one product")
def adjust_stock(service: "DataService", request: Request) -> dict[str, Any]:
    payload = StockAdjustmentRequest.model_validate(request.body)
    store = service.store
    record = find_stock(store, payload.product_id, payload.warehouse_id)
    if record is None:
        return {"success": False, "message": "Inventory record not found"}

    previous = record.quantity
    quantity = previous + payload.adjustment_quantity
    if quantity < 0:
        return {"success": False, "message": "Adjustment would result in negative inventory"}

    with store.unit_of_work():
        record = store.inventory.update(record.id, {"quantity": quantity})
        store.stock_movements.create({
            "inventory_id": record.id,
            "product_id": payload.product_id,
            "warehouse_id": payload.warehouse_id,
            "type": "adjustment",
            "quantity": payload.adjustment_quantity,
            "notes": payload.notes or payload.reason,
        })

    logger.info("Stock adjusted", inventory_id=record.id, previous=previous, quantity=quantity)
    return {
        "success": True,
        "item": dump(record),
        "adjustment": payload.adjustment_quantity,
        "previous_quantity": previous,
    }


@inventory_router.post("/transfer", summary="Move stock between warehouses")
def transfer_stock(service: "DataService", request: Request) -> dict[str, Any]:
    """Deduct from the source record and add to the destination in one unit of work."""
    payload = StockTransferRequest.model_validate(request.body)
    if same_id(payload.from_warehouse_id, payload.to_warehouse_id):
        return {"success": False, "message": "Source and destination warehouse are the same"}

    store = service.store
    source = find_stock(store, payload.product_id, payload.from_warehouse_id)
    if source is None:
        return {"success": False, "message": "Source inventory not found"}
    if source.available < payload.quantity:
        return {
            "success": False,
            "message": f"Insufficient inventory for transfer. Available: {source.available}",
        }

    with store.unit_of_work():
        source = store.inventory.update(source.id, {"quantity": source.quantity - payload.quantity})
        destination = stock_in(store, payload.product_id, payload.to_warehouse_id, payload.quantity, source.unit_cost)
        reference = f"TRF-{source.id}-{destination.id}"
        for record, kind, quantity in (
            (source, "transfer_out", -payload.quantity),
            (destination, "transfer_in", payload.quantity),
        ):
            store.stock_movements.create({
                "inventory_id": record.id,
                "product_id": payload.product_id,
                "warehouse_id": record.warehouse_id,
                "type": kind,
                "quantity": quantity,
                "reference": reference,
                "notes": payload.notes,
            })

    logger.info(
        "Stock transferred",
        product_id=payload.product_id,
        from_warehouse=payload.from_warehouse_id,
        to_warehouse=payload.to_warehouse_id,
        quantity=payload.quantity,
    )
    return {"success": True, "source": dump(source), "destination": dump(destination)}


crud_routes(inventory_router, "inventory", "item", "inventory", "inventory_id")
