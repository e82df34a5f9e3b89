"""Purchase order and goods receipt routes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, TypeAdapter

from distribution_service.logging import logger
from distribution_service.models import PurchaseOrderStatus, RecordId, today
from distribution_service.routes.common import crud_routes, dump
from distribution_service.routes.inventory import stock_in
from distribution_service.routing import Request, Router

if TYPE_CHECKING:
    from distribution_service.dispatcher import DataService

purchase_orders_router = Router(prefix="/purchase-orders", tags=["purchasing"])

DEFAULT_WAREHOUSE_ID = "1"


class ReceivedLine(BaseModel):
    """One received line; ``quantity`` is read when ``quantity_received`` is absent."""
    product_id: RecordId
    quantity_received: Optional[float] = None
    quantity: Optional[float] = None

    @property
    def received(self) -> float:
        value = self.quantity_received if self.quantity_received is not None else self.quantity
        return value or 0


_RECEIVED_LINES = TypeAdapter(list[ReceivedLine])


@purchase_orders_router.post("/{po_id}/receive", summary="Receive goods against a purchase order")
def receive_goods(service: "DataService", request: Request) -> dict[str, Any]:
    """Book received quantities into inventory and advance the purchase order.

    Without ``items`` in the body every outstanding quantity is received. The
    inventory updates and the status change are persisted together or not at all.
    """
    store = service.store
    po = store.purchase_orders.get(request.params["po_id"])
    if po is None:
        return {"success": False, "message": "Purchase order not found"}

    warehouse_id = str(request.body.get("warehouse_id") or DEFAULT_WAREHOUSE_ID)
    requested = {
        str(line.product_id): line.received
        for line in _RECEIVED_LINES.validate_python(request.body.get("items") or [])
    }

    touched = []
    with store.unit_of_work():
        items = []
        complete = True
        for item in po.items:
            line = item.model_dump()
            already = float(line.get("received_quantity") or 0)
            outstanding = item.quantity - already
            quantity = requested.get(str(item.product_id), 0) if requested else outstanding
            if quantity:
                touched.append(stock_in(store, item.product_id, warehouse_id, quantity, item.unit_price))
            line["received_quantity"] = already + quantity
            complete = complete and line["received_quantity"] >= item.quantity
            items.append(line)

        status = PurchaseOrderStatus.RECEIVED if complete else PurchaseOrderStatus.PARTIAL
        po = store.purchase_orders.update(po.id, {
            "items": items,
            "status": status.value,
            "received_date": today(),
        })

    logger.info("Goods received", po_number=po.po_number, status=po.status, warehouse_id=warehouse_id)
    return {
        "success": True,
        "message": "Goods received successfully",
        "purchase_order": dump(po),
        "inventory": [dump(record) for record in touched],
    }


crud_routes(purchase_orders_router, "purchase_orders", "purchase_order", "purchase_orders", "po_id")
