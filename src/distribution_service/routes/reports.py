"""Report and export routes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from distribution_service.routing import Request, Router
from distribution_service.services import ExportBlob

if TYPE_CHECKING:
    from distribution_service.dispatcher import DataService

reports_router = Router(prefix="/reports", tags=["reports"])


@reports_router.get("/sales", summary="Sales report")
def sales_report(service: "DataService", request: Request) -> dict[str, Any]:
    return service.reports.sales(request.query)


@reports_router.get("/inventory", summary="Inventory report")
def inventory_report(service: "DataService", request: Request) -> dict[str, Any]:
    return service.reports.inventory(request.query)


@reports_router.get("/delivery-performance", summary="Delivery performance report")
def delivery_report(service: "DataService", request: Request) -> dict[str, Any]:
    return service.reports.delivery_performance(request.query)


reports_router.get("/delivery", summary="Delivery performance report")(delivery_report)


@reports_router.get("/financial", summary="Financial report")
def financial_report(service: "DataService", request: Request) -> dict[str, Any]:
    return service.reports.financial(request.query)


@reports_router.get("/export/{export_format:str}/{report_type:str}", summary="Export a report")
def export_report(service: "DataService", request: Request) -> ExportBlob:
    return service.exports.export(
        request.params["export_format"], request.params["report_type"], request.query
    )
