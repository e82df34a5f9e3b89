"""Aggregation services over the entity store."""

from distribution_service.services.analytics_service import AnalyticsService
from distribution_service.services.export_service import ExportBlob, ExportService
from distribution_service.services.report_service import ReportService

__all__ = ["AnalyticsService", "ExportBlob", "ExportService", "ReportService"]
