"""Report exports as downloadable byte blobs."""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from distribution_service.services.report_service import ReportService

# format -> (content type, file extension); spreadsheet formats share the CSV body
FORMATS = {
    "csv": ("text/csv", "csv"),
    "excel": ("application/vnd.ms-excel", "csv"),
    "pdf": ("text/plain", "txt"),
}

# the tabular section written under each report's summary
TABLE_SECTIONS = {
    "sales": "daily_sales",
    "inventory": "low_stock_items",
    "delivery": "driver_performance",
    "delivery-performance": "driver_performance",
    "financial": "trend",
}


@dataclass(frozen=True)
class ExportBlob:
    filename: str
    content_type: str
    content: bytes


class ExportService:
    def __init__(self, reports: ReportService):
        self.reports = reports

    def export(self, export_format: str, report_type: str, filters: Optional[Mapping[str, Any]] = None) -> ExportBlob:
        """Render a report; unknown formats still get a CSV body."""
        data = self.reports.build(report_type, filters)
        summary = data.get("summary") or {}
        rows = data.get(TABLE_SECTIONS.get(report_type, ""), [])

        content_type, extension = FORMATS.get(export_format, ("application/octet-stream", "csv"))
        if export_format == "pdf":
            body = self._to_text(report_type, summary, rows)
        else:
            body = self._to_csv(summary, rows)
        return ExportBlob(
            filename=f"{report_type}-report-{date.today().isoformat()}.{extension}",
            content_type=content_type,
            content=body.encode("utf-8"),
        )

    @staticmethod
    def _to_csv(summary: Dict[str, Any], rows: List[Dict[str, Any]]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(["metric", "value"])
        for key, value in summary.items():
            writer.writerow([key, value])
        if rows:
            writer.writerow([])
            table = csv.DictWriter(buffer, fieldnames=list(rows[0]), extrasaction="ignore")
            table.writeheader()
            table.writerows(rows)
        return buffer.getvalue()

    @staticmethod
    def _to_text(report_type: str, summary: Dict[str, Any], rows: List[Dict[str, Any]]) -> str:
        title = f"{report_type.replace('-', ' ').title()} Report"
        lines = [title, "=" * len(title), ""]
        lines.extend(f"{key.replace('_', ' ').title()}: {value}" for key, value in summary.items())
        if rows:
            lines.append("")
            columns = list(rows[0])
            lines.append("\t".join(columns))
            lines.extend("\t".join(str(row.get(column, "")) for column in columns) for row in rows)
        return "\n".join(lines) + "\n"


__all__ = ["ExportBlob", "ExportService"]
