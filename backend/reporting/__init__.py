"""Category report aggregation and document renderers."""

from backend.reporting.category_report import aggregate_expenses_by_category, build_category_report
from backend.reporting.exports import PDF_MEDIA_TYPE, XLSX_MEDIA_TYPE, ReportDocument, report_filename
from backend.reporting.report_payload import render_compact_report_payload, render_report_payload
from backend.reporting.report_pdf import render_category_report_pdf, stream_category_report_pdf
from backend.reporting.report_xlsx import render_category_report_xlsx

__all__ = [
    "PDF_MEDIA_TYPE",
    "XLSX_MEDIA_TYPE",
    "ReportDocument",
    "aggregate_expenses_by_category",
    "build_category_report",
    "render_category_report_pdf",
    "render_category_report_xlsx",
    "render_compact_report_payload",
    "render_report_payload",
    "report_filename",
    "stream_category_report_pdf",
]
