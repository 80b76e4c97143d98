"""Render category reports as XLSX workbooks."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from shared.errors import ReportRenderingError
from shared.models import CategoryReport


logger = logging.getLogger(__name__)

SHEET_TITLE = "Category Report"
REPORT_TITLE = "Expense Report by Category"
BREAKDOWN_HEADER = ("Category", "Total Amount", "Count", "Percentage")

AMOUNT_FORMAT = "#,##0.00"
PERCENT_FORMAT = "0.00%"
COLUMN_WIDTHS = {"A": 28, "B": 18, "C": 10, "D": 14}

TITLE_ROW = 1
PERIOD_ROW = 2
SUMMARY_HEADER_ROW = 4
TOTAL_ROW = 5
BREAKDOWN_TITLE_ROW = 7
BREAKDOWN_HEADER_ROW = 8
FIRST_DATA_ROW = 9
LAST_COLUMN = len(BREAKDOWN_HEADER)

TITLE_FG = "1F2937"
SECTION_BG = "4F81BD"
SECTION_FG = "FFFFFF"
HEADER_BG = "DCE6F1"
STRIPE_BG = "F2F2F2"
BORDER_COLOR = "BFBFBF"


def _fill(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


def percentage_of_total(total: Decimal, total_amount: Decimal) -> Decimal:
    """Return ``total`` as a fraction of ``total_amount``; zero when nothing was spent."""
    if total_amount == 0:
        return Decimal("0")
    return total / total_amount


def _merged_row(ws: Worksheet, row: int, value: str, *, font: Font, fill: PatternFill | None = None) -> None:
    ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=LAST_COLUMN)
    cell = ws.cell(row=row, column=1, value=value)
    cell.font = font
    cell.alignment = Alignment(horizontal="left", vertical="center")
    if fill is not None:
        cell.fill = fill


def _write_breakdown(ws: Worksheet, report: CategoryReport) -> int:
    for column, label in enumerate(BREAKDOWN_HEADER, start=1):
        cell = ws.cell(row=BREAKDOWN_HEADER_ROW, column=column, value=label)
        cell.font = Font(bold=True, color=TITLE_FG, size=10)
        cell.fill = _fill(HEADER_BG)
        cell.alignment = Alignment(horizontal="center", vertical="center")

    row = BREAKDOWN_HEADER_ROW
    data_index = 0
    for summary in report.categories:
        if summary.count == 0:
            continue
        row = FIRST_DATA_ROW + data_index
        ws.cell(row=row, column=1, value=summary.category.value)
        total_cell = ws.cell(row=row, column=2, value=summary.total)
        total_cell.number_format = AMOUNT_FORMAT
        ws.cell(row=row, column=3, value=summary.count)
        percent_cell = ws.cell(row=row, column=4, value=percentage_of_total(summary.total, report.total_amount))
        percent_cell.number_format = PERCENT_FORMAT

        if data_index % 2 == 1:
            for column in range(1, LAST_COLUMN + 1):
                ws.cell(row=row, column=column).fill = _fill(STRIPE_BG)
        for column in range(2, LAST_COLUMN + 1):
            ws.cell(row=row, column=column).alignment = Alignment(horizontal="right", vertical="center")
        data_index += 1
    return row


def _apply_borders(ws: Worksheet, first_row: int, last_row: int) -> None:
    thin = Side(style="thin", color=BORDER_COLOR)
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for row in ws.iter_rows(min_row=first_row, max_row=last_row, min_col=1, max_col=LAST_COLUMN):
        for cell in row:
            cell.border = border


def _build_workbook(report: CategoryReport, generated_on: str) -> Workbook:
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    _merged_row(ws, TITLE_ROW, REPORT_TITLE, font=Font(size=16, bold=True, color=TITLE_FG))
    _merged_row(
        ws,
        PERIOD_ROW,
        f"Period: {report.start_date} to {report.end_date}",
        font=Font(size=10, italic=True, color=TITLE_FG),
    )

    section_font = Font(size=12, bold=True, color=SECTION_FG)
    _merged_row(ws, SUMMARY_HEADER_ROW, "Summary", font=section_font, fill=_fill(SECTION_BG))
    ws.cell(row=TOTAL_ROW, column=1, value="Total Amount").font = Font(bold=True, size=10)
    total_cell = ws.cell(row=TOTAL_ROW, column=2, value=report.total_amount)
    total_cell.number_format = AMOUNT_FORMAT
    total_cell.font = Font(bold=True, size=11)
    total_cell.alignment = Alignment(horizontal="right", vertical="center")

    _merged_row(ws, BREAKDOWN_TITLE_ROW, "Category Breakdown", font=section_font, fill=_fill(SECTION_BG))
    last_row = _write_breakdown(ws, report)
    _apply_borders(ws, SUMMARY_HEADER_ROW, last_row)

    ws.cell(row=last_row + 2, column=1, value=f"Generated on {generated_on}").font = Font(
        size=8, italic=True, color="8A8F98"
    )

    for column_letter, width in COLUMN_WIDTHS.items():
        ws.column_dimensions[column_letter].width = width
    return wb


def render_category_report_xlsx(report: CategoryReport, *, generated_at: datetime | None = None) -> bytes:
    """Render ``report`` into an in-memory XLSX document."""

    generated_on = (generated_at or datetime.now(timezone.utc)).strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    buffer = BytesIO()
    try:
        _build_workbook(report, generated_on).save(buffer)
    except Exception as exc:
        logger.exception(
            "category_report_xlsx_failed start_date=%s end_date=%s",
            report.start_date,
            report.end_date,
        )
        raise ReportRenderingError("Failed to render category report spreadsheet") from exc

    content = buffer.getvalue()
    logger.info(
        "category_report_xlsx_rendered start_date=%s end_date=%s size_bytes=%s",
        report.start_date,
        report.end_date,
        len(content),
    )
    return content
