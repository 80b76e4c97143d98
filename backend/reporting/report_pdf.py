"""Render category reports as streamed PDF documents."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from io import BytesIO
from typing import Iterator

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen.canvas import Canvas
from reportlab.platypus import Flowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from shared import config
from shared.errors import ReportRenderingError
from shared.models import CategoryReport


logger = logging.getLogger(__name__)

REPORT_TITLE = "Expense Report by Category"
BREAKDOWN_HEADER = ["Category", "Total Amount", "Count"]


def format_amount(value: Decimal) -> str:
    return f"{value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):.2f}"


def format_generated_at(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def category_breakdown_rows(report: CategoryReport) -> list[list[str]]:
    """Return breakdown table rows (header first) for categories with expenses."""

    rows = [list(BREAKDOWN_HEADER)]
    for summary in report.categories:
        if summary.count == 0:
            continue
        rows.append([summary.category.value, format_amount(summary.total), str(summary.count)])
    return rows


class _FooterCanvas(Canvas):
    def __init__(self, *args, generated_on: str, **kwargs):
        super().__init__(*args, **kwargs)
        self._generated_on = generated_on
        self._saved_page_states: list[dict] = []

    def showPage(self) -> None:  # noqa: N802 (ReportLab API)
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self) -> None:
        page_count = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(page_count=page_count)
            super().showPage()
        super().save()

    def _draw_footer(self, *, page_count: int) -> None:
        self.setFont("Helvetica", 8)
        self.setFillColor(colors.HexColor("#8A8F98"))
        self.drawString(20 * mm, 10 * mm, f"Generated on {self._generated_on}")
        self.drawRightString(190 * mm, 10 * mm, f"Page {self._pageNumber}/{page_count}")


def _build_breakdown_table(report: CategoryReport) -> Table:
    table_data = category_breakdown_rows(report)
    table = Table(table_data, colWidths=[80 * mm, 50 * mm, 30 * mm], repeatRows=1)
    table_style: list[tuple] = [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#EEF1F4")),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#D7DCE2")),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]
    for row_index in range(1, len(table_data)):
        if row_index % 2 == 0:
            table_style.append(("BACKGROUND", (0, row_index), (-1, row_index), colors.HexColor("#FAFBFC")))
    table.setStyle(TableStyle(table_style))
    return table


def build_report_story(report: CategoryReport) -> list[Flowable]:
    """Lay out title, period, summary and breakdown, top to bottom."""

    styles = getSampleStyleSheet()
    section_title_style = ParagraphStyle(name="SectionTitle", parent=styles["Heading2"], spaceAfter=4, fontSize=12)

    story: list[Flowable] = [
        Paragraph(REPORT_TITLE, styles["Title"]),
        Spacer(1, 1 * mm),
        Paragraph(f"Period: {report.start_date} to {report.end_date}", styles["BodyText"]),
        Spacer(1, 6 * mm),
        Paragraph("Summary", section_title_style),
        Paragraph(f"Total Amount: {format_amount(report.total_amount)}", styles["BodyText"]),
        Spacer(1, 6 * mm),
        Paragraph("Category Breakdown", section_title_style),
        Spacer(1, 1 * mm),
    ]
    if len(category_breakdown_rows(report)) == 1:
        story.append(Paragraph("No expenses in this period.", styles["BodyText"]))
    else:
        story.append(_build_breakdown_table(report))
    return story


def _write_document(buffer: BytesIO, report: CategoryReport, generated_on: str) -> None:
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=16 * mm,
        leftMargin=16 * mm,
        topMargin=16 * mm,
        bottomMargin=14 * mm,
        title=REPORT_TITLE,
    )
    doc.build(
        build_report_story(report),
        canvasmaker=lambda *args, **kwargs: _FooterCanvas(*args, generated_on=generated_on, **kwargs),
    )


def _iter_chunks(buffer: BytesIO, chunk_size: int) -> Iterator[bytes]:
    try:
        buffer.seek(0)
        while True:
            chunk = buffer.read(chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        buffer.close()


def stream_category_report_pdf(
    report: CategoryReport,
    *,
    generated_at: datetime | None = None,
    chunk_size: int | None = None,
) -> Iterator[bytes]:
    """Render ``report`` and return an iterator over the PDF bytes.

    The document is fully composed before the iterator is returned, so a
    failure raises ``ReportRenderingError`` instead of yielding a truncated
    PDF. Closing the iterator early releases the buffer.
    """

    generated_on = format_generated_at(generated_at or datetime.now(timezone.utc))
    size = chunk_size or config.report_pdf_chunk_size()
    buffer = BytesIO()
    try:
        _write_document(buffer, report, generated_on)
    except Exception as exc:
        buffer.close()
        logger.exception(
            "category_report_pdf_failed start_date=%s end_date=%s",
            report.start_date,
            report.end_date,
        )
        raise ReportRenderingError("Failed to render category report PDF") from exc

    logger.info(
        "category_report_pdf_rendered start_date=%s end_date=%s size_bytes=%s",
        report.start_date,
        report.end_date,
        buffer.tell(),
    )
    return _iter_chunks(buffer, size)


def render_category_report_pdf(report: CategoryReport, *, generated_at: datetime | None = None) -> bytes:
    return b"".join(stream_category_report_pdf(report, generated_at=generated_at))
