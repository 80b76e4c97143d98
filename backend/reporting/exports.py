"""Transport metadata for downloadable report documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator


PDF_MEDIA_TYPE = "application/pdf"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass(slots=True)
class ReportDocument:
    """A rendered report tagged with its media type and download name."""

    media_type: str
    filename: str
    content: Iterator[bytes] | bytes

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'

    def close(self) -> None:
        """Release a streamed body; safe to call after it was fully consumed."""
        close = getattr(self.content, "close", None)
        if close is not None:
            close()


def report_filename(start_date: str, end_date: str, extension: str) -> str:
    return f"expense-report-{start_date}-to-{end_date}.{extension}"
