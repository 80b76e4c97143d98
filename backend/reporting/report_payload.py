"""Machine-readable rendering of category reports."""

from __future__ import annotations

from typing import Any

from shared.models import CategoryReport


def render_report_payload(report: CategoryReport) -> CategoryReport:
    """Return the report unchanged for JSON transport."""
    return report


def render_compact_report_payload(report: CategoryReport) -> dict[str, Any]:
    """Return a JSON-ready payload listing only categories with expenses.

    The report keeps every category; only this display payload drops the
    empty ones.
    """

    payload = report.model_dump(mode="json")
    payload["categories"] = [
        summary.model_dump(mode="json") for summary in report.categories if summary.count > 0
    ]
    return payload
