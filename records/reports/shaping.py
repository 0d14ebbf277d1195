"""Result shaping for tabular display and charting."""
from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from decimal import Decimal

from .builder import ReportDefinition


def _plain(value):
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return value


@dataclass
class ReportResult:
    report: ReportDefinition
    rows: list[list] = field(default_factory=list)

    def __post_init__(self):
        width = len(self.report.headers)
        shaped = []
        for row in self.rows:
            row = [_plain(value) for value in row]
            if len(row) != width:
                raise ValueError(
                    f"Report {self.report.slug!r} returned {len(row)} fields for {width} headers"
                )
            shaped.append(row)
        self.rows = shaped

    @property
    def headers(self) -> list[str]:
        return list(self.report.headers)

    @property
    def columns(self) -> list[str]:
        return list(self.report.columns)

    def __len__(self) -> int:
        return len(self.rows)

    def records(self) -> list[dict]:
        columns = self.report.columns
        return [dict(zip(columns, row)) for row in self.rows]

    def rounded(self, decimals: int | None) -> list[list]:
        """Rows with float cells rounded for fixed decimal display."""

        if decimals is None:
            return [list(row) for row in self.rows]
        return [
            [round(value, decimals) if isinstance(value, float) else value for value in row]
            for row in self.rows
        ]

    def chart(self) -> dict | None:
        hint = self.report.chart
        if hint is None:
            return None
        labels = []
        values = []
        for row in self.rows:
            labels.append(
                " ".join("N/A" if row[index] is None else str(row[index]) for index in hint.label_indices)
            )
            values.append(_chart_value(row[hint.value_index]))
        return {
            "type": hint.kind,
            "label": self.report.headers[hint.value_index],
            "labels": labels,
            "values": values,
        }

    def as_payload(self, decimals: int | None = None) -> dict:
        return {
            "report": self.report.name,
            "slug": self.report.slug,
            "headers": self.headers,
            "columns": self.columns,
            "rows": self.rounded(decimals),
            "chart": self.chart(),
        }


def _chart_value(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def describe(report: ReportDefinition) -> dict:
    """Catalogue entry for a report definition."""

    chart = None
    if report.chart is not None:
        chart = {
            "type": report.chart.kind,
            "labelIndices": list(report.chart.label_indices),
            "valueIndex": report.chart.value_index,
        }
    return {
        "slug": report.slug,
        "name": report.name,
        "description": report.description,
        "headers": list(report.headers),
        "chart": chart,
        "filters": list(report.filter_names),
    }
