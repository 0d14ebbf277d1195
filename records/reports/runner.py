"""Execute report definitions against the database."""
from __future__ import annotations

import logging
from typing import Mapping

from django.db import connection
from django.utils import timezone

from records.models import Semester

from .builder import ReportDefinition, build_query, is_unconstrained
from .definitions import get_report
from .semesters import WINTER_LAST, most_recent, parse_semester_label
from .shaping import ReportResult

logger = logging.getLogger(__name__)


def resolve_semester_id(value) -> int | None:
    """Resolve a semester id or a ``"Fall2024"`` label to a semester id."""

    if is_unconstrained(value):
        return None
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    parsed = parse_semester_label(text)
    if parsed is None:
        logger.debug("Ignoring unparseable semester filter %r", value)
        return None
    season, year = parsed
    semester_id = (
        Semester.objects.filter(season=season, year=year).values_list("id", flat=True).first()
    )
    if semester_id is None:
        logger.info("Semester %s%s not found; report will not be filtered by semester", season, year)
    return semester_id


def resolve_filters(report: ReportDefinition, raw: Mapping | None) -> dict:
    """Copy the report's filters out of ``raw``, resolving semester labels."""

    raw = raw or {}
    resolved: dict = {}
    for spec in report.filters:
        value = spec.raw_value(raw)
        if value is None:
            continue
        if spec.kind == "semester":
            value = resolve_semester_id(value)
            if value is None:
                continue
        resolved[spec.name] = value
    return resolved


def recent_semester_ids(count: int, winter: str = WINTER_LAST) -> list[int]:
    semesters = Semester.objects.values("id", "year", "season")
    return [semester["id"] for semester in most_recent(semesters, count, winter=winter)]


def run_report(key, filters: Mapping | None = None, *, current_year: int | None = None) -> ReportResult:
    """Build and execute a report, returning its rows in header order.

    Every call re-queries the database. Database errors propagate to the
    caller untouched.
    """

    report = key if isinstance(key, ReportDefinition) else get_report(key)
    resolved = resolve_filters(report, filters)

    window = None
    if report.semester_window is not None:
        window = recent_semester_ids(report.semester_window.size, report.winter)
    if current_year is None:
        current_year = timezone.now().year

    query = build_query(report, resolved, current_year=current_year, recent_semester_ids=window)
    if query.empty:
        logger.debug("Report %s has no semesters in its window; returning no rows", report.slug)
        return ReportResult(report, [])

    logger.debug("Running report %s: %s params=%s", report.slug, query.sql, query.params)
    with connection.cursor() as cursor:
        cursor.execute(query.sql, list(query.params))
        rows = [list(row) for row in cursor.fetchall()]
    return ReportResult(report, rows)
