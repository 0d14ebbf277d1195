"""Declarative report definitions and the parameterized query builder.

A :class:`ReportDefinition` fixes everything about a report's SQL except the
caller's filters: the select list, the join, GROUP BY/ORDER BY and any
HAVING predicates. Caller values only ever reach the database as bound
parameters; the builder turns each present filter into a :class:`Condition`
and appends it to the WHERE or HAVING clause its :class:`FilterSpec` names.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

from django.utils import timezone

from .semesters import WINTER_LAST

WHERE = "WHERE"
HAVING = "HAVING"

ALL_SENTINEL = "all"

FILTER_KINDS = ("str", "int", "float", "semester")


class UnknownReport(KeyError):
    """Raised when a report slug or name is not in the catalogue."""


def is_unconstrained(value) -> bool:
    """True for values that mean "no constraint on this dimension"."""

    if value is None:
        return True
    text = str(value).strip()
    return not text or text.lower() == ALL_SENTINEL


@dataclass(frozen=True)
class FilterSpec:
    name: str
    column: str
    clause: str = WHERE
    kind: str = "str"
    operator: str = "="
    default: Any = None
    aliases: tuple[str, ...] = ()

    def __post_init__(self):
        if self.clause not in (WHERE, HAVING):
            raise ValueError(f"Unknown clause {self.clause!r} for filter {self.name!r}")
        if self.kind not in FILTER_KINDS:
            raise ValueError(f"Unknown filter kind {self.kind!r} for filter {self.name!r}")

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)

    def raw_value(self, raw: Mapping) -> Any:
        for key in self.names:
            if key in raw:
                value = raw.get(key)
                if value is not None:
                    return value
        return None

    def coerce(self, value) -> Any:
        """Convert a raw value, returning ``None`` when it cannot be used."""

        if is_unconstrained(value):
            return None
        text = str(value).strip()
        try:
            if self.kind in ("int", "semester"):
                return int(text)
            if self.kind == "float":
                number = float(text)
                return number if math.isfinite(number) else None
        except (TypeError, ValueError):
            return None
        return text

    def condition(self, value) -> "Condition":
        return Condition(f"{self.column} {self.operator} %s", (value,))


@dataclass(frozen=True)
class Condition:
    predicate: str
    params: tuple = ()


@dataclass(frozen=True)
class YearFilter:
    """Constrain ``column`` relative to the current calendar year."""

    column: str
    operator: str
    offset: int = 0

    def condition(self, current_year: int) -> Condition:
        return Condition(f"{self.column} {self.operator} %s", (current_year - self.offset,))


@dataclass(frozen=True)
class SemesterWindow:
    """Restrict a report to the ``size`` most recent semesters.

    ``predicate`` holds a ``{placeholders}`` marker that is replaced by one
    ``%s`` per semester id.
    """

    size: int
    predicate: str

    def condition(self, semester_ids) -> Condition:
        placeholders = ", ".join(["%s"] * len(semester_ids))
        return Condition(self.predicate.format(placeholders=placeholders), tuple(semester_ids))


@dataclass(frozen=True)
class ChartHint:
    kind: str
    label_indices: tuple[int, ...]
    value_index: int


@dataclass(frozen=True)
class ReportDefinition:
    slug: str
    name: str
    headers: tuple[str, ...]
    select: tuple[tuple[str, str], ...]
    from_clause: str
    filters: tuple[FilterSpec, ...] = ()
    where: tuple[str, ...] = ()
    group_by: tuple[str, ...] = ()
    having: tuple[str, ...] = ()
    order_by: tuple[str, ...] = ()
    limit: int | None = None
    unlimited_when: tuple[str, ...] = ()
    year_filter: YearFilter | None = None
    semester_window: SemesterWindow | None = None
    chart: ChartHint | None = None
    winter: str = WINTER_LAST
    description: str = ""

    def __post_init__(self):
        if len(self.headers) != len(self.select):
            raise ValueError(f"Report {self.slug!r} declares {len(self.headers)} headers for {len(self.select)} columns")

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(alias for _, alias in self.select)

    @property
    def filter_names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.filters)

    def filter_spec(self, name: str) -> FilterSpec | None:
        for spec in self.filters:
            if name in spec.names:
                return spec
        return None


@dataclass(frozen=True)
class ReportQuery:
    sql: str
    params: tuple = ()
    empty: bool = False


def normalize_filters(report: ReportDefinition, raw: Mapping | None) -> dict[str, Any]:
    """Reduce ``raw`` to the report's declared filters with usable values.

    Unknown filter names are ignored. ``"All"``, blanks and values that fail
    to parse are dropped, and a filter with a default falls back to it.
    """

    raw = raw or {}
    normalized: dict[str, Any] = {}
    for spec in report.filters:
        value = spec.coerce(spec.raw_value(raw))
        if value is None:
            value = spec.default
        if value is not None:
            normalized[spec.name] = value
    return normalized


def build_query(
    report: ReportDefinition,
    raw_filters: Mapping | None = None,
    *,
    current_year: int | None = None,
    recent_semester_ids=None,
) -> ReportQuery:
    filters = normalize_filters(report, raw_filters)

    where: list[Condition] = [Condition(predicate) for predicate in report.where]
    having: list[Condition] = []

    if report.year_filter is not None:
        year = current_year if current_year is not None else timezone.now().year
        where.append(report.year_filter.condition(year))

    if report.semester_window is not None:
        if recent_semester_ids is None:
            raise ValueError(f"Report {report.slug!r} needs the ids of its recent semester window")
        semester_ids = list(recent_semester_ids)
        if not semester_ids:
            return ReportQuery(sql="", params=(), empty=True)
        where.append(report.semester_window.condition(semester_ids))

    for spec in report.filters:
        if spec.name not in filters:
            continue
        target = having if spec.clause == HAVING else where
        target.append(spec.condition(filters[spec.name]))

    having = [Condition(predicate) for predicate in report.having] + having

    select = ",\n       ".join(f"{expression} AS {alias}" for expression, alias in report.select)
    parts = [f"SELECT {select}", f"FROM {report.from_clause}"]
    if where:
        parts.append("WHERE " + " AND ".join(cond.predicate for cond in where))
    if report.group_by:
        parts.append("GROUP BY " + ", ".join(report.group_by))
    if having:
        parts.append("HAVING " + " AND ".join(cond.predicate for cond in having))
    if report.order_by:
        parts.append("ORDER BY " + ", ".join(report.order_by))
    if report.limit is not None and not any(name in filters for name in report.unlimited_when):
        parts.append(f"LIMIT {int(report.limit)}")

    params: list = []
    for cond in where + having:
        params.extend(cond.params)
    return ReportQuery(sql="\n".join(parts), params=tuple(params))
