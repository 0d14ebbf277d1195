"""Chronological ordering of (year, season) semesters."""
from __future__ import annotations

import re
from typing import Iterable, Sequence

SEASON_ORDER: tuple[str, ...] = ("Spring", "Summer", "Fall")

# Winter is ranked after Fall by the reports that list it in their season
# ordering and falls back to the unknown-season rank elsewhere.
WINTER_LAST = "last"
WINTER_UNRANKED = "unranked"

_LABEL_RE = re.compile(r"^\s*([A-Za-z]+)\s*(\d{4})\s*$")


def season_rank(season: str | None, winter: str = WINTER_LAST) -> int:
    if season in SEASON_ORDER:
        return SEASON_ORDER.index(season) + 1
    if season == "Winter" and winter == WINTER_LAST:
        return len(SEASON_ORDER) + 1
    return 0


def _year_and_season(semester) -> tuple[int, str]:
    if isinstance(semester, dict):
        return int(semester["year"]), semester["season"]
    if isinstance(semester, (tuple, list)):
        year, season = semester
        return int(year), season
    return int(semester.year), semester.season


def semester_sort_key(semester, winter: str = WINTER_LAST) -> tuple[int, int]:
    """Sort key ``(year, season rank)`` for a model instance, dict or tuple."""

    year, season = _year_and_season(semester)
    return year, season_rank(season, winter)


def order_semesters(semesters: Iterable, newest_first: bool = True, winter: str = WINTER_LAST) -> list:
    return sorted(semesters, key=lambda sem: semester_sort_key(sem, winter), reverse=newest_first)


def most_recent(semesters: Iterable, k: int, winter: str = WINTER_LAST) -> list:
    """Return the ``k`` newest semesters, newest first."""

    if k <= 0:
        return []
    return order_semesters(semesters, newest_first=True, winter=winter)[:k]


def season_rank_sql(column: str, winter: str = WINTER_LAST) -> str:
    """Render :func:`season_rank` as a SQL ``CASE`` over a trusted column."""

    branches = [f"WHEN '{season}' THEN {season_rank(season, winter)}" for season in SEASON_ORDER]
    if winter == WINTER_LAST:
        branches.append(f"WHEN 'Winter' THEN {season_rank('Winter', winter)}")
    return f"CASE {column} {' '.join(branches)} ELSE 0 END"


def parse_semester_label(label) -> tuple[str, int] | None:
    """Split a ``"Fall2024"`` style label into ``("Fall", 2024)``.

    Returns ``None`` for anything that does not look like a season followed
    by a four digit year. The season is capitalised, so ``"fall2024"`` also
    parses.
    """

    if not isinstance(label, str):
        return None
    match = _LABEL_RE.match(label)
    if not match:
        return None
    return match.group(1).capitalize(), int(match.group(2))


def semester_label(season: str, year: int) -> str:
    return f"{season}{year}"


def labels_newest_first(rows: Sequence, winter: str = WINTER_UNRANKED) -> list[str]:
    """Distinct ``SeasonYear`` labels for ``rows`` ordered newest first."""

    seen: dict[tuple[int, str], None] = {}
    for row in rows:
        seen.setdefault(_year_and_season(row), None)
    ordered = order_semesters(seen.keys(), newest_first=True, winter=winter)
    return [semester_label(season, year) for year, season in ordered]
