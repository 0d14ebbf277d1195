"""Letter-grade to grade-point conversion and GPA aggregation."""
from __future__ import annotations

from typing import Iterable

GRADE_POINTS: dict[str, float] = {
    "A": 4.0,
    "A-": 3.7,
    "B+": 3.3,
    "B": 3.0,
    "B-": 2.7,
    "C+": 2.3,
    "C": 2.0,
    "C-": 1.7,
    "D+": 1.3,
    "D": 1.0,
    "D-": 0.7,
}

# F, Ungraded and anything unrecognised.
DEFAULT_POINTS = 0.0


def grade_points(grade) -> float:
    """Map a letter grade to its grade-point value.

    The mapping is total: ``None``, blanks, ``"F"``, ``"Ungraded"`` and
    unknown strings all map to 0.0. Letters are matched exactly (case and
    whitespace included), the same way the SQL ``CASE`` rendering does.
    """

    if not isinstance(grade, str):
        return DEFAULT_POINTS
    return GRADE_POINTS.get(grade, DEFAULT_POINTS)


def average_gpa(grades: Iterable) -> float:
    """Unweighted mean of the grade points of ``grades``.

    Every row counts toward the denominator, including ungraded ones.
    """

    points = [grade_points(grade) for grade in grades]
    if not points:
        raise ValueError("Cannot compute a GPA over an empty group of enrollments.")
    return sum(points) / len(points)


def grade_points_sql(column: str) -> str:
    """Render the grade scale as a SQL ``CASE`` expression over ``column``.

    ``column`` must be a trusted column reference from a report definition.
    """

    branches = " ".join(f"WHEN '{letter}' THEN {points}" for letter, points in GRADE_POINTS.items())
    return f"CASE {column} {branches} ELSE {DEFAULT_POINTS} END"


def student_gpa(student) -> float | None:
    grades = list(student.enrollments.values_list("grade", flat=True))
    if not grades:
        return None
    return average_gpa(grades)
