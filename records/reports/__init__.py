"""Ad-hoc reporting over enrollments, sections and semesters."""
from .builder import ReportDefinition, ReportQuery, UnknownReport, build_query, normalize_filters
from .definitions import REPORTS, get_report
from .grades import average_gpa, grade_points
from .runner import run_report
from .shaping import ReportResult

__all__ = [
    "REPORTS",
    "ReportDefinition",
    "ReportQuery",
    "ReportResult",
    "UnknownReport",
    "average_gpa",
    "build_query",
    "get_report",
    "grade_points",
    "normalize_filters",
    "run_report",
]
