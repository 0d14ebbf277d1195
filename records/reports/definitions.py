"""The catalogue of reports offered by the records API."""
from __future__ import annotations

from .builder import (
    HAVING,
    ChartHint,
    FilterSpec,
    ReportDefinition,
    SemesterWindow,
    UnknownReport,
    YearFilter,
)
from .grades import grade_points_sql
from .semesters import WINTER_LAST, season_rank_sql

GPA = f"AVG({grade_points_sql('e.grade')})"
SEASON_RANK = season_rank_sql("sem.season", WINTER_LAST)

GENDER = FilterSpec("gender", "s.gender")
SEMESTER = FilterSpec("semesterId", "sem.id", kind="semester", aliases=("semester_id",))
COURSE_CODE = FilterSpec("courseCode", "c.code", aliases=("course_code",))


DEPARTMENT_ENROLLMENT = ReportDefinition(
    slug="students-enrolled-per-department",
    name="Departmental Enrollment Statistics",
    description="Enrollments per department over the last three semesters.",
    headers=("Department", "Student Count"),
    select=(
        ("d.name", "department_name"),
        ("COUNT(e.student_id)", "enrollment_count"),
    ),
    from_clause="""records_enrollment e
JOIN records_student s ON e.student_id = s.id
JOIN records_department d ON s.department_id = d.id
JOIN records_section sec ON e.section_id = sec.id""",
    semester_window=SemesterWindow(3, "sec.semester_id IN ({placeholders})"),
    group_by=("d.name",),
    order_by=("d.name",),
    chart=ChartHint("bar", (0,), 1),
)

AVERAGE_GPA_BY_DEPARTMENT = ReportDefinition(
    slug="average-gpa-per-department",
    name="Average GPA Analysis by Department",
    description="Average GPA per department, semester and gender.",
    headers=("Department", "Year", "Season", "Gender", "Average GPA"),
    select=(
        ("d.name", "department_name"),
        ("sem.year", "year"),
        ("sem.season", "season"),
        ("s.gender", "gender"),
        (GPA, "average_gpa"),
    ),
    from_clause="""records_enrollment e
JOIN records_student s ON e.student_id = s.id
JOIN records_section sec ON e.section_id = sec.id
JOIN records_semester sem ON sec.semester_id = sem.id
JOIN records_department d ON s.department_id = d.id""",
    filters=(GENDER, SEMESTER),
    group_by=("d.name", "sem.year", "sem.season", "s.gender"),
    order_by=("d.name", "sem.year DESC", f"{SEASON_RANK} DESC", "s.gender"),
    chart=ChartHint("bar", (0, 1, 2, 3), 4),
)

FACULTY_COURSE_LOAD = ReportDefinition(
    slug="faculty-with-courses",
    name="Faculty Course Load",
    description="Faculty teaching more than three sections since last year.",
    headers=("Faculty Name", "Course Count"),
    select=(
        ("f.full_name", "faculty_name"),
        ("COUNT(DISTINCT sec.id)", "course_count"),
    ),
    from_clause="""records_faculty f
JOIN records_section sec ON f.id = sec.faculty_id
JOIN records_semester sem ON sec.semester_id = sem.id""",
    year_filter=YearFilter("sem.year", ">=", 1),
    group_by=("f.id", "f.full_name"),
    having=("COUNT(DISTINCT sec.id) > 3",),
    order_by=("course_count DESC", "f.full_name"),
    chart=ChartHint("pie", (0,), 1),
)

POPULAR_COURSES = ReportDefinition(
    slug="most-popular-courses",
    name="Popular Courses by Enrollment",
    description="Courses ranked by enrollments over the last two academic years.",
    headers=("Course Title", "Enrollment Count"),
    select=(
        ("c.title", "course_title"),
        ("COUNT(e.student_id)", "enrollment_count"),
    ),
    from_clause="""records_course c
JOIN records_section sec ON c.id = sec.course_id
JOIN records_enrollment e ON sec.id = e.section_id
JOIN records_semester sem ON sec.semester_id = sem.id""",
    year_filter=YearFilter("sem.year", ">=", 2),
    group_by=("c.id", "c.title"),
    order_by=("enrollment_count DESC", "c.title"),
    chart=ChartHint("bar", (0,), 1),
)

CLASSROOM_UTILIZATION = ReportDefinition(
    slug="overbooked-classrooms",
    name="Classroom Utilization Audit",
    description="Classrooms whose enrollments this year exceed their capacity.",
    headers=("Classroom", "Capacity", "Total Enrollment", "Over Capacity"),
    select=(
        ("cr.room_number", "room_number"),
        ("cr.capacity", "capacity"),
        ("COUNT(e.student_id)", "total_enrollment"),
        ("COUNT(e.student_id) - cr.capacity", "over_capacity"),
    ),
    from_clause="""records_classroom cr
JOIN records_section sec ON cr.id = sec.classroom_id
JOIN records_enrollment e ON sec.id = e.section_id
JOIN records_semester sem ON sec.semester_id = sem.id""",
    year_filter=YearFilter("sem.year", "=", 0),
    group_by=("cr.id", "cr.room_number", "cr.capacity"),
    having=("COUNT(e.student_id) > cr.capacity",),
    order_by=("over_capacity DESC", "cr.room_number"),
    chart=ChartHint("bar", (0,), 2),
)

ACADEMIC_PROBATION = ReportDefinition(
    slug="students-on-probation",
    name="Academic Probation List",
    description="Students whose GPA over all enrollments is below 2.0.",
    headers=("First Name", "Last Name", "GPA"),
    select=(
        ("s.first_name", "first_name"),
        ("s.last_name", "last_name"),
        (GPA, "gpa"),
    ),
    from_clause="""records_student s
JOIN records_enrollment e ON s.id = e.student_id""",
    group_by=("s.id", "s.first_name", "s.last_name"),
    having=(f"{GPA} < 2.0",),
    order_by=("gpa ASC", "s.last_name", "s.first_name"),
    chart=ChartHint("bar", (0, 1), 2),
)

COURSE_PERFORMANCE_TREND = ReportDefinition(
    slug="course-performance-trends",
    name="Course Performance Trend",
    description="Average grade per course and semester, oldest first.",
    headers=("Year", "Season", "Course Title", "Average Grade"),
    select=(
        ("sem.year", "year"),
        ("sem.season", "season"),
        ("c.title", "course_title"),
        (GPA, "average_grade"),
    ),
    from_clause="""records_enrollment e
JOIN records_section sec ON e.section_id = sec.id
JOIN records_semester sem ON sec.semester_id = sem.id
JOIN records_course c ON sec.course_id = c.id""",
    filters=(COURSE_CODE,),
    group_by=("sem.year", "sem.season", "c.title"),
    order_by=("sem.year ASC", f"{SEASON_RANK} ASC", "c.title"),
    chart=ChartHint("line", (0, 1, 2), 3),
)

SCHEDULE_CONFLICTS = ReportDefinition(
    slug="timetable-conflicts",
    name="Schedule Conflict Detection",
    description="Overlapping sections a student takes in one semester, each pair listed once (lower section id first).",
    headers=("Student First Name", "Student Last Name", "Section 1 ID", "Section 2 ID"),
    select=(
        ("s.first_name", "first_name"),
        ("s.last_name", "last_name"),
        ("e1.section_id", "section1_id"),
        ("e2.section_id", "section2_id"),
    ),
    from_clause="""records_enrollment e1
JOIN records_enrollment e2 ON e1.student_id = e2.student_id AND e1.section_id < e2.section_id
JOIN records_section sec1 ON e1.section_id = sec1.id
JOIN records_section sec2 ON e2.section_id = sec2.id
JOIN records_schedule sch1 ON sec1.schedule_id = sch1.id
JOIN records_schedule sch2 ON sec2.schedule_id = sch2.id
JOIN records_student s ON e1.student_id = s.id""",
    where=(
        "sec1.semester_id = sec2.semester_id",
        "sch1.day_of_week = sch2.day_of_week",
        "sch1.start_time < sch2.end_time",
        "sch2.start_time < sch1.end_time",
    ),
    order_by=("s.first_name", "s.last_name", "e1.section_id", "e2.section_id"),
)

TOP_PERFORMING_STUDENTS = ReportDefinition(
    slug="top-performing-students",
    name="Top Performing Students",
    description="Students ranked by GPA; the overall top ten unless a department is chosen.",
    headers=("First Name", "Last Name", "GPA", "Department"),
    select=(
        ("s.first_name", "first_name"),
        ("s.last_name", "last_name"),
        (GPA, "gpa"),
        ("d.name", "department_name"),
    ),
    from_clause="""records_student s
JOIN records_enrollment e ON s.id = e.student_id
JOIN records_department d ON s.department_id = d.id""",
    filters=(
        FilterSpec("departmentId", "s.department_id", kind="int", aliases=("department_id",)),
        FilterSpec("minGpa", GPA, clause=HAVING, kind="float", operator=">=", default=0.0, aliases=("min_gpa",)),
    ),
    group_by=("s.id", "s.first_name", "s.last_name", "d.name"),
    order_by=("gpa DESC", "s.last_name", "s.first_name"),
    limit=10,
    unlimited_when=("departmentId",),
    chart=ChartHint("bar", (0, 1), 2),
)

INACTIVE_STUDENTS = ReportDefinition(
    slug="inactive-students",
    name="Inactive Students Report",
    description="Students with no enrollment in the last two semesters.",
    headers=("First Name", "Last Name", "Student ID"),
    select=(
        ("s.first_name", "first_name"),
        ("s.last_name", "last_name"),
        ("s.id", "student_id"),
    ),
    from_clause="records_student s",
    semester_window=SemesterWindow(
        2,
        """s.id NOT IN (
    SELECT e_sub.student_id
    FROM records_enrollment e_sub
    JOIN records_section sec_sub ON e_sub.section_id = sec_sub.id
    WHERE sec_sub.semester_id IN ({placeholders})
)""",
    ),
    order_by=("s.id",),
)

SECTION_FILL_RATE = ReportDefinition(
    slug="section-fill-rate",
    name="Section Fill Rate",
    description="Enrolled students against classroom capacity per section.",
    headers=("Section ID", "Course Title", "Enrolled Students", "Capacity", "Fill Rate (%)"),
    select=(
        ("sec.id", "section_id"),
        ("c.title", "course_title"),
        ("COUNT(e.student_id)", "enrolled_students"),
        ("cr.capacity", "capacity"),
        ("COUNT(e.student_id) * 100.0 / NULLIF(cr.capacity, 0)", "fill_rate"),
    ),
    from_clause="""records_section sec
JOIN records_course c ON sec.course_id = c.id
JOIN records_classroom cr ON sec.classroom_id = cr.id
LEFT JOIN records_enrollment e ON sec.id = e.section_id""",
    filters=(FilterSpec("sectionId", "sec.id", kind="int", aliases=("section_id",)),),
    group_by=("sec.id", "c.title", "cr.capacity"),
    order_by=("sec.id",),
    chart=ChartHint("bar", (0, 1), 4),
)

GRADE_DISTRIBUTION = ReportDefinition(
    slug="grade-distribution",
    name="Grade Distribution",
    description="Grade counts per semester and instructor.",
    headers=("Semester Year", "Semester Season", "Instructor", "Grade", "Count"),
    select=(
        ("sem.year", "semester_year"),
        ("sem.season", "semester_season"),
        ("COALESCE(f.full_name, 'N/A')", "instructor_name"),
        ("e.grade", "grade"),
        ("COUNT(e.grade)", "grade_count"),
    ),
    from_clause="""records_enrollment e
JOIN records_section sec ON e.section_id = sec.id
JOIN records_course c ON sec.course_id = c.id
JOIN records_semester sem ON sec.semester_id = sem.id
LEFT JOIN records_faculty f ON sec.faculty_id = f.id""",
    filters=(
        COURSE_CODE,
        SEMESTER,
        FilterSpec("facultyId", "f.id", kind="int", aliases=("faculty_id",)),
    ),
    group_by=("sem.year", "sem.season", "COALESCE(f.full_name, 'N/A')", "e.grade"),
    order_by=("sem.year DESC", f"{SEASON_RANK} DESC", "instructor_name", "e.grade"),
    chart=ChartHint("bar", (0, 1, 2, 3), 4),
)

REPORTS: tuple[ReportDefinition, ...] = (
    DEPARTMENT_ENROLLMENT,
    AVERAGE_GPA_BY_DEPARTMENT,
    FACULTY_COURSE_LOAD,
    POPULAR_COURSES,
    CLASSROOM_UTILIZATION,
    ACADEMIC_PROBATION,
    COURSE_PERFORMANCE_TREND,
    SCHEDULE_CONFLICTS,
    TOP_PERFORMING_STUDENTS,
    INACTIVE_STUDENTS,
    SECTION_FILL_RATE,
    GRADE_DISTRIBUTION,
)

_BY_KEY = {report.slug: report for report in REPORTS}
_BY_KEY.update({report.name.lower(): report for report in REPORTS})


def get_report(key: str) -> ReportDefinition:
    """Look a report up by slug or display name (case-insensitive)."""

    if not key or not str(key).strip():
        raise ValueError("A report slug or name is required.")
    try:
        return _BY_KEY[str(key).strip().lower()]
    except KeyError:
        raise UnknownReport(key) from None
