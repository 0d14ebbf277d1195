"""Multi-statement record operations.

Deletes cascade explicitly here rather than through the database: every
operation runs inside one transaction so a failure part-way leaves nothing
half removed.
"""
from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count

from .models import (
    Account,
    Classroom,
    Course,
    Department,
    Enrollment,
    Faculty,
    Schedule,
    Section,
    Semester,
    Student,
)
from .reports.builder import is_unconstrained
from .reports.runner import resolve_semester_id
from .reports.semesters import WINTER_UNRANKED, labels_newest_first, parse_semester_label

logger = logging.getLogger(__name__)

User = get_user_model()


def _delete_accounts(accounts) -> int:
    user_ids = list(accounts.values_list("user_id", flat=True))
    deleted, _ = accounts.delete()
    User.objects.filter(pk__in=user_ids).delete()
    return deleted


def _delete_sections(sections) -> dict[str, int]:
    section_ids = list(sections.values_list("id", flat=True))
    schedule_ids = set(sections.values_list("schedule_id", flat=True))
    enrollments, _ = Enrollment.objects.filter(section_id__in=section_ids).delete()
    removed, _ = Section.objects.filter(pk__in=section_ids).delete()
    # Schedules are owned by their section; keep any still shared with another one.
    orphaned = list(
        Schedule.objects.filter(pk__in=schedule_ids, sections__isnull=True).values_list("pk", flat=True)
    )
    schedules, _ = Schedule.objects.filter(pk__in=orphaned).delete()
    return {"enrollments": enrollments, "sections": removed, "schedules": schedules}


@transaction.atomic
def delete_student(student_id: int) -> dict[str, int]:
    student = Student.objects.select_for_update().get(pk=student_id)
    enrollments, _ = Enrollment.objects.filter(student=student).delete()
    accounts = _delete_accounts(Account.objects.filter(student=student))
    student.delete()
    logger.info(
        "Deleted student %s with %s enrollment(s) and %s account(s)", student_id, enrollments, accounts
    )
    return {"students": 1, "enrollments": enrollments, "accounts": accounts}


@transaction.atomic
def delete_faculty(faculty_id: int) -> dict[str, int]:
    faculty = Faculty.objects.select_for_update().get(pk=faculty_id)
    unassigned = Section.objects.filter(faculty=faculty).update(faculty=None)
    accounts = _delete_accounts(Account.objects.filter(faculty=faculty))
    faculty.delete()
    logger.info("Deleted faculty %s; unassigned %s section(s)", faculty_id, unassigned)
    return {"faculty": 1, "unassigned_sections": unassigned, "accounts": accounts}


@transaction.atomic
def delete_classroom(classroom_id: int) -> dict[str, int]:
    classroom = Classroom.objects.select_for_update().get(pk=classroom_id)
    unassigned = Section.objects.filter(classroom=classroom).update(classroom=None)
    classroom.delete()
    logger.info("Deleted classroom %s; unassigned %s section(s)", classroom.room_number, unassigned)
    return {"classrooms": 1, "unassigned_sections": unassigned}


@transaction.atomic
def delete_section(section_id: int) -> dict[str, int]:
    Section.objects.select_for_update().get(pk=section_id)
    counts = _delete_sections(Section.objects.filter(pk=section_id))
    logger.info("Deleted section %s and %s enrollment(s)", section_id, counts["enrollments"])
    return counts


@transaction.atomic
def delete_course(code: str) -> dict[str, int]:
    course = Course.objects.select_for_update().get(code=code)
    counts = _delete_sections(Section.objects.filter(course=course))
    course.delete()
    counts["courses"] = 1
    logger.info("Deleted course %s with %s section(s)", code, counts["sections"])
    return counts


@transaction.atomic
def delete_department(department_id: int) -> dict[str, int]:
    """Remove a department together with everything that belongs to it."""

    department = Department.objects.select_for_update().get(pk=department_id)
    students = Student.objects.filter(department=department)
    faculty = Faculty.objects.filter(department=department)

    counts = _delete_sections(Section.objects.filter(course__department=department))
    counts["enrollments"] += Enrollment.objects.filter(student__in=students).delete()[0]
    counts["unassigned_sections"] = Section.objects.filter(faculty__in=faculty).update(faculty=None)
    counts["unassigned_sections"] += Section.objects.filter(classroom__department=department).update(classroom=None)
    counts["accounts"] = _delete_accounts(Account.objects.filter(student__in=students))
    counts["accounts"] += _delete_accounts(Account.objects.filter(faculty__in=faculty))
    counts["courses"] = Course.objects.filter(department=department).delete()[0]
    counts["faculty"] = faculty.delete()[0]
    counts["classrooms"] = Classroom.objects.filter(department=department).delete()[0]
    counts["students"] = students.delete()[0]
    department.delete()
    logger.info("Deleted department %s (%s): %s", department_id, department.name, counts)
    return counts


def _resolve_semester(semester=None, year=None, season=None) -> Semester:
    if semester is not None:
        return semester
    if year in (None, "") or not season:
        raise ValidationError("A section needs either a semester or both a year and a season.")
    season = str(season).strip().capitalize()
    if season not in dict(Semester.SEASON_CHOICES):
        raise ValidationError(f"Unknown season {season!r}.")
    semester, created = Semester.objects.get_or_create(year=int(year), season=season)
    if created:
        logger.info("Created semester %s while saving a section", semester.label)
    return semester


def _build_schedule(day_of_week, start_time, end_time) -> Schedule:
    if not (day_of_week and start_time and end_time):
        raise ValidationError("A section needs either a schedule or a day of week with start and end times.")
    schedule = Schedule(day_of_week=day_of_week, start_time=start_time, end_time=end_time)
    schedule.full_clean()
    schedule.save()
    return schedule


@transaction.atomic
def create_section(
    *,
    course: Course,
    semester: Semester | None = None,
    year=None,
    season=None,
    schedule: Schedule | None = None,
    day_of_week=None,
    start_time=None,
    end_time=None,
    classroom: Classroom | None = None,
    faculty: Faculty | None = None,
) -> Section:
    """Create a section, adding its semester and schedule rows as needed."""

    semester = _resolve_semester(semester, year, season)
    if schedule is None:
        schedule = _build_schedule(day_of_week, start_time, end_time)
    section = Section.objects.create(
        course=course,
        semester=semester,
        schedule=schedule,
        classroom=classroom,
        faculty=faculty,
    )
    logger.info("Created section %s for %s in %s", section.pk, course.code, semester.label)
    return section


@transaction.atomic
def update_section(section: Section, **changes) -> Section:
    year = changes.pop("year", None)
    season = changes.pop("season", None)
    times = {key: changes.pop(key) for key in ("day_of_week", "start_time", "end_time") if key in changes}

    if "semester" not in changes and (year or season):
        changes["semester"] = _resolve_semester(
            None, year or section.semester.year, season or section.semester.season
        )

    if times and "schedule" not in changes:
        schedule = section.schedule
        if schedule.sections.exclude(pk=section.pk).exists():
            # Other sections meet on this row; give this one its own.
            changes["schedule"] = _build_schedule(
                times.get("day_of_week", schedule.day_of_week),
                times.get("start_time", schedule.start_time),
                times.get("end_time", schedule.end_time),
            )
        else:
            for field, value in times.items():
                setattr(schedule, field, value)
            schedule.full_clean()
            schedule.save()

    for field, value in changes.items():
        setattr(section, field, value)
    section.save()
    return section


def enrollment_counts_by_department(labels) -> dict[str, int]:
    """Distinct enrolled students per department for the given semester labels.

    Students are attributed to the department offering the course. Every
    department appears in the result; labels that do not resolve to a
    semester are skipped.
    """

    counts = {name: 0 for name in Department.objects.values_list("name", flat=True)}
    semester_ids = []
    for label in labels or ():
        parsed = parse_semester_label(label)
        if parsed is None:
            continue
        season, year = parsed
        semester_id = Semester.objects.filter(season=season, year=year).values_list("id", flat=True).first()
        if semester_id is not None:
            semester_ids.append(semester_id)
    if not semester_ids:
        return counts

    rows = (
        Enrollment.objects.filter(section__semester_id__in=semester_ids)
        .values("section__course__department__name")
        .annotate(students=Count("student", distinct=True))
    )
    for row in rows:
        counts[row["section__course__department__name"]] = row["students"]
    return counts


def student_semester_labels(student_id: int) -> list[str]:
    rows = Semester.objects.filter(sections__enrollments__student_id=student_id).values("year", "season")
    return labels_newest_first(list(rows), winter=WINTER_UNRANKED)


def faculty_semester_labels(faculty_id: int) -> list[str]:
    rows = Semester.objects.filter(sections__faculty_id=faculty_id).values("year", "season")
    return labels_newest_first(list(rows), winter=WINTER_UNRANKED)


def gpa_analysis_grades(semester=None, gender=None) -> list[dict]:
    """Raw graded enrollment rows for client-side GPA breakdowns."""

    enrollments = Enrollment.objects.all()
    if not is_unconstrained(semester):
        semester_id = resolve_semester_id(semester)
        if semester_id is not None:
            enrollments = enrollments.filter(section__semester_id=semester_id)
    if not is_unconstrained(gender):
        enrollments = enrollments.filter(student__gender=str(gender).strip())
    rows = enrollments.order_by("student_id", "section_id").values(
        "student_id",
        "student__gender",
        "student__department__name",
        "section__course__code",
        "grade",
        "section__semester_id",
    )
    return [
        {
            "studentId": row["student_id"],
            "gender": row["student__gender"],
            "departmentName": row["student__department__name"],
            "courseCode": row["section__course__code"],
            "grade": row["grade"],
            "semesterId": row["section__semester_id"],
        }
        for row in rows
    ]
