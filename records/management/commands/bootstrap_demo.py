"""Populate the database with demo departments, courses, sections, and enrollments."""
from __future__ import annotations

import datetime

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from records.models import (
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

User = get_user_model()

GRADE_PATTERN = ["A", "B+", "C", "A-", "F", "B", "D+", "Ungraded", "B-", "C+"]


class Command(BaseCommand):
    help = "Seed the database with demo records for exploring the reports"

    def add_arguments(self, parser):
        parser.add_argument("--students", type=int, default=60, help="Number of generated students")

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Creating demo data..."))
        year = timezone.now().year

        cs, _ = Department.objects.get_or_create(name="Computer Science")
        math, _ = Department.objects.get_or_create(name="Mathematics")
        ee, _ = Department.objects.get_or_create(name="Electrical Engineering")
        bus, _ = Department.objects.get_or_create(name="Business")
        departments = [cs, math, ee, bus]

        semesters = []
        for sem_year, season in [
            (year - 2, "Fall"),
            (year - 1, "Spring"),
            (year - 1, "Summer"),
            (year - 1, "Fall"),
            (year, "Spring"),
            (year, "Fall"),
        ]:
            semester, _ = Semester.objects.get_or_create(year=sem_year, season=season)
            semesters.append(semester)

        classroom_rows = [
            (101, "Lecture", 40, "Main Hall", cs),
            (102, "Lab", 8, "Main Hall", cs),
            (201, "Lecture", 60, "Science Wing", math),
            (301, "Lab", 25, "Engineering Block", ee),
            (401, "Seminar", 30, "Commerce House", bus),
        ]
        classrooms = []
        for number, room_type, capacity, building, dept in classroom_rows:
            room, _ = Classroom.objects.get_or_create(
                room_number=number,
                defaults={
                    "room_type": room_type,
                    "capacity": capacity,
                    "building": building,
                    "phone_number": f"555-0{number}",
                    "department": dept,
                },
            )
            classrooms.append(room)

        faculty_rows = [
            ("Carol Jones", "Associate Professor", cs),
            ("Dave Miller", "Lecturer", math),
            ("Erin Walsh", "Professor", cs),
            ("Frank Osei", "Associate Professor", ee),
            ("Henry Park", "Associate Professor", bus),
        ]
        faculty = []
        for full_name, designation, dept in faculty_rows:
            username = full_name.split()[0].lower()
            member, _ = Faculty.objects.get_or_create(
                email=f"{username}@example.edu",
                defaults={
                    "full_name": full_name,
                    "designation": designation,
                    "hire_date": datetime.date(2015, 8, 15),
                    "department": dept,
                },
            )
            faculty.append(member)
            self._ensure_account(username, "faculty", faculty=member)

        course_rows = [
            ("CS101", "Introduction to Programming", 3, "Core", cs),
            ("CS201", "Data Structures", 3, "Core", cs),
            ("CS310", "Database Systems", 3, "Core", cs),
            ("CS350", "Machine Learning", 3, "Elective", cs),
            ("MATH101", "Calculus I", 4, "Core", math),
            ("MATH220", "Probability and Statistics", 3, "Core", math),
            ("EE150", "Digital Circuits", 3, "Core", ee),
            ("EE240", "Signals and Systems", 3, "Elective", ee),
            ("BUS110", "Principles of Management", 2, "Elective", bus),
        ]
        courses = []
        for code, title, credits, course_type, dept in course_rows:
            course, _ = Course.objects.get_or_create(
                code=code,
                defaults={
                    "title": title,
                    "credit_hours": credits,
                    "course_type": course_type,
                    "department": dept,
                },
            )
            courses.append(course)

        sections = []
        for idx, course in enumerate(courses):
            for offset, semester in enumerate(semesters[-3:]):
                day = Schedule.DAY_OF_WEEK_CHOICES[(idx + offset) % 5][0]
                start_hour = 8 + (idx % 4) * 2
                schedule, _ = Schedule.objects.get_or_create(
                    day_of_week=day,
                    start_time=datetime.time(start_hour, 0),
                    end_time=datetime.time(start_hour + 1, 30),
                )
                instructor = next((f for f in faculty if f.department_id == course.department_id), None)
                classroom = next((c for c in classrooms if c.department_id == course.department_id), None)
                section, _ = Section.objects.get_or_create(
                    course=course,
                    semester=semester,
                    defaults={"schedule": schedule, "classroom": classroom, "faculty": instructor},
                )
                sections.append(section)

        students = []
        for idx in range(1, options["students"] + 1):
            dept = departments[idx % len(departments)]
            student, _ = Student.objects.get_or_create(
                email=f"student{idx:03d}@example.edu",
                defaults={
                    "first_name": f"Student{idx:03d}",
                    "last_name": dept.name.split()[0],
                    "gender": "Female" if idx % 2 else "Male",
                    "date_of_birth": datetime.date(2000 + idx % 5, 1 + idx % 12, 1 + idx % 28),
                    "enrollment_date": datetime.date(year - 2, 9, 1),
                    "department": dept,
                },
            )
            students.append(student)
        for student in students[:5]:
            self._ensure_account(student.email.split("@")[0], "student", student=student)

        # The last few students stay unenrolled so the inactive report has rows.
        active = students[:-5] if len(students) > 5 else students
        for idx, student in enumerate(active):
            for step in (0, 7):
                section = sections[(idx + step) % len(sections)]
                Enrollment.objects.get_or_create(
                    student=student,
                    section=section,
                    defaults={"grade": GRADE_PATTERN[(idx + step) % len(GRADE_PATTERN)]},
                )

        admin_user, created_admin = User.objects.get_or_create(username="admin", defaults={"email": "admin@example.edu"})
        if created_admin:
            admin_user.is_staff = True
            admin_user.is_superuser = True
            admin_user.set_password("admin123")
            admin_user.save()
            self.stdout.write(self.style.SUCCESS("Created admin / admin123"))
        Account.objects.get_or_create(user=admin_user, defaults={"role": "admin"})

        self.stdout.write(
            self.style.SUCCESS(
                f"Demo data ready: {len(sections)} sections, {len(students)} students, "
                f"{Enrollment.objects.count()} enrollments."
            )
        )

    def _ensure_account(self, username: str, role: str, **links) -> Account:
        user, created = User.objects.get_or_create(username=username, defaults={"email": f"{username}@example.edu"})
        if created or not user.has_usable_password():
            user.set_password(settings.DEFAULT_INITIAL_PASSWORD)
            user.save(update_fields=["password"])
        account, _ = Account.objects.get_or_create(user=user, defaults={"role": role, **links})
        return account
