"""Django models for the university records domain."""
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

User = get_user_model()

UNGRADED = "Ungraded"

# Spring, Summer, Fall, Winter within a year.
SEASON_RANK = models.Case(
    models.When(season="Spring", then=models.Value(1)),
    models.When(season="Summer", then=models.Value(2)),
    models.When(season="Fall", then=models.Value(3)),
    models.When(season="Winter", then=models.Value(4)),
    default=models.Value(0),
    output_field=models.IntegerField(),
)


class Department(models.Model):
    name = models.CharField("department name", max_length=255, unique=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return self.name


class Classroom(models.Model):
    room_number = models.PositiveIntegerField("room number", unique=True)
    room_type = models.CharField("room type", max_length=50, blank=True)
    capacity = models.PositiveIntegerField("capacity", default=0)
    building = models.CharField("building", max_length=255, blank=True)
    phone_number = models.CharField("phone number", max_length=15, blank=True)
    department = models.ForeignKey(
        Department,
        on_delete=models.PROTECT,
        related_name="classrooms",
        null=True,
        blank=True,
    )

    class Meta:
        ordering = ["room_number"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"Room {self.room_number} ({self.building or 'n/a'})"


class Schedule(models.Model):
    DAY_OF_WEEK_CHOICES = [
        ("Monday", "Monday"),
        ("Tuesday", "Tuesday"),
        ("Wednesday", "Wednesday"),
        ("Thursday", "Thursday"),
        ("Friday", "Friday"),
        ("Saturday", "Saturday"),
        ("Sunday", "Sunday"),
    ]

    day_of_week = models.CharField("day of week", max_length=10, choices=DAY_OF_WEEK_CHOICES)
    start_time = models.TimeField("start time")
    end_time = models.TimeField("end time")

    class Meta:
        ordering = ["day_of_week", "start_time"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_time__gt=F("start_time")),
                name="schedule_end_after_start",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.day_of_week} {self.start_time:%H:%M}-{self.end_time:%H:%M}"

    def clean(self):
        super().clean()
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError("Schedule end time must be after its start time.")


class Semester(models.Model):
    SEASON_CHOICES = [
        ("Spring", "Spring"),
        ("Summer", "Summer"),
        ("Fall", "Fall"),
        ("Winter", "Winter"),
    ]

    year = models.PositiveSmallIntegerField("year")
    season = models.CharField("season", max_length=10, choices=SEASON_CHOICES)

    class Meta:
        unique_together = [("year", "season")]
        ordering = ["-year", SEASON_RANK.desc()]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return self.label

    @property
    def label(self) -> str:
        return f"{self.season}{self.year}"


class Course(models.Model):
    COURSE_TYPE_CHOICES = [
        ("Core", "Core"),
        ("Elective", "Elective"),
    ]

    code = models.CharField("course code", max_length=50, unique=True)
    title = models.CharField("title", max_length=255)
    credit_hours = models.PositiveSmallIntegerField("credit hours")
    course_type = models.CharField("course type", max_length=50, choices=COURSE_TYPE_CHOICES, blank=True)
    description = models.TextField("description", blank=True)
    department = models.ForeignKey(Department, on_delete=models.PROTECT, related_name="courses")

    class Meta:
        ordering = ["code"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.code} - {self.title}"

    @property
    def is_elective(self) -> bool:
        return self.course_type == "Elective"


class Faculty(models.Model):
    full_name = models.CharField("full name", max_length=255)
    designation = models.CharField("designation", max_length=100, blank=True)
    hire_date = models.DateField("hire date", null=True, blank=True)
    phone_number = models.CharField("phone number", max_length=15, blank=True)
    email = models.EmailField("email", unique=True)
    department = models.ForeignKey(Department, on_delete=models.PROTECT, related_name="faculty")

    class Meta:
        verbose_name_plural = "faculty"
        ordering = ["full_name"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return self.full_name


class Student(models.Model):
    GENDER_CHOICES = [
        ("Male", "Male"),
        ("Female", "Female"),
    ]

    first_name = models.CharField("first name", max_length=255)
    last_name = models.CharField("last name", max_length=255)
    gender = models.CharField("gender", max_length=10, choices=GENDER_CHOICES, blank=True)
    date_of_birth = models.DateField("date of birth", null=True, blank=True)
    address = models.TextField("address", blank=True)
    phone_number = models.CharField("phone number", max_length=15, blank=True)
    email = models.EmailField("email", unique=True)
    enrollment_date = models.DateField("enrollment date", null=True, blank=True)
    department = models.ForeignKey(Department, on_delete=models.PROTECT, related_name="students")

    class Meta:
        ordering = ["last_name", "first_name"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return self.full_name

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Section(models.Model):
    course = models.ForeignKey(Course, on_delete=models.PROTECT, related_name="sections")
    semester = models.ForeignKey(Semester, on_delete=models.PROTECT, related_name="sections")
    schedule = models.ForeignKey(Schedule, on_delete=models.PROTECT, related_name="sections")
    classroom = models.ForeignKey(
        Classroom,
        on_delete=models.PROTECT,
        related_name="sections",
        null=True,
        blank=True,
    )
    faculty = models.ForeignKey(
        Faculty,
        on_delete=models.PROTECT,
        related_name="sections",
        null=True,
        blank=True,
    )

    class Meta:
        ordering = ["course__code", "id"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.course.code} #{self.pk} ({self.semester.label})"


class Enrollment(models.Model):
    student = models.ForeignKey(Student, on_delete=models.PROTECT, related_name="enrollments")
    section = models.ForeignKey(Section, on_delete=models.PROTECT, related_name="enrollments")
    grade = models.CharField("grade", max_length=20, default=UNGRADED)

    class Meta:
        unique_together = [("student", "section")]
        ordering = ["section__semester__year", "student__last_name"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.student} -> {self.section} ({self.grade})"


class Account(models.Model):
    ROLE_CHOICES = [
        ("admin", "Admin"),
        ("faculty", "Faculty"),
        ("student", "Student"),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="account")
    role = models.CharField("role", max_length=20, choices=ROLE_CHOICES)
    faculty = models.ForeignKey(
        Faculty,
        on_delete=models.PROTECT,
        related_name="accounts",
        null=True,
        blank=True,
    )
    student = models.ForeignKey(
        Student,
        on_delete=models.PROTECT,
        related_name="accounts",
        null=True,
        blank=True,
    )

    class Meta:
        ordering = ["user__username"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.user.username} ({self.role})"

    def clean(self):
        super().clean()
        if self.role == "student" and not self.student_id:
            raise ValidationError("Student accounts must reference a student record.")
        if self.role == "faculty" and not self.faculty_id:
            raise ValidationError("Faculty accounts must reference a faculty record.")
