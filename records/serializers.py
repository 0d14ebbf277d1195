"""REST serializers for the records models."""
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from . import services
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
from .reports.grades import student_gpa


class DepartmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Department
        fields = "__all__"


class ClassroomSerializer(serializers.ModelSerializer):
    department_name = serializers.CharField(source="department.name", read_only=True, default=None)

    class Meta:
        model = Classroom
        fields = "__all__"


class ScheduleSerializer(serializers.ModelSerializer):
    class Meta:
        model = Schedule
        fields = "__all__"

    def validate(self, attrs):
        start = attrs.get("start_time", getattr(self.instance, "start_time", None))
        end = attrs.get("end_time", getattr(self.instance, "end_time", None))
        if start and end and end <= start:
            raise serializers.ValidationError("End time must be after start time.")
        return attrs


class SemesterSerializer(serializers.ModelSerializer):
    label = serializers.CharField(read_only=True)

    class Meta:
        model = Semester
        fields = ["id", "year", "season", "label"]


class CourseSerializer(serializers.ModelSerializer):
    department_name = serializers.CharField(source="department.name", read_only=True)

    class Meta:
        model = Course
        fields = "__all__"


class FacultySerializer(serializers.ModelSerializer):
    department_name = serializers.CharField(source="department.name", read_only=True)

    class Meta:
        model = Faculty
        fields = "__all__"


class StudentSerializer(serializers.ModelSerializer):
    department_name = serializers.CharField(source="department.name", read_only=True)
    full_name = serializers.CharField(read_only=True)
    gpa = serializers.SerializerMethodField()

    class Meta:
        model = Student
        fields = "__all__"

    def get_gpa(self, obj):
        gpa = student_gpa(obj)
        return None if gpa is None else round(gpa, 2)


class SectionSerializer(serializers.ModelSerializer):
    """Section with optional inline semester and schedule fields.

    ``year``/``season`` may stand in for ``semester`` and
    ``day_of_week``/``start_time``/``end_time`` for ``schedule``.
    """

    semester = serializers.PrimaryKeyRelatedField(queryset=Semester.objects.all(), required=False)
    schedule = serializers.PrimaryKeyRelatedField(queryset=Schedule.objects.all(), required=False)
    year = serializers.IntegerField(write_only=True, required=False)
    season = serializers.ChoiceField(choices=Semester.SEASON_CHOICES, write_only=True, required=False)
    day_of_week = serializers.ChoiceField(choices=Schedule.DAY_OF_WEEK_CHOICES, write_only=True, required=False)
    start_time = serializers.TimeField(write_only=True, required=False)
    end_time = serializers.TimeField(write_only=True, required=False)

    course_code = serializers.CharField(source="course.code", read_only=True)
    course_title = serializers.CharField(source="course.title", read_only=True)
    semester_label = serializers.CharField(source="semester.label", read_only=True)
    faculty_name = serializers.CharField(source="faculty.full_name", read_only=True, default=None)
    room_number = serializers.IntegerField(source="classroom.room_number", read_only=True, default=None)
    schedule_detail = ScheduleSerializer(source="schedule", read_only=True)

    class Meta:
        model = Section
        fields = [
            "id",
            "course",
            "course_code",
            "course_title",
            "semester",
            "semester_label",
            "year",
            "season",
            "schedule",
            "schedule_detail",
            "day_of_week",
            "start_time",
            "end_time",
            "classroom",
            "room_number",
            "faculty",
            "faculty_name",
        ]

    def validate(self, attrs):
        if self.instance is None:
            if "semester" not in attrs and not ("year" in attrs and "season" in attrs):
                raise serializers.ValidationError("Provide a semester id or both year and season.")
            if "schedule" not in attrs and not all(
                key in attrs for key in ("day_of_week", "start_time", "end_time")
            ):
                raise serializers.ValidationError(
                    "Provide a schedule id or day_of_week, start_time and end_time."
                )
        start, end = attrs.get("start_time"), attrs.get("end_time")
        if start and end and end <= start:
            raise serializers.ValidationError("End time must be after start time.")
        return attrs

    def create(self, validated_data):
        try:
            return services.create_section(**validated_data)
        except DjangoValidationError as exc:
            raise serializers.ValidationError(exc.messages) from exc

    def update(self, instance, validated_data):
        try:
            return services.update_section(instance, **validated_data)
        except DjangoValidationError as exc:
            raise serializers.ValidationError(exc.messages) from exc


class EnrollmentSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source="student.full_name", read_only=True)
    course_code = serializers.CharField(source="section.course.code", read_only=True)
    course_title = serializers.CharField(source="section.course.title", read_only=True)
    semester_label = serializers.CharField(source="section.semester.label", read_only=True)

    class Meta:
        model = Enrollment
        fields = "__all__"


class GradeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Enrollment
        fields = ["id", "grade"]


class AccountSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source="user.username", read_only=True)

    class Meta:
        model = Account
        fields = ["id", "user", "username", "role", "faculty", "student"]

    def validate(self, attrs):
        role = attrs.get("role", getattr(self.instance, "role", None))
        student = attrs.get("student", getattr(self.instance, "student", None))
        faculty = attrs.get("faculty", getattr(self.instance, "faculty", None))
        if role == "student" and student is None:
            raise serializers.ValidationError("Student accounts must reference a student record.")
        if role == "faculty" and faculty is None:
            raise serializers.ValidationError("Faculty accounts must reference a faculty record.")
        return attrs
