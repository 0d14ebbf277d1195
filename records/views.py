"""REST endpoints for records management and reporting."""
import logging

from django.db import DatabaseError
from django.db.models import ProtectedError
from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.decorators import action, api_view
from rest_framework.response import Response

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
from .reports import REPORTS, UnknownReport, get_report, run_report
from .reports.semesters import WINTER_LAST, order_semesters
from .reports.shaping import describe
from .serializers import (
    AccountSerializer,
    ClassroomSerializer,
    CourseSerializer,
    DepartmentSerializer,
    EnrollmentSerializer,
    FacultySerializer,
    GradeSerializer,
    ScheduleSerializer,
    SectionSerializer,
    SemesterSerializer,
    StudentSerializer,
)

logger = logging.getLogger(__name__)

MAX_DECIMALS = 6


def _decimals(value):
    try:
        decimals = int(value)
    except (TypeError, ValueError):
        return None
    return max(0, min(decimals, MAX_DECIMALS))


@api_view(["GET"])
def report_list(request):
    return Response([describe(report) for report in REPORTS])


@api_view(["GET"])
def report_detail(request, slug):
    """Run one report with the query-string filters applied."""

    try:
        report = get_report(slug)
    except UnknownReport:
        return Response({"error": f"Unknown report {slug!r}"}, status=status.HTTP_404_NOT_FOUND)

    try:
        result = run_report(report, request.query_params)
    except DatabaseError:
        logger.exception("Error fetching report %s", report.slug)
        return Response({"error": "Failed to fetch report"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response(result.as_payload(_decimals(request.query_params.get("decimals"))))


class CascadeDeleteMixin:
    """Route ``DELETE`` through a transactional service function."""

    delete_service = None

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        lookup = getattr(instance, self.lookup_field)
        counts = type(self).delete_service(lookup)
        return Response({"deleted": counts}, status=status.HTTP_200_OK)


class DepartmentViewSet(CascadeDeleteMixin, viewsets.ModelViewSet):
    queryset = Department.objects.all()
    serializer_class = DepartmentSerializer
    delete_service = services.delete_department


class ClassroomViewSet(CascadeDeleteMixin, viewsets.ModelViewSet):
    queryset = Classroom.objects.select_related("department")
    serializer_class = ClassroomSerializer
    delete_service = services.delete_classroom


class ProtectedDeleteMixin:
    """Answer 409 when sections still reference the row being deleted."""

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        try:
            instance.delete()
        except ProtectedError as exc:
            name = type(instance).__name__
            logger.warning(
                "Refusing to delete %s %s still used by %s section(s)", name, instance.pk, len(exc.protected_objects)
            )
            return Response(
                {"error": f"{name} is still used by {len(exc.protected_objects)} section(s)"},
                status=status.HTTP_409_CONFLICT,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)


class ScheduleViewSet(ProtectedDeleteMixin, viewsets.ModelViewSet):
    queryset = Schedule.objects.all()
    serializer_class = ScheduleSerializer


class SemesterViewSet(ProtectedDeleteMixin, viewsets.ModelViewSet):
    queryset = Semester.objects.all()
    serializer_class = SemesterSerializer

    def list(self, request, *args, **kwargs):
        semesters = order_semesters(self.filter_queryset(self.get_queryset()), winter=WINTER_LAST)
        return Response(self.get_serializer(semesters, many=True).data)

    @action(detail=False, methods=["get"], url_path=r"lookup/(?P<season>[A-Za-z]+)/(?P<year>\d{4})")
    def lookup(self, request, season=None, year=None):
        semester = get_object_or_404(Semester, season=season.capitalize(), year=int(year))
        return Response({"semesterId": semester.pk})


class CourseViewSet(CascadeDeleteMixin, viewsets.ModelViewSet):
    queryset = Course.objects.select_related("department")
    serializer_class = CourseSerializer
    lookup_field = "code"
    delete_service = services.delete_course

    def get_queryset(self):
        queryset = super().get_queryset()
        department = self.request.query_params.get("department")
        if department:
            queryset = queryset.filter(department_id=department)
        return queryset

    @action(detail=True, methods=["get"], url_path="is-elective")
    def is_elective(self, request, code=None):
        return Response({"isElective": self.get_object().is_elective})

    @action(detail=True, methods=["get"], url_path=r"is-major/(?P<student_id>\d+)")
    def is_major(self, request, code=None, student_id=None):
        course = self.get_object()
        student = get_object_or_404(Student, pk=student_id)
        return Response({"isMajor": course.department_id == student.department_id})


class FacultyViewSet(CascadeDeleteMixin, viewsets.ModelViewSet):
    queryset = Faculty.objects.select_related("department")
    serializer_class = FacultySerializer
    delete_service = services.delete_faculty

    @action(detail=True, methods=["get"])
    def semesters(self, request, pk=None):
        faculty = self.get_object()
        return Response(services.faculty_semester_labels(faculty.pk))

    @action(detail=True, methods=["get"])
    def sections(self, request, pk=None):
        faculty = self.get_object()
        sections = Section.objects.filter(faculty=faculty).select_related("course", "semester", "schedule")
        semester = request.query_params.get("semester")
        if semester:
            sections = sections.filter(semester_id=semester)
        return Response(SectionSerializer(sections, many=True).data)


class StudentViewSet(CascadeDeleteMixin, viewsets.ModelViewSet):
    queryset = Student.objects.select_related("department")
    serializer_class = StudentSerializer
    delete_service = services.delete_student

    def get_queryset(self):
        queryset = super().get_queryset()
        department = self.request.query_params.get("department")
        if department:
            queryset = queryset.filter(department_id=department)
        return queryset

    @action(detail=True, methods=["get"])
    def semesters(self, request, pk=None):
        student = self.get_object()
        return Response(services.student_semester_labels(student.pk))

    @action(detail=True, methods=["get"])
    def enrollments(self, request, pk=None):
        student = self.get_object()
        enrollments = student.enrollments.select_related("section__course", "section__semester")
        return Response(EnrollmentSerializer(enrollments, many=True).data)


class SectionViewSet(CascadeDeleteMixin, viewsets.ModelViewSet):
    queryset = Section.objects.select_related("course", "semester", "schedule", "classroom", "faculty")
    serializer_class = SectionSerializer
    delete_service = services.delete_section

    def get_queryset(self):
        queryset = super().get_queryset()
        params = self.request.query_params
        if params.get("semester"):
            queryset = queryset.filter(semester_id=params["semester"])
        if params.get("course"):
            queryset = queryset.filter(course__code=params["course"])
        return queryset

    @action(detail=True, methods=["get"])
    def students(self, request, pk=None):
        section = self.get_object()
        enrollments = section.enrollments.select_related("student").order_by("student__last_name")
        return Response(
            [
                {
                    "enrollmentId": enrollment.pk,
                    "studentId": enrollment.student_id,
                    "firstName": enrollment.student.first_name,
                    "lastName": enrollment.student.last_name,
                    "grade": enrollment.grade,
                }
                for enrollment in enrollments
            ]
        )


class EnrollmentViewSet(viewsets.ModelViewSet):
    queryset = Enrollment.objects.select_related("student", "section__course", "section__semester")
    serializer_class = EnrollmentSerializer

    def get_serializer_class(self):
        if self.action == "partial_update":
            return GradeSerializer
        return super().get_serializer_class()

    @action(
        detail=False,
        methods=["get"],
        url_path=r"is-enrolled/(?P<student_id>\d+)/(?P<section_id>\d+)",
    )
    def is_enrolled(self, request, student_id=None, section_id=None):
        exists = Enrollment.objects.filter(student_id=student_id, section_id=section_id).exists()
        return Response({"isEnrolled": exists})


class AccountViewSet(viewsets.ModelViewSet):
    queryset = Account.objects.select_related("user")
    serializer_class = AccountSerializer


@api_view(["GET"])
def account_role(request, username):
    account = get_object_or_404(Account.objects.select_related("user"), user__username=username)
    return Response({"username": username, "role": account.role})


@api_view(["GET"])
def gpa_analysis_grades(request):
    params = request.query_params
    try:
        rows = services.gpa_analysis_grades(
            semester=params.get("semesterId", params.get("semester_id")),
            gender=params.get("gender"),
        )
    except DatabaseError:
        logger.exception("Error fetching grades for GPA analysis")
        return Response(
            {"error": "Failed to fetch grades for GPA analysis"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return Response(rows)


@api_view(["GET"])
def enrollment_counts_by_department(request):
    raw = request.query_params.get("semesters", "")
    labels = [label.strip() for label in raw.split(",") if label.strip()]
    try:
        counts = services.enrollment_counts_by_department(labels)
    except DatabaseError:
        logger.exception("Error fetching enrollment counts by department")
        return Response(
            {"error": "Failed to fetch enrollment counts"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return Response(counts)
