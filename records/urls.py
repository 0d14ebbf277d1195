from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

app_name = "records"

router = DefaultRouter()
router.register("departments", views.DepartmentViewSet)
router.register("classrooms", views.ClassroomViewSet)
router.register("schedules", views.ScheduleViewSet)
router.register("semesters", views.SemesterViewSet)
router.register("courses", views.CourseViewSet)
router.register("faculty", views.FacultyViewSet)
router.register("students", views.StudentViewSet)
router.register("sections", views.SectionViewSet)
router.register("enrollments", views.EnrollmentViewSet)
router.register("accounts", views.AccountViewSet)

urlpatterns = [
    path("reports/", views.report_list, name="report-list"),
    path("reports/<slug:slug>/", views.report_detail, name="report-detail"),
    path("accounts/<str:username>/role/", views.account_role, name="account-role"),
    path("gpa-analysis-grades/", views.gpa_analysis_grades, name="gpa-analysis-grades"),
    path(
        "enrollment-counts-by-department/",
        views.enrollment_counts_by_department,
        name="enrollment-counts-by-department",
    ),
    path("", include(router.urls)),
]
