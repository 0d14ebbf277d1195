"""Admin configuration for the university records domain."""
from django.contrib import admin, messages

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
    UNGRADED,
)
from .reports.grades import student_gpa


class EnrollmentInline(admin.TabularInline):
    model = Enrollment
    extra = 0
    fields = ("section", "get_semester", "grade")
    readonly_fields = ("get_semester",)
    autocomplete_fields = ("section",)

    @admin.display(description="Semester")
    def get_semester(self, obj):
        return obj.section.semester.label


class SectionInline(admin.TabularInline):
    model = Section
    extra = 0
    fields = ("course", "semester", "schedule", "classroom", "faculty")
    show_change_link = True


class CascadeDeleteAdmin(admin.ModelAdmin):
    """Send deletes through the transactional cascades instead of the ORM collector."""

    delete_service = None
    delete_lookup = "pk"

    def _delete(self, obj):
        type(self).delete_service(getattr(obj, self.delete_lookup))

    def delete_model(self, request, obj):
        self._delete(obj)

    def delete_queryset(self, request, queryset):
        for obj in queryset:
            self._delete(obj)


@admin.register(Department)
class DepartmentAdmin(CascadeDeleteAdmin):
    list_display = ("name", "course_count", "student_count")
    search_fields = ("name",)
    delete_service = services.delete_department

    @admin.display(description="Courses")
    def course_count(self, obj):
        return obj.courses.count()

    @admin.display(description="Students")
    def student_count(self, obj):
        return obj.students.count()


@admin.register(Classroom)
class ClassroomAdmin(CascadeDeleteAdmin):
    list_display = ("room_number", "room_type", "capacity", "building", "department")
    list_filter = ("room_type", "building")
    search_fields = ("room_number", "building")
    delete_service = services.delete_classroom


@admin.register(Schedule)
class ScheduleAdmin(admin.ModelAdmin):
    list_display = ("day_of_week", "start_time", "end_time")
    list_filter = ("day_of_week",)


@admin.register(Semester)
class SemesterAdmin(admin.ModelAdmin):
    list_display = ("label", "year", "season")
    list_filter = ("season",)
    search_fields = ("season", "year")


@admin.register(Course)
class CourseAdmin(CascadeDeleteAdmin):
    list_display = ("code", "title", "credit_hours", "course_type", "department")
    list_filter = ("department", "course_type")
    search_fields = ("code", "title")
    inlines = [SectionInline]
    delete_service = services.delete_course
    delete_lookup = "code"


@admin.register(Faculty)
class FacultyAdmin(CascadeDeleteAdmin):
    list_display = ("full_name", "designation", "email", "department")
    list_filter = ("department", "designation")
    search_fields = ("full_name", "email")
    delete_service = services.delete_faculty


@admin.register(Student)
class StudentAdmin(CascadeDeleteAdmin):
    list_display = ("last_name", "first_name", "gender", "email", "department", "gpa")
    list_filter = ("department", "gender")
    search_fields = ("first_name", "last_name", "email")
    inlines = [EnrollmentInline]
    delete_service = services.delete_student

    @admin.display(description="GPA")
    def gpa(self, obj):
        value = student_gpa(obj)
        return "-" if value is None else f"{value:.2f}"


@admin.register(Section)
class SectionAdmin(CascadeDeleteAdmin):
    list_display = ("id", "course", "semester", "schedule", "classroom", "faculty", "enrolled")
    list_filter = ("semester", "course__department")
    search_fields = ("course__code", "course__title", "faculty__full_name")
    list_select_related = ("course", "semester", "schedule", "classroom", "faculty")
    delete_service = services.delete_section
    actions = ["mark_ungraded"]

    @admin.display(description="Enrolled")
    def enrolled(self, obj):
        return obj.enrollments.count()

    @admin.action(description="Reset grades of the selected sections to Ungraded")
    def mark_ungraded(self, request, queryset):
        updated = Enrollment.objects.filter(section__in=queryset).update(grade=UNGRADED)
        self.message_user(request, f"Reset {updated} enrollment grade(s).", level=messages.SUCCESS)


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ("student", "section", "grade")
    list_filter = ("grade", "section__semester")
    search_fields = ("student__first_name", "student__last_name", "section__course__code")
    autocomplete_fields = ("student", "section")


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "faculty", "student")
    list_filter = ("role",)
    search_fields = ("user__username",)
