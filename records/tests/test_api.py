from unittest import mock

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from rest_framework import status
from rest_framework.test import APITestCase

from records.models import Account, Enrollment, Section, Semester, Student

from .helpers import CampusMixin

User = get_user_model()


class ReportApiTests(CampusMixin, APITestCase):
    def test_catalogue(self):
        response = self.client.get("/api/reports/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 12)
        top = next(entry for entry in response.data if entry["slug"] == "top-performing-students")
        self.assertEqual(top["filters"], ["departmentId", "minGpa"])
        self.assertEqual(top["chart"], {"type": "bar", "labelIndices": [0, 1], "valueIndex": 2})

    def test_report_with_filters_and_decimals(self):
        response = self.client.get(
            "/api/reports/average-gpa-per-department/",
            {"gender": "Female", "semesterId": "Fall2024", "decimals": "1"},
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["report"], "Average GPA Analysis by Department")
        self.assertEqual(response.data["headers"], ["Department", "Year", "Season", "Gender", "Average GPA"])
        self.assertEqual(response.data["rows"][0], ["Computer Science", 2024, "Fall", "Female", 3.5])
        self.assertEqual(response.data["chart"]["labels"][0], "Computer Science 2024 Fall Female")

    def test_unknown_report_is_404(self):
        response = self.client.get("/api/reports/no-such-report/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_database_failure_is_500_without_rows(self):
        with mock.patch("records.views.run_report", side_effect=DatabaseError("down")):
            with self.assertLogs("records.views", level="ERROR"):
                response = self.client.get("/api/reports/students-on-probation/")
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {"error": "Failed to fetch report"})


class RecordApiTests(CampusMixin, APITestCase):
    def test_semesters_listed_newest_first(self):
        Semester.objects.create(year=2025, season="Summer")
        response = self.client.get("/api/semesters/")
        self.assertEqual(
            [row["label"] for row in response.data],
            ["Fall2025", "Summer2025", "Spring2025", "Fall2024"],
        )

    def test_semester_lookup(self):
        response = self.client.get("/api/semesters/lookup/Fall/2024/")
        self.assertEqual(response.data, {"semesterId": self.fall24.pk})
        missing = self.client.get("/api/semesters/lookup/Winter/1999/")
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)

    def test_student_detail_includes_gpa(self):
        response = self.client.get(f"/api/students/{self.alice.pk}/")
        self.assertEqual(response.data["gpa"], 3.5)
        response = self.client.get(f"/api/students/{self.dan.pk}/")
        self.assertIsNone(response.data["gpa"])

    def test_student_semesters_and_enrollments(self):
        response = self.client.get(f"/api/students/{self.bob.pk}/semesters/")
        self.assertEqual(response.data, ["Spring2025", "Fall2024"])
        response = self.client.get(f"/api/students/{self.bob.pk}/enrollments/")
        self.assertEqual(len(response.data), 2)

    def test_faculty_semesters(self):
        response = self.client.get(f"/api/faculty/{self.carol.pk}/semesters/")
        self.assertEqual(response.data, ["Spring2025", "Fall2024"])

    def test_section_students(self):
        response = self.client.get(f"/api/sections/{self.sec_a.pk}/students/")
        self.assertEqual([row["lastName"] for row in response.data], ["Brown", "Smith"])

    def test_is_enrolled(self):
        response = self.client.get(f"/api/enrollments/is-enrolled/{self.alice.pk}/{self.sec_a.pk}/")
        self.assertEqual(response.data, {"isEnrolled": True})
        response = self.client.get(f"/api/enrollments/is-enrolled/{self.dan.pk}/{self.sec_a.pk}/")
        self.assertEqual(response.data, {"isEnrolled": False})

    def test_grade_update(self):
        enrollment = Enrollment.objects.get(student=self.erin)
        response = self.client.patch(f"/api/enrollments/{enrollment.pk}/", {"grade": "B+"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        enrollment.refresh_from_db()
        self.assertEqual(enrollment.grade, "B+")

    def test_create_section_with_inline_semester_and_schedule(self):
        response = self.client.post(
            "/api/sections/",
            {
                "course": self.calculus.pk,
                "year": 2026,
                "season": "Spring",
                "day_of_week": "Wednesday",
                "start_time": "13:00",
                "end_time": "14:30",
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["semester_label"], "Spring2026")
        self.assertEqual(response.data["schedule_detail"]["day_of_week"], "Wednesday")

    def test_create_section_without_semester_is_400(self):
        response = self.client.post(
            "/api/sections/",
            {"course": self.calculus.pk, "schedule": self.tue_nine.pk},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_department_cascades(self):
        response = self.client.delete(f"/api/departments/{self.cs.pk}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Section.objects.count(), 1)
        self.assertFalse(Student.objects.filter(department_id=self.cs.pk).exists())

    def test_delete_course_by_code(self):
        response = self.client.delete("/api/courses/CS201/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["deleted"]["sections"], 1)

    def test_delete_missing_student_is_404(self):
        response = self.client.delete("/api/students/999999/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_account_role(self):
        user = User.objects.create_user(username="carol", password="x")
        Account.objects.create(user=user, role="faculty", faculty=self.carol)
        response = self.client.get("/api/accounts/carol/role/")
        self.assertEqual(response.data, {"username": "carol", "role": "faculty"})
        self.assertEqual(self.client.get("/api/accounts/nobody/role/").status_code, status.HTTP_404_NOT_FOUND)

    def test_enrollment_counts_by_department(self):
        response = self.client.get("/api/enrollment-counts-by-department/", {"semesters": "Fall2024,Spring2025"})
        self.assertEqual(response.data, {"Computer Science": 2, "Mathematics": 2})

    def test_gpa_analysis_grades(self):
        response = self.client.get("/api/gpa-analysis-grades/", {"gender": "Male"})
        self.assertEqual(sorted(row["grade"] for row in response.data), ["D", "F"])

    def test_course_is_elective(self):
        self.structures.course_type = "Elective"
        self.structures.save()
        self.assertEqual(self.client.get("/api/courses/CS201/is-elective/").data, {"isElective": True})
        self.assertEqual(self.client.get("/api/courses/CS101/is-elective/").data, {"isElective": False})
        self.assertEqual(self.client.get("/api/courses/NOPE1/is-elective/").status_code, status.HTTP_404_NOT_FOUND)

    def test_course_is_major_for_student(self):
        response = self.client.get(f"/api/courses/CS101/is-major/{self.alice.pk}/")
        self.assertEqual(response.data, {"isMajor": True})
        response = self.client.get(f"/api/courses/MATH101/is-major/{self.alice.pk}/")
        self.assertEqual(response.data, {"isMajor": False})
        response = self.client.get("/api/courses/CS101/is-major/999999/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_deleting_a_semester_in_use_is_a_conflict(self):
        with self.assertLogs("records.views", level="WARNING"):
            response = self.client.delete(f"/api/semesters/{self.fall24.pk}/")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn("error", response.data)
        self.assertTrue(Semester.objects.filter(pk=self.fall24.pk).exists())

        response = self.client.delete(f"/api/semesters/{self.fall25.pk}/")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_deleting_a_schedule_in_use_is_a_conflict(self):
        with self.assertLogs("records.views", level="WARNING"):
            response = self.client.delete(f"/api/schedules/{self.tue_nine.pk}/")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
