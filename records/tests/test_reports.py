from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from records.models import Department, Student
from records.reports import REPORTS, UnknownReport, run_report
from records.reports.runner import recent_semester_ids, resolve_semester_id

from .helpers import CampusMixin


class ReportRunTests(CampusMixin, TestCase):
    def run_report(self, slug, filters=None, year=2025):
        return run_report(slug, filters, current_year=year)

    def test_every_report_returns_rows_as_wide_as_its_headers(self):
        for report in REPORTS:
            with self.subTest(report=report.slug):
                result = self.run_report(report.slug)
                for row in result.rows:
                    self.assertEqual(len(row), len(report.headers))
                for record in result.records():
                    self.assertEqual(list(record), list(report.columns))

    def test_average_gpa_for_female_students_in_fall_2024(self):
        result = self.run_report(
            "average-gpa-per-department", {"gender": "Female", "semesterId": str(self.fall24.pk)}
        )
        self.assertEqual(
            result.rows,
            [
                ["Computer Science", 2024, "Fall", "Female", 3.5],
                ["Mathematics", 2024, "Fall", "Female", 1.0],
            ],
        )

    def test_semester_filter_accepts_a_label(self):
        by_label = self.run_report("average-gpa-per-department", {"gender": "Female", "semester_id": "Fall2024"})
        by_id = self.run_report("average-gpa-per-department", {"gender": "Female", "semesterId": self.fall24.pk})
        self.assertEqual(by_label.rows, by_id.rows)

    def test_all_filters_match_no_filters(self):
        everything = self.run_report("average-gpa-per-department", {"gender": "All", "semesterId": "all"})
        self.assertEqual(everything.rows, self.run_report("average-gpa-per-department").rows)
        seasons = [(row[1], row[2]) for row in everything.rows if row[0] == "Computer Science"]
        self.assertEqual(seasons[0], (2025, "Spring"))

    def test_probation_is_below_two_and_ascending(self):
        result = self.run_report("students-on-probation")
        self.assertEqual(result.rows, [["Erin", "Fox", 0.0], ["Bob", "Brown", 0.5]])
        self.assertTrue(all(row[2] < 2.0 for row in result.rows))

    def test_top_students(self):
        rows = self.run_report("top-performing-students").rows
        self.assertLessEqual(len(rows), 10)
        gpas = [row[2] for row in rows]
        self.assertEqual(gpas, sorted(gpas, reverse=True))
        self.assertEqual(rows[0][:2], ["Alice", "Smith"])

        strong = self.run_report("top-performing-students", {"minGpa": "2"}).rows
        self.assertEqual([row[0] for row in strong], ["Alice", "Carla"])

        lenient = self.run_report("top-performing-students", {"minGpa": "abc"}).rows
        self.assertEqual(lenient, rows)

        math_only = self.run_report("top-performing-students", {"departmentId": self.math.pk}).rows
        self.assertEqual({row[3] for row in math_only}, {"Mathematics"})

    def test_timetable_conflicts_report_each_pair_once(self):
        result = self.run_report("timetable-conflicts")
        self.assertEqual(result.rows, [["Alice", "Smith", self.sec_a.pk, self.sec_b.pk]])
        self.assertIsNone(result.chart())

    def test_inactive_students(self):
        rows = self.run_report("inactive-students").rows
        ids = [row[2] for row in rows]
        self.assertIn(self.dan.pk, ids)
        self.assertNotIn(self.bob.pk, ids)
        self.assertEqual(ids, sorted(ids))

    def test_department_enrollment_over_recent_semesters(self):
        result = self.run_report("students-enrolled-per-department")
        self.assertEqual(result.rows, [["Computer Science", 4], ["Mathematics", 2]])
        self.assertEqual(
            result.chart(),
            {"type": "bar", "label": "Student Count", "labels": ["Computer Science", "Mathematics"], "values": [4.0, 2.0]},
        )

    def test_popular_courses(self):
        rows = self.run_report("most-popular-courses").rows
        self.assertEqual(
            rows,
            [["Introduction to Programming", 3], ["Calculus I", 2], ["Data Structures", 1]],
        )

    def test_overbooked_classrooms_for_the_current_year(self):
        self.assertEqual(self.run_report("overbooked-classrooms", year=2024).rows, [[101, 2, 3, 1]])
        self.assertEqual(self.run_report("overbooked-classrooms", year=2030).rows, [])

    def test_faculty_load_needs_more_than_three_sections(self):
        self.assertEqual(self.run_report("faculty-with-courses").rows, [])

    def test_course_trend_is_chronological(self):
        result = self.run_report("course-performance-trends", {"courseCode": "CS101"})
        self.assertEqual(
            result.rows,
            [
                [2024, "Fall", "Introduction to Programming", 2.0],
                [2025, "Spring", "Introduction to Programming", 1.0],
            ],
        )
        self.assertEqual(result.chart()["type"], "line")

    def test_section_fill_rate(self):
        rows = self.run_report("section-fill-rate", {"sectionId": self.sec_a.pk}).rows
        self.assertEqual(rows, [[self.sec_a.pk, "Introduction to Programming", 2, 2, 100.0]])

    def test_grade_distribution(self):
        rows = self.run_report("grade-distribution", {"courseCode": "MATH101"}).rows
        self.assertEqual(rows, [[2024, "Fall", "N/A", "C", 1], [2024, "Fall", "N/A", "Ungraded", 1]])

        by_instructor = self.run_report("grade-distribution", {"facultyId": self.carol.pk}).rows
        self.assertEqual(by_instructor[0][:2], [2025, "Spring"])
        self.assertEqual({row[2] for row in by_instructor}, {"Carol Jones"})

    def test_unknown_report(self):
        with self.assertRaises(UnknownReport):
            run_report("no-such-report")

    def test_database_errors_propagate(self):
        with mock.patch("records.reports.runner.connection") as connection:
            connection.cursor.return_value.__enter__.return_value.execute.side_effect = DatabaseError("boom")
            with self.assertRaises(DatabaseError):
                self.run_report("students-on-probation")

    def test_resolve_semester_id(self):
        self.assertEqual(resolve_semester_id("Fall2024"), self.fall24.pk)
        self.assertEqual(resolve_semester_id(str(self.spring25.pk)), self.spring25.pk)
        self.assertIsNone(resolve_semester_id("Winter1999"))
        self.assertIsNone(resolve_semester_id("All"))

    def test_recent_semester_ids(self):
        self.assertEqual(recent_semester_ids(2), [self.fall25.pk, self.spring25.pk])


class EmptyWindowTests(TestCase):
    def test_no_semesters_means_no_rows(self):
        department = Department.objects.create(name="History")
        Student.objects.create(first_name="Ann", last_name="Lee", email="ann@example.edu", department=department)
        self.assertEqual(run_report("inactive-students").rows, [])
        self.assertEqual(run_report("students-enrolled-per-department").rows, [])
