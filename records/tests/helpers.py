"""Shared fixture data for the database-backed tests."""
import datetime

from records.models import (
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


class CampusMixin:
    """A small campus.

    Alice sits two overlapping Monday sections in Fall 2024, Bob and Erin are
    on probation, and Dan never enrolled.
    """

    @classmethod
    def setUpTestData(cls):
        cls.cs = Department.objects.create(name="Computer Science")
        cls.math = Department.objects.create(name="Mathematics")

        cls.fall24 = Semester.objects.create(year=2024, season="Fall")
        cls.spring25 = Semester.objects.create(year=2025, season="Spring")
        cls.fall25 = Semester.objects.create(year=2025, season="Fall")

        cls.intro = Course.objects.create(code="CS101", title="Introduction to Programming", credit_hours=3, department=cls.cs)
        cls.structures = Course.objects.create(code="CS201", title="Data Structures", credit_hours=3, department=cls.cs)
        cls.calculus = Course.objects.create(code="MATH101", title="Calculus I", credit_hours=4, department=cls.math)

        cls.mon_nine = Schedule.objects.create(
            day_of_week="Monday", start_time=datetime.time(9, 0), end_time=datetime.time(10, 30)
        )
        cls.mon_ten = Schedule.objects.create(
            day_of_week="Monday", start_time=datetime.time(10, 0), end_time=datetime.time(11, 0)
        )
        cls.tue_nine = Schedule.objects.create(
            day_of_week="Tuesday", start_time=datetime.time(9, 0), end_time=datetime.time(10, 0)
        )

        cls.small_room = Classroom.objects.create(room_number=101, capacity=2, building="Main Hall", department=cls.cs)
        cls.big_room = Classroom.objects.create(room_number=201, capacity=30, building="Science Wing", department=cls.math)

        cls.carol = Faculty.objects.create(full_name="Carol Jones", email="carol@example.edu", department=cls.cs)

        cls.sec_a = Section.objects.create(
            course=cls.intro, semester=cls.fall24, schedule=cls.mon_nine, classroom=cls.small_room, faculty=cls.carol
        )
        cls.sec_b = Section.objects.create(
            course=cls.structures, semester=cls.fall24, schedule=cls.mon_ten, classroom=cls.small_room, faculty=cls.carol
        )
        cls.sec_c = Section.objects.create(
            course=cls.calculus, semester=cls.fall24, schedule=cls.tue_nine, classroom=cls.big_room
        )
        cls.sec_d = Section.objects.create(
            course=cls.intro, semester=cls.spring25, schedule=cls.tue_nine, classroom=cls.small_room, faculty=cls.carol
        )

        cls.alice = cls.make_student("Alice", "Smith", "Female", cls.cs)
        cls.bob = cls.make_student("Bob", "Brown", "Male", cls.cs)
        cls.carla = cls.make_student("Carla", "Diaz", "Female", cls.math)
        cls.dan = cls.make_student("Dan", "Evans", "Male", cls.math)
        cls.erin = cls.make_student("Erin", "Fox", "Female", cls.math)

        for student, section, grade in [
            (cls.alice, cls.sec_a, "A"),
            (cls.alice, cls.sec_b, "B"),
            (cls.bob, cls.sec_a, "F"),
            (cls.bob, cls.sec_d, "D"),
            (cls.carla, cls.sec_c, "C"),
            (cls.erin, cls.sec_c, "Ungraded"),
        ]:
            Enrollment.objects.create(student=student, section=section, grade=grade)

    @classmethod
    def make_student(cls, first_name, last_name, gender, department):
        return Student.objects.create(
            first_name=first_name,
            last_name=last_name,
            gender=gender,
            email=f"{first_name.lower()}@example.edu",
            department=department,
        )
