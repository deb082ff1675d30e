"""SQLAlchemy ORM Models for the student records schema"""
from app.models.student import Student
from app.models.course import Course
from app.models.grade import Grade
from app.models.attendance import Attendance

__all__ = [
    "Student",
    "Course",
    "Grade",
    "Attendance",
]
