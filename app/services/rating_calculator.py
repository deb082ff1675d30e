"""
Student Rating Calculator

Calculates a student rating (0-1000) from their aggregated record:
- Average grade (50% weight)
- Average attendance percentage (50% weight)
- Course count multiplier: log10(course_count + 1), rewarding breadth with
  diminishing returns

Pure and stateless, safe to share between concurrent requests.
"""
import math
import logging
from typing import Iterable, List, Optional

from app.services.student_aggregator import CourseEntry, StudentView

logger = logging.getLogger(__name__)


class RatedStudentView(StudentView):
    """StudentView with its computed rating"""
    rating: int = 0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _grade_value(course: CourseEntry) -> Optional[float]:
    """Numeric grade of a course entry; None when ungraded or not a finite number"""
    grade = course.grade
    if grade is None or grade == "":
        return None
    if isinstance(grade, str):
        try:
            grade = float(grade)
        except ValueError:
            return None
    if not math.isfinite(grade):
        return None
    return grade


class RatingCalculator:
    """Calculate bounded student ratings from grades, attendance and course count"""

    def __init__(self):
        """Initialize rating calculator"""
        self.formula_weights = {
            "grade": 0.5,
            "attendance": 0.5,
        }
        self.scale = 10
        self.max_rating = 1000

    def average_grade(self, courses: List[CourseEntry]) -> float:
        """
        Mean grade over graded courses.

        Courses with a None or empty grade are skipped, as are string grades
        that do not parse as a number. Numeric strings such as "85" count.

        Returns:
            float: Average grade, 0 if no course is graded
        """
        grades = [grade for grade in map(_grade_value, courses) if grade is not None]
        if not grades:
            return 0.0
        return sum(grades) / len(grades)

    def average_attendance(self, courses: List[CourseEntry]) -> float:
        """
        Mean attendance percentage over courses with total > 0.

        Returns:
            float: Average of attended/total*100, 0 if attendance is not tracked anywhere
        """
        percents = [
            (course.attended or 0) / course.total * 100
            for course in courses
            if course.total and course.total > 0
        ]
        if not percents:
            return 0.0
        return sum(percents) / len(percents)

    def course_multiplier(self, course_count: int) -> float:
        """log10(course_count + 1) * 10; counts every course entry, graded or not"""
        return math.log10(course_count + 1) * 10

    def calculate_rating(self, view: StudentView) -> int:
        """
        Calculate 0-1000 rating for a single student.

        Formula:
            base = (0.5*avg_grade + 0.5*avg_attendance) * 10
            rating = round(base * log10(course_count + 1)), capped at 1000

        Args:
            view: Aggregated student record

        Returns:
            int: Rating 0-1000

        Edge cases:
            - No courses: 0
            - Courses without grades or tracked attendance: 0 regardless of count
            - Out-of-range grades propagate until the 1000 ceiling
        """
        courses = view.courses
        if not courses:
            return 0

        avg_grade = self.average_grade(courses)
        avg_attendance = self.average_attendance(courses)

        base_rating = (
            self.formula_weights["grade"] * avg_grade +
            self.formula_weights["attendance"] * avg_attendance
        ) * self.scale

        multiplier = self.course_multiplier(len(courses))
        rating = _round_half_up(base_rating * (multiplier / 10))

        return min(rating, self.max_rating)

    def rate_student(self, view: StudentView) -> RatedStudentView:
        """Attach the computed rating to a StudentView"""
        return RatedStudentView(**view.model_dump(), rating=self.calculate_rating(view))

    def rate_students(self, views: Iterable[StudentView]) -> List[RatedStudentView]:
        """Rate each view, keeping input order"""
        return [self.rate_student(view) for view in views]

    def rank_students(self, views: Iterable[StudentView]) -> List[RatedStudentView]:
        """
        Rate and sort students by rating, highest first.

        Ties keep their input order.
        """
        rated = self.rate_students(views)
        ranked = sorted(rated, key=lambda student: student.rating, reverse=True)
        logger.debug(f"Ranked {len(ranked)} students")
        return ranked


# Singleton instance
_rating_calculator_instance: Optional[RatingCalculator] = None


def get_rating_calculator() -> RatingCalculator:
    """Get singleton instance of RatingCalculator"""
    global _rating_calculator_instance
    if _rating_calculator_instance is None:
        _rating_calculator_instance = RatingCalculator()
    return _rating_calculator_instance
