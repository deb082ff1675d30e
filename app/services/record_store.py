"""
Student Record Store

Async data access for students, courses, grades and attendance, plus the
outer-join query the aggregator consumes.

Storage failures are raised as RecordStoreError, missing rows as
RecordNotFoundError, so callers can tell "query failed" from "no data".
"""
import logging
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy import delete, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.student import Student
from app.models.course import Course
from app.models.grade import Grade
from app.models.attendance import Attendance

logger = logging.getLogger(__name__)

# Columns GET /students may be sorted by; anything else falls back to id
STUDENT_SORT_COLUMNS = ("id", "name", "surname")

# Distinct (student, course) pairs that have a grade or attendance row
ENROLLMENT_PAIRS_SQL = """
    SELECT student_id, course_id FROM grades
    UNION
    SELECT student_id, course_id FROM attendance
"""

STUDENT_ROWS_SQL = f"""
    SELECT
        s.id AS student_id,
        s.name AS name,
        s.surname AS surname,
        e.course_id AS course_id,
        c.name AS course_name,
        g.grade AS grade,
        a.attended AS attended,
        a.total AS total
    FROM students s
    LEFT JOIN ({ENROLLMENT_PAIRS_SQL}) e ON e.student_id = s.id
    LEFT JOIN courses c ON c.id = e.course_id
    LEFT JOIN grades g ON g.student_id = s.id AND g.course_id = e.course_id
    LEFT JOIN attendance a ON a.student_id = s.id AND a.course_id = e.course_id
"""


class StudentRecordsError(Exception):
    """Base error for record store failures"""


class RecordNotFoundError(StudentRecordsError):
    """Requested student or course does not exist"""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} {entity_id} not found")


class RecordStoreError(StudentRecordsError):
    """Query against the database failed"""


class RecordStore:
    """CRUD and join queries over one AsyncSession"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _run(self, statement, params: Optional[Dict[str, Any]] = None):
        try:
            return await self.session.execute(statement, params or {})
        except SQLAlchemyError as e:
            logger.error(f"Query failed: {e}", exc_info=True)
            raise RecordStoreError(str(e)) from e

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Flush failed: {e}", exc_info=True)
            raise RecordStoreError(str(e)) from e

    # Students

    async def list_students(self, sort: str = "id") -> List[Student]:
        """List students ordered by one of STUDENT_SORT_COLUMNS (default id)"""
        if sort not in STUDENT_SORT_COLUMNS:
            sort = "id"
        column = getattr(Student, sort)
        result = await self._run(select(Student).order_by(column, Student.id))
        return list(result.scalars().all())

    async def get_student(self, student_id: int) -> Student:
        result = await self._run(select(Student).where(Student.id == student_id))
        student = result.scalar_one_or_none()
        if student is None:
            raise RecordNotFoundError("student", student_id)
        return student

    async def create_student(self, name: str, surname: str) -> Student:
        student = Student(name=name, surname=surname)
        self.session.add(student)
        await self._flush()
        logger.info(f"Created student {student.id}")
        return student

    async def update_student(self, student_id: int, name: str, surname: str) -> Student:
        student = await self.get_student(student_id)
        student.name = name
        student.surname = surname
        await self._flush()
        return student

    async def delete_student(self, student_id: int) -> None:
        """Delete a student together with their grade and attendance rows"""
        await self.get_student(student_id)
        await self.delete_student_grades(student_id)
        await self.delete_student_attendance(student_id)
        await self._run(delete(Student).where(Student.id == student_id))
        logger.info(f"Deleted student {student_id}")

    # Courses

    async def list_courses(self) -> List[Course]:
        result = await self._run(select(Course).order_by(Course.id))
        return list(result.scalars().all())

    async def get_course(self, course_id: int) -> Course:
        result = await self._run(select(Course).where(Course.id == course_id))
        course = result.scalar_one_or_none()
        if course is None:
            raise RecordNotFoundError("course", course_id)
        return course

    async def create_course(self, name: str) -> Course:
        course = Course(name=name)
        self.session.add(course)
        await self._flush()
        logger.info(f"Created course {course.id}")
        return course

    async def delete_course(self, course_id: int) -> None:
        """Delete a course together with every grade and attendance row in it"""
        await self.get_course(course_id)
        await self._run(delete(Grade).where(Grade.course_id == course_id))
        await self._run(delete(Attendance).where(Attendance.course_id == course_id))
        await self._run(delete(Course).where(Course.id == course_id))
        logger.info(f"Deleted course {course_id}")

    async def list_course_summaries(self) -> List[Dict[str, Any]]:
        """
        List courses with the number of distinct enrolled students.

        Returns:
            list: [{"id", "name", "student_count"}] ordered by course id
        """
        query = text(f"""
            SELECT
                c.id AS id,
                c.name AS name,
                COUNT(DISTINCT e.student_id) AS student_count
            FROM courses c
            LEFT JOIN ({ENROLLMENT_PAIRS_SQL}) e ON e.course_id = c.id
            GROUP BY c.id, c.name
            ORDER BY c.id
        """)
        result = await self._run(query)
        return [
            {"id": row.id, "name": row.name, "student_count": row.student_count or 0}
            for row in result.fetchall()
        ]

    async def list_course_students(self, course_id: int) -> List[Dict[str, Any]]:
        """Students with a grade or attendance row in the course, by surname then name"""
        await self.get_course(course_id)
        query = text(f"""
            SELECT DISTINCT s.id AS id, s.name AS name, s.surname AS surname
            FROM students s
            JOIN ({ENROLLMENT_PAIRS_SQL}) e ON e.student_id = s.id
            WHERE e.course_id = :course_id
            ORDER BY s.surname, s.name
        """)
        result = await self._run(query, {"course_id": course_id})
        return [
            {"id": row.id, "name": row.name, "surname": row.surname}
            for row in result.fetchall()
        ]

    # Enrollment facts

    async def add_grade(self, student_id: int, course_id: int, grade: Optional[float]) -> Grade:
        await self.get_student(student_id)
        await self.get_course(course_id)
        row = Grade(student_id=student_id, course_id=course_id, grade=grade)
        self.session.add(row)
        await self._flush()
        return row

    async def add_attendance(self, student_id: int, course_id: int, attended: int, total: int) -> Attendance:
        await self.get_student(student_id)
        await self.get_course(course_id)
        row = Attendance(student_id=student_id, course_id=course_id, attended=attended, total=total)
        self.session.add(row)
        await self._flush()
        return row

    async def delete_student_grades(self, student_id: int) -> int:
        result = await self._run(delete(Grade).where(Grade.student_id == student_id))
        return result.rowcount or 0

    async def delete_student_attendance(self, student_id: int) -> int:
        result = await self._run(delete(Attendance).where(Attendance.student_id == student_id))
        return result.rowcount or 0

    async def enroll_student(
        self,
        student_id: int,
        course_id: int,
        grade: Optional[float] = None,
        attended: int = 0,
        total: int = 0,
    ) -> None:
        """
        Add a student to a course.

        Writes both a grade row and an attendance row, so the (student, course)
        pair shows up even when nothing has been graded or tracked yet.
        """
        await self.add_grade(student_id, course_id, grade)
        await self.add_attendance(student_id, course_id, attended, total)
        logger.info(f"Enrolled student {student_id} in course {course_id}")

    async def remove_student_from_course(self, student_id: int, course_id: int) -> None:
        """Drop every grade and attendance row of the student in the course"""
        await self.get_student(student_id)
        await self.get_course(course_id)
        await self._run(
            delete(Grade).where(Grade.student_id == student_id, Grade.course_id == course_id)
        )
        await self._run(
            delete(Attendance).where(
                Attendance.student_id == student_id, Attendance.course_id == course_id
            )
        )
        logger.info(f"Removed student {student_id} from course {course_id}")

    async def replace_student_record(
        self,
        student_id: int,
        name: str,
        surname: str,
        entries: Iterable[Dict[str, Any]],
    ) -> None:
        """
        Overwrite a student's names and enrollment facts.

        Existing grade and attendance rows are dropped; then each entry adds a
        grade row when its grade is not None and an attendance row when its
        total is > 0. Entries with neither are dropped from the record.

        Args:
            student_id: Student to update
            name: New name
            surname: New surname
            entries: Dicts with course_id, grade, attended, total
        """
        await self.update_student(student_id, name, surname)
        await self.delete_student_grades(student_id)
        await self.delete_student_attendance(student_id)

        for entry in entries:
            course_id = entry["course_id"]
            grade = entry.get("grade")
            total = entry.get("total") or 0
            if grade is not None:
                await self.add_grade(student_id, course_id, grade)
            if total > 0:
                await self.add_attendance(student_id, course_id, entry.get("attended") or 0, total)

        logger.info(f"Replaced record of student {student_id}")

    # Join query

    async def fetch_student_rows(self, student_id: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Outer-join rows of student -> course -> grade/attendance.

        One row per (student, course) pair, plus a single row with null course
        fields for each student without enrollments. Ordered by student id,
        then course id.

        Args:
            student_id: Restrict to one student, None for all students

        Returns:
            list: Row mappings for aggregate_student_rows
        """
        if student_id is None:
            query = text(STUDENT_ROWS_SQL + " ORDER BY s.id, e.course_id")
            result = await self._run(query)
        else:
            query = text(STUDENT_ROWS_SQL + " WHERE s.id = :student_id ORDER BY s.id, e.course_id")
            result = await self._run(query, {"student_id": student_id})

        return [dict(row._mapping) for row in result.fetchall()]
