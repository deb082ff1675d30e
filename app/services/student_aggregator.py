"""
Student Record Aggregator

Groups the flat student -> course -> grade/attendance outer-join rows into one
nested StudentView per student. Pure transform: no I/O, no shared state.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from pydantic import BaseModel, Field


class CourseEntry(BaseModel):
    """
    One enrollment fact (grade and/or attendance) of a student in a course.

    Values are kept as the store returned them: a grade may be an int, a
    float (e.g. 87.5 stored under SQLite's type affinity), a string or None.
    """
    course_id: Optional[int] = None
    course_name: Optional[str] = None
    grade: Optional[Union[int, float, str]] = None
    attended: Optional[Union[int, float]] = None
    total: Optional[Union[int, float]] = None


class StudentView(BaseModel):
    """Student with all of their enrollment facts, built fresh per request"""
    id: int
    name: Optional[str] = None
    surname: Optional[str] = None
    courses: List[CourseEntry] = Field(default_factory=list)


def _course_entry(row: Mapping[str, Any]) -> CourseEntry:
    return CourseEntry(
        course_id=row.get("course_id"),
        course_name=row.get("course_name"),
        grade=row.get("grade"),
        attended=row.get("attended"),
        total=row.get("total"),
    )


def aggregate_student_rows(rows: Iterable[Mapping[str, Any]]) -> List[StudentView]:
    """
    Build one StudentView per student from outer-join rows.

    Each row carries student_id, name, surname, course_id, course_name,
    grade, attended and total. A row whose course_id is None (student without
    enrollments) adds no course entry; every other row adds exactly one,
    duplicates included.

    Args:
        rows: Join rows as mappings, e.g. ``Row._mapping`` or plain dicts

    Returns:
        list: StudentViews in order of first appearance of each student_id
    """
    views: Dict[Any, StudentView] = {}
    order: List[Any] = []

    for row in rows:
        student_id = row["student_id"]
        view = views.get(student_id)
        if view is None:
            view = StudentView(
                id=student_id,
                name=row.get("name"),
                surname=row.get("surname"),
            )
            views[student_id] = view
            order.append(student_id)

        if row.get("course_id") is not None:
            view.courses.append(_course_entry(row))

    return [views[student_id] for student_id in order]
