"""Grade model - One grade of a student in a course"""
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, Index
from sqlalchemy.sql import func

from app.database import Base


class Grade(Base):
    """Grade row; NULL grade means enrolled but not graded yet"""

    __tablename__ = "grades"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(
        Integer,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
    )
    course_id = Column(
        Integer,
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
    )
    grade = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # No unique constraint on (student_id, course_id): duplicates are passed through
    __table_args__ = (
        Index("idx_grades_student_course", "student_id", "course_id"),
        Index("idx_grades_course", "course_id"),
    )

    def __repr__(self):
        return f"<Grade(id={self.id}, student={self.student_id}, course={self.course_id}, grade={self.grade})>"
