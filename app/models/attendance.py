"""Attendance model - Attended/total session counts per student and course"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, CheckConstraint, Index
from sqlalchemy.sql import func

from app.database import Base


class Attendance(Base):
    """Attendance row; total == 0 means attendance is not tracked"""

    __tablename__ = "attendance"

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
    attended = Column(Integer, CheckConstraint("attended >= 0"), nullable=False, default=0)
    total = Column(Integer, CheckConstraint("total >= 0"), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_attendance_student_course", "student_id", "course_id"),
        Index("idx_attendance_course", "course_id"),
    )

    def __repr__(self):
        return (
            f"<Attendance(id={self.id}, student={self.student_id}, course={self.course_id}, "
            f"attended={self.attended}/{self.total})>"
        )
