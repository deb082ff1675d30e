"""Student model - Durable student identity"""
from sqlalchemy import Column, String, Integer, DateTime, Index
from sqlalchemy.sql import func

from app.database import Base


class Student(Base):
    """Student with name and surname; enrollment facts live in grades/attendance"""

    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    surname = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # Indexes for sorted listings
    __table_args__ = (
        Index("idx_students_surname_name", "surname", "name"),
    )

    def __repr__(self):
        return f"<Student(id={self.id}, name={self.name}, surname={self.surname})>"
