"""Course model - Courses students can be enrolled in"""
from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.sql import func

from app.database import Base


class Course(Base):
    """Course; many-to-many with Student through grades and attendance"""

    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Course(id={self.id}, name={self.name})>"
