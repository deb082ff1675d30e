"""
Course API Endpoints

GET /api/v1/courses - Plain course list
GET /api/v1/courses/full - Courses with enrolled student counts
POST /api/v1/courses - Create a course
DELETE /api/v1/courses/{course_id} - Delete a course with its grades and attendance
GET /api/v1/courses/{course_id}/students - Students enrolled in a course
POST /api/v1/courses/add-student - Enroll a student in a course
"""
import logging
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Path
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.services.record_store import RecordNotFoundError, RecordStore, RecordStoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/courses", tags=["courses"])


class CourseIn(BaseModel):
    """New course"""
    name: str = Field(..., min_length=1, max_length=200)


class CourseOut(BaseModel):
    """Plain course"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class CourseSummary(BaseModel):
    """Course with the number of distinct enrolled students"""
    id: int
    name: str
    student_count: int = Field(..., ge=0)


class CourseStudent(BaseModel):
    """Student enrolled in a course"""
    id: int
    name: str
    surname: str


class AddStudentIn(BaseModel):
    """Enrollment of a student in a course with optional initial facts"""
    student_id: int
    course_id: int
    grade: Optional[float] = None
    attended: int = Field(0, ge=0)
    total: int = Field(0, ge=0)


@router.get("", response_model=List[CourseOut])
async def list_courses(db: AsyncSession = Depends(get_db)) -> List[Any]:
    try:
        return await RecordStore(db).list_courses()
    except RecordStoreError as e:
        logger.error(f"Error listing courses: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to list courses: {str(e)}")


@router.get("/full", response_model=List[CourseSummary])
async def list_course_summaries(db: AsyncSession = Depends(get_db)) -> List[Dict[str, Any]]:
    """Courses ordered by id with their student counts"""
    try:
        return await RecordStore(db).list_course_summaries()
    except RecordStoreError as e:
        logger.error(f"Error listing course summaries: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to list courses: {str(e)}")


@router.post("", response_model=CourseOut)
async def create_course(payload: CourseIn, db: AsyncSession = Depends(get_db)) -> Any:
    try:
        return await RecordStore(db).create_course(payload.name)
    except RecordStoreError as e:
        logger.error(f"Error creating course: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to create course: {str(e)}")


@router.post("/add-student")
async def add_student_to_course(payload: AddStudentIn, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    """
    Enroll a student in a course.

    Creates a grade row (possibly with null grade) and an attendance row, so
    the student is listed on the course right away.

    Raises:
        404: Student or course not found
    """
    try:
        await RecordStore(db).enroll_student(
            payload.student_id,
            payload.course_id,
            grade=payload.grade,
            attended=payload.attended,
            total=payload.total,
        )
        return {"student_id": payload.student_id, "course_id": payload.course_id}
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RecordStoreError as e:
        logger.error(f"Error enrolling student {payload.student_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to add student to course: {str(e)}")


@router.delete("/{course_id}")
async def delete_course(
    course_id: int = Path(..., description="Course id"),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    try:
        await RecordStore(db).delete_course(course_id)
        return {"deleted": course_id}
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RecordStoreError as e:
        logger.error(f"Error deleting course {course_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to delete course: {str(e)}")


@router.get("/{course_id}/students", response_model=List[CourseStudent])
async def list_course_students(
    course_id: int = Path(..., description="Course id"),
    db: AsyncSession = Depends(get_db),
) -> List[Dict[str, Any]]:
    """Students with a grade or attendance row in the course, by surname"""
    try:
        return await RecordStore(db).list_course_students(course_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RecordStoreError as e:
        logger.error(f"Error listing students of course {course_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to list course students: {str(e)}")
