"""
Student API Endpoints

CRUD for students plus the aggregated, rated student records.
"""
import logging
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Path, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.services.record_store import RecordNotFoundError, RecordStore, RecordStoreError
from app.services.rating_calculator import RatedStudentView, get_rating_calculator
from app.services.student_aggregator import aggregate_student_rows

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/students", tags=["students"])


# Pydantic models for request/response validation


class StudentIn(BaseModel):
    """Name and surname of a student"""
    name: str = Field(..., min_length=1, max_length=100)
    surname: str = Field(..., min_length=1, max_length=100)


class StudentOut(BaseModel):
    """Plain student without enrollment facts"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    surname: str


class CreatedResponse(BaseModel):
    """Id assigned by the store"""
    id: int


class EnrollmentIn(BaseModel):
    """Grade and attendance of the student in one course"""
    course_id: int
    grade: Optional[float] = None
    attended: int = Field(0, ge=0)
    total: int = Field(0, ge=0)


class StudentRecordIn(StudentIn):
    """Full student record as edited in the student table"""
    courses: List[EnrollmentIn] = Field(default_factory=list)


def _not_found(e: RecordNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


def _store_failure(action: str, e: Exception) -> HTTPException:
    logger.error(f"Failed to {action}: {e}", exc_info=True)
    return HTTPException(status_code=500, detail=f"Failed to {action}: {str(e)}")


# API Endpoints


@router.get("", response_model=List[StudentOut])
async def list_students(
    sort: str = Query("id", description="Sort column: id, name or surname"),
    db: AsyncSession = Depends(get_db),
) -> List[Any]:
    """List students; unknown sort columns fall back to id"""
    try:
        return await RecordStore(db).list_students(sort)
    except RecordStoreError as e:
        raise _store_failure("list students", e)


@router.post("", response_model=CreatedResponse)
async def create_student(payload: StudentIn, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    try:
        student = await RecordStore(db).create_student(payload.name, payload.surname)
        return {"id": student.id}
    except RecordStoreError as e:
        raise _store_failure("create student", e)


@router.get("/full", response_model=List[RatedStudentView])
async def list_student_records(db: AsyncSession = Depends(get_db)) -> List[RatedStudentView]:
    """
    Get every student with their courses, grades, attendance and rating.

    Students are ordered by id; students without enrollments have an empty
    course list and rating 0.
    """
    try:
        rows = await RecordStore(db).fetch_student_rows()
    except RecordStoreError as e:
        raise _store_failure("load student records", e)

    views = aggregate_student_rows(rows)
    return get_rating_calculator().rate_students(views)


@router.get("/{student_id}", response_model=StudentOut)
async def get_student(
    student_id: int = Path(..., description="Student id"),
    db: AsyncSession = Depends(get_db),
) -> Any:
    try:
        return await RecordStore(db).get_student(student_id)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except RecordStoreError as e:
        raise _store_failure(f"load student {student_id}", e)


@router.get("/{student_id}/full", response_model=RatedStudentView)
async def get_student_record(
    student_id: int = Path(..., description="Student id"),
    db: AsyncSession = Depends(get_db),
) -> RatedStudentView:
    """Get one student with their courses and rating"""
    try:
        rows = await RecordStore(db).fetch_student_rows(student_id)
    except RecordStoreError as e:
        raise _store_failure(f"load record of student {student_id}", e)

    views = aggregate_student_rows(rows)
    if not views:
        raise HTTPException(status_code=404, detail=f"Student {student_id} not found")

    return get_rating_calculator().rate_student(views[0])


@router.put("/{student_id}", response_model=StudentOut)
async def update_student(
    payload: StudentIn,
    student_id: int = Path(..., description="Student id"),
    db: AsyncSession = Depends(get_db),
) -> Any:
    try:
        return await RecordStore(db).update_student(student_id, payload.name, payload.surname)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except RecordStoreError as e:
        raise _store_failure(f"update student {student_id}", e)


@router.put("/{student_id}/record", response_model=RatedStudentView)
async def replace_student_record(
    payload: StudentRecordIn,
    student_id: int = Path(..., description="Student id"),
    db: AsyncSession = Depends(get_db),
) -> RatedStudentView:
    """
    Save an edited student row: names, grades and attendance in one request.

    Courses without a grade and with total 0 are dropped from the record.
    Returns the re-aggregated record with its new rating.
    """
    store = RecordStore(db)
    try:
        await store.replace_student_record(
            student_id,
            payload.name,
            payload.surname,
            [entry.model_dump() for entry in payload.courses],
        )
        rows = await store.fetch_student_rows(student_id)
    except RecordNotFoundError as e:
        raise _not_found(e)
    except RecordStoreError as e:
        raise _store_failure(f"save record of student {student_id}", e)

    return get_rating_calculator().rate_student(aggregate_student_rows(rows)[0])


@router.delete("/{student_id}")
async def delete_student(
    student_id: int = Path(..., description="Student id"),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    """Delete a student with all of their grades and attendance"""
    try:
        await RecordStore(db).delete_student(student_id)
        return {"deleted": student_id}
    except RecordNotFoundError as e:
        raise _not_found(e)
    except RecordStoreError as e:
        raise _store_failure(f"delete student {student_id}", e)


@router.delete("/{student_id}/grades")
async def delete_student_grades(
    student_id: int = Path(..., description="Student id"),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    try:
        deleted = await RecordStore(db).delete_student_grades(student_id)
        return {"deleted": deleted}
    except RecordStoreError as e:
        raise _store_failure(f"delete grades of student {student_id}", e)


@router.delete("/{student_id}/attendance")
async def delete_student_attendance(
    student_id: int = Path(..., description="Student id"),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    try:
        deleted = await RecordStore(db).delete_student_attendance(student_id)
        return {"deleted": deleted}
    except RecordStoreError as e:
        raise _store_failure(f"delete attendance of student {student_id}", e)


@router.delete("/{student_id}/courses/{course_id}")
async def remove_student_from_course(
    student_id: int = Path(..., description="Student id"),
    course_id: int = Path(..., description="Course id"),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    """Remove a student from a course (drops their grade and attendance there)"""
    try:
        await RecordStore(db).remove_student_from_course(student_id, course_id)
        return {"student_id": student_id, "course_id": course_id}
    except RecordNotFoundError as e:
        raise _not_found(e)
    except RecordStoreError as e:
        raise _store_failure(f"remove student {student_id} from course {course_id}", e)
