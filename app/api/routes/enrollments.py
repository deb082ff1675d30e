"""
Grade and Attendance API Endpoints

POST /api/v1/grades - Record a grade of a student in a course
POST /api/v1/attendance - Record attended/total sessions of a student in a course
"""
import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.services.record_store import RecordNotFoundError, RecordStore, RecordStoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["enrollments"])


class GradeIn(BaseModel):
    student_id: int
    course_id: int
    grade: Optional[float] = None


class AttendanceIn(BaseModel):
    student_id: int
    course_id: int
    attended: int = Field(..., ge=0)
    total: int = Field(..., ge=0)


@router.post("/grades")
async def add_grade(payload: GradeIn, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    try:
        row = await RecordStore(db).add_grade(payload.student_id, payload.course_id, payload.grade)
        return {"id": row.id}
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RecordStoreError as e:
        logger.error(f"Error adding grade: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to add grade: {str(e)}")


@router.post("/attendance")
async def add_attendance(payload: AttendanceIn, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    """Attended may exceed total; the rating uses the ratio as given"""
    try:
        row = await RecordStore(db).add_attendance(
            payload.student_id, payload.course_id, payload.attended, payload.total
        )
        return {"id": row.id}
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RecordStoreError as e:
        logger.error(f"Error adding attendance: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to add attendance: {str(e)}")
