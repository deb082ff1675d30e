"""
Rating API Endpoints

Provides the student leaderboard: every student with their rating,
highest rating first.
"""
import logging
import time
from datetime import datetime
from typing import Any, Dict, List
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.services.record_store import RecordStore, RecordStoreError
from app.services.rating_calculator import RatedStudentView, get_rating_calculator
from app.services.student_aggregator import aggregate_student_rows

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/rating", tags=["rating"])


class RatingFormula(BaseModel):
    """Constants of the rating formula"""
    grade_weight: float
    attendance_weight: float
    scale: int
    max_rating: int


class RatingResponse(BaseModel):
    """Ranked students with request metadata"""
    data: List[RatedStudentView]
    metadata: Dict[str, Any]


@router.get("", response_model=RatingResponse)
async def get_rating(db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    """
    Get all students ranked by rating (highest first).

    Students with equal ratings keep id order.
    """
    start_time = time.time()

    try:
        rows = await RecordStore(db).fetch_student_rows()
    except RecordStoreError as e:
        logger.error(f"Error loading students for rating: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to calculate rating: {str(e)}")

    ranked = get_rating_calculator().rank_students(aggregate_student_rows(rows))
    calculation_time_ms = (time.time() - start_time) * 1000

    return {
        "data": ranked,
        "metadata": {
            "timestamp": datetime.utcnow().isoformat(),
            "total_students": len(ranked),
            "calculation_time_ms": round(calculation_time_ms, 2),
        },
    }


@router.get("/formula", response_model=RatingFormula)
async def get_rating_formula() -> Dict[str, Any]:
    """Weights and bounds used to compute ratings, for the rating info panel"""
    calculator = get_rating_calculator()
    return {
        "grade_weight": calculator.formula_weights["grade"],
        "attendance_weight": calculator.formula_weights["attendance"],
        "scale": calculator.scale,
        "max_rating": calculator.max_rating,
    }
