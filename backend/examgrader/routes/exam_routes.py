"""
Exam management routes.

Endpoints:
- POST /api/exams
- GET /api/exams/{exam_id}
"""

import logging

from fastapi import APIRouter, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..errors import GradingRequestError
from ..models import Exam, ExamCreate
from ..services.records import find_exam, find_teacher
from ..utils import new_id

logger = logging.getLogger(__name__)


def create_exam_routes(db: AsyncIOMotorDatabase) -> APIRouter:
    """Create exam routes with database connection."""

    router = APIRouter(prefix="/api/exams", tags=["exams"])

    @router.post("", response_model=Exam, status_code=201)
    async def create_exam(payload: ExamCreate):
        """Create an exam. Only teachers can author exams."""
        try:
            await find_teacher(db, payload.created_by)

            exam = Exam(exam_id=new_id("exam"), **payload.model_dump())
            await db.exams.insert_one(exam.model_dump())
            logger.info(f"✅ Exam {exam.exam_id} created with {len(exam.questions)} questions")
            return exam

        except GradingRequestError as e:
            raise HTTPException(status_code=e.status_code, detail=e.detail)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @router.get("/{exam_id}")
    async def get_exam(exam_id: str, include_answers: bool = False):
        """
        Get an exam.

        Reference answers stay hidden unless ``include_answers`` is set, so
        the instructions and take pages can use this directly.
        """
        try:
            exam = await find_exam(db, exam_id)
        except GradingRequestError as e:
            raise HTTPException(status_code=e.status_code, detail=e.detail)

        exclude = None if include_answers else {"questions": {"__all__": {"correct_answer"}}}
        return exam.model_dump(mode="json", by_alias=True, exclude=exclude)

    return router
