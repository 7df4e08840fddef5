"""
Grading routes.

Endpoints:
- POST /api/exams/grade
- GET /api/submissions/{submission_id}
- GET /api/exams/{exam_id}/submissions
- GET /api/students/{student_id}/submissions
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..errors import GradingRequestError, MissingFieldsError
from ..models import GradeSubmissionRequest, GradeSubmissionResponse, Submission
from ..services import GradeOrchestrationService
from ..services.records import find_exam, find_student

logger = logging.getLogger(__name__)


def create_grading_routes(db: AsyncIOMotorDatabase, llm_client) -> APIRouter:
    """Create grading routes with database connection and Gemini client."""

    router = APIRouter(prefix="/api", tags=["grading"])
    orchestrator = GradeOrchestrationService(db, llm_client)

    @router.post("/exams/grade", response_model=GradeSubmissionResponse)
    async def grade_exam(request: GradeSubmissionRequest):
        """
        Grade a submitted exam.

        Every question is graded by Gemini before the submission is stored,
        so the response already carries the final score.
        """
        try:
            if not request.exam_id or not request.student_id or request.answers is None or not request.start_time:
                raise MissingFieldsError()

            submission = await orchestrator.grade_submission(
                exam_id=request.exam_id,
                student_id=request.student_id,
                answers=request.answers,
                start_time=request.start_time,
            )

            return GradeSubmissionResponse(
                submission_id=submission.submission_id,
                total_marks=submission.total_marks,
                total_possible_marks=submission.total_possible_marks,
                percentage=submission.percentage,
                overall_feedback=submission.feedback,
                strength_areas=submission.overall_feedback.strength_areas,
                improvement_areas=submission.overall_feedback.improvement_areas,
            )

        except GradingRequestError as e:
            raise HTTPException(status_code=e.status_code, detail=e.detail)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"❌ Error grading exam: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to grade exam")

    @router.get("/submissions/{submission_id}", response_model=Submission)
    async def get_submission(submission_id: str):
        """Get one graded submission."""
        doc = await db.submissions.find_one({"submission_id": submission_id}, {"_id": 0})
        if not doc:
            raise HTTPException(status_code=404, detail="Submission not found")
        return Submission.model_validate(doc)

    @router.get("/exams/{exam_id}/submissions", response_model=List[Submission])
    async def list_exam_submissions(exam_id: str):
        """List all submissions for an exam, newest first."""
        try:
            await find_exam(db, exam_id)
        except GradingRequestError as e:
            raise HTTPException(status_code=e.status_code, detail=e.detail)

        cursor = db.submissions.find({"exam_id": exam_id}, {"_id": 0}).sort("submission_time", -1)
        return [Submission.model_validate(doc) for doc in await cursor.to_list(length=None)]

    @router.get("/students/{student_id}/submissions", response_model=List[Submission])
    async def list_student_submissions(student_id: str):
        """List a student's submissions, newest first."""
        try:
            await find_student(db, student_id)
        except GradingRequestError as e:
            raise HTTPException(status_code=e.status_code, detail=e.detail)

        cursor = db.submissions.find({"student_id": student_id}, {"_id": 0}).sort("submission_time", -1)
        return [Submission.model_validate(doc) for doc in await cursor.to_list(length=None)]

    return router
