"""
Orchestration service - coordinates grading of one exam submission.

FLOW:
1. Load the exam (reject unknown question types before grading anything)
2. Verify the student and that no submission exists for (student, exam)
3. For each question, in exam order: grade the answer with Gemini
4. Summarize the graded exam (totals + overall feedback)
5. Insert the submission; the unique (student_id, exam_id) index settles
   any race with a concurrent duplicate
"""

import logging
from datetime import datetime
from typing import Dict

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from ..errors import AlreadySubmittedError
from ..models import GradedAnswer, OverallFeedback, Submission, utcnow
from ..utils import new_id, to_naive_utc
from .grading import GradingService
from .records import find_exam, find_student
from .summary import ExamSummaryService

logger = logging.getLogger(__name__)


class GradeOrchestrationService:
    """Orchestrates the answers → grading → summary → persistence workflow."""

    def __init__(self, db: AsyncIOMotorDatabase, llm_client):
        self.db = db
        self.grader = GradingService(llm_client)
        self.summarizer = ExamSummaryService(llm_client)

    async def grade_submission(
        self,
        exam_id: str,
        student_id: str,
        answers: Dict[str, str],
        start_time: datetime,
    ) -> Submission:
        """
        Grade and persist a student's exam submission.

        Args:
            answers: question id → raw answer text; unanswered questions grade as blank

        Raises:
            ExamNotFoundError, UnsupportedQuestionTypeError, InvalidExamError,
            StudentNotFoundError, AlreadySubmittedError
        """
        exam = await find_exam(self.db, exam_id)
        student = await find_student(self.db, student_id)

        existing = await self.db.submissions.find_one(
            {"student_id": student_id, "exam_id": exam_id},
            {"_id": 0, "submission_id": 1},
        )
        if existing:
            raise AlreadySubmittedError()

        logger.info(f"📝 Grading exam {exam_id} for student {student_id} ({len(exam.questions)} questions)")

        graded_answers = []
        for question in exam.questions:
            student_answer = answers.get(question.id, "")
            result = await self.grader.grade_question(question, student_answer)
            graded_answers.append(
                GradedAnswer(
                    question_id=question.id,
                    answer=student_answer,
                    marks=result["marks"],
                    possible_marks=question.marks,
                    feedback=result["feedback"],
                    graded=True,
                    grading_details=result["grading_details"],
                )
            )

        summary = await self.summarizer.summarize(
            student_name=student.name,
            exam_title=exam.title,
            questions=[
                {"id": q.id, "text": q.text, "marks": q.marks, "type": q.type}
                for q in exam.questions
            ],
            answers=[
                {
                    "question_id": a.question_id,
                    "answer": a.answer,
                    "marks": a.marks,
                    "feedback": a.feedback,
                }
                for a in graded_answers
            ],
        )

        submission = Submission(
            submission_id=new_id("sub"),
            student_id=student_id,
            exam_id=exam_id,
            answers=graded_answers,
            start_time=to_naive_utc(start_time),
            submission_time=utcnow(),
            total_marks=summary["total_marks"],
            total_possible_marks=summary["total_possible"],
            percentage=summary["percentage"],
            feedback=summary["overall_feedback"],
            overall_feedback=OverallFeedback(
                strength_areas=summary["strength_areas"],
                improvement_areas=summary["improvement_areas"],
            ),
        )

        try:
            await self.db.submissions.insert_one(submission.model_dump())
        except DuplicateKeyError:
            logger.warning(f"⚠️  Concurrent duplicate submission for exam {exam_id} by {student_id}")
            raise AlreadySubmittedError()

        logger.info(
            f"✅ Submission {submission.submission_id}: "
            f"{submission.total_marks}/{submission.total_possible_marks} ({submission.percentage}%)"
        )
        return submission
