"""
Record lookups shared by the services and routes.

Documents are fetched with ``{"_id": 0}`` and validated into models, so
callers never see Mongo's ObjectId.
"""

from typing import get_args

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError

from ..errors import (
    ExamNotFoundError,
    InvalidExamError,
    StudentNotFoundError,
    TeacherNotFoundError,
    UnsupportedQuestionTypeError,
)
from ..models import Exam, QuestionType, User

SUPPORTED_QUESTION_TYPES = get_args(QuestionType)


async def find_user(db: AsyncIOMotorDatabase, user_id: str):
    doc = await db.users.find_one({"user_id": user_id}, {"_id": 0})
    return User.model_validate(doc) if doc else None


async def find_student(db: AsyncIOMotorDatabase, student_id: str) -> User:
    """Return the user only if it exists and has the student role."""
    user = await find_user(db, student_id)
    if user is None or user.role != "student":
        raise StudentNotFoundError()
    return user


async def find_teacher(db: AsyncIOMotorDatabase, teacher_id: str) -> User:
    user = await find_user(db, teacher_id)
    if user is None or user.role != "teacher":
        raise TeacherNotFoundError()
    return user


async def find_exam(db: AsyncIOMotorDatabase, exam_id: str) -> Exam:
    """
    Load an exam, rejecting any that cannot be graded.

    Raises:
        ExamNotFoundError: no such exam
        UnsupportedQuestionTypeError: a question has a type outside the known set
        InvalidExamError: the document fails validation otherwise
    """
    doc = await db.exams.find_one({"exam_id": exam_id}, {"_id": 0})
    if not doc:
        raise ExamNotFoundError()

    for question in doc.get("questions", []):
        if question.get("type") not in SUPPORTED_QUESTION_TYPES:
            raise UnsupportedQuestionTypeError(str(question.get("type")))

    try:
        return Exam.model_validate(doc)
    except ValidationError as e:
        raise InvalidExamError(f"Exam {exam_id} is not gradable: {e.errors()[0]['msg']}") from e
