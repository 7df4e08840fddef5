"""Database and API models using Pydantic for validation."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    """Naive UTC timestamp, the form MongoDB hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class MongoModel(BaseModel):
    """Stored as snake_case, served to the browser as camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


QuestionType = Literal["single-word", "short-answer", "long-answer"]
UserRole = Literal["student", "teacher"]


# ============ USER ============
class User(MongoModel):
    user_id: str
    name: str
    email: str
    role: UserRole
    grade: Optional[str] = None  # students only
    created_at: datetime = Field(default_factory=utcnow)


class UserCreate(MongoModel):
    name: str
    email: str
    role: UserRole = "student"
    grade: Optional[str] = None

    @model_validator(mode="after")
    def _students_need_grade(self):
        if self.role == "student" and not self.grade:
            raise ValueError("grade is required for students")
        return self


# ============ EXAM ============
class Question(MongoModel):
    id: str
    type: QuestionType
    text: str
    marks: int = Field(ge=0)
    correct_answer: Optional[str] = None  # single-word only

    @model_validator(mode="after")
    def _single_word_needs_answer(self):
        if self.type == "single-word" and not self.correct_answer:
            raise ValueError(f"single-word question {self.id} has no correct answer")
        return self


class Exam(MongoModel):
    exam_id: str
    title: str
    subject: str
    grade: str
    time_limit: int  # minutes
    questions: List[Question] = []
    instructions: List[str] = []
    created_by: str
    created_at: datetime = Field(default_factory=utcnow)


class ExamCreate(MongoModel):
    title: str
    subject: str
    grade: str
    time_limit: int = Field(gt=0)
    questions: List[Question] = Field(min_length=1)
    instructions: List[str] = []
    created_by: str

    @model_validator(mode="after")
    def _unique_question_ids(self):
        ids = [q.id for q in self.questions]
        if len(ids) != len(set(ids)):
            raise ValueError("question ids must be unique within an exam")
        return self


# ============ SUBMISSION ============
class GradedAnswer(MongoModel):
    question_id: str
    answer: str
    marks: int = 0
    possible_marks: int
    feedback: str = ""
    graded: bool = False
    grading_details: Dict[str, Any] = {}


class OverallFeedback(MongoModel):
    strength_areas: List[str] = []
    improvement_areas: List[str] = []


class Submission(MongoModel):
    submission_id: str
    student_id: str
    exam_id: str
    answers: List[GradedAnswer] = []
    start_time: datetime
    submission_time: datetime
    total_marks: int = 0
    total_possible_marks: int
    percentage: int = 0
    feedback: str = ""
    overall_feedback: OverallFeedback = Field(default_factory=OverallFeedback)


class GradeSubmissionRequest(MongoModel):
    # Optional so that absent fields produce the 400 the browser expects
    exam_id: Optional[str] = None
    student_id: Optional[str] = None
    answers: Optional[Dict[str, str]] = None
    start_time: Optional[datetime] = None


class GradeSubmissionResponse(MongoModel):
    success: bool = True
    submission_id: str
    total_marks: int
    total_possible_marks: int
    percentage: int
    overall_feedback: str
    strength_areas: List[str]
    improvement_areas: List[str]


# ============ MONTHLY REPORT ============
class SubjectProgress(MongoModel):
    subject: str
    exam_count: int
    average_score: int
    strengths: List[str] = []
    weaknesses: List[str] = []
    analysis: str = ""


class MonthlyReport(MongoModel):
    report_id: str
    student_id: str
    month: int = Field(ge=1, le=12)
    year: int
    exam_results: List[str] = []  # submission ids
    subject_progress: List[SubjectProgress] = []
    overall_score: int
    overall_percentage: int
    monthly_assessment: str
    progress_evaluation: str
    recommended_actions: List[str] = []
    improvement_from_previous_month: Optional[int] = None
    created_at: datetime = Field(default_factory=utcnow)


class MonthlyReportRequest(MongoModel):
    student_id: Optional[str] = None
    month: Optional[int] = None
    year: Optional[int] = None


class MonthlyReportResponse(MongoModel):
    success: bool = True
    report_id: str
    overall_percentage: int
    monthly_assessment: str
    progress_evaluation: str
    recommended_actions: List[str]
    improvement_percentage: Optional[int] = None
    subject_progress: List[SubjectProgress]
