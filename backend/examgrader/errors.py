"""
Request errors raised by the grading and reporting services.

Each error carries the HTTP status the routes answer with. Failures of the
Gemini call are not represented here: they degrade to default grades.
"""

from typing import Any, Optional


class GradingRequestError(Exception):
    """Base class for request validation and conflict errors."""

    status_code: int = 400

    def __init__(self, message: str, extra: Optional[dict] = None):
        self.message = message
        self.extra = extra or {}
        super().__init__(message)

    @property
    def detail(self) -> Any:
        if self.extra:
            return {"message": self.message, **self.extra}
        return self.message


class MissingFieldsError(GradingRequestError):
    status_code = 400

    def __init__(self, message: str = "Missing required fields"):
        super().__init__(message)


class InvalidRequestError(GradingRequestError):
    status_code = 400


class ExamNotFoundError(GradingRequestError):
    status_code = 404

    def __init__(self, message: str = "Exam not found"):
        super().__init__(message)


class StudentNotFoundError(GradingRequestError):
    status_code = 404

    def __init__(self, message: str = "Student not found"):
        super().__init__(message)


class TeacherNotFoundError(GradingRequestError):
    status_code = 404

    def __init__(self, message: str = "Teacher not found"):
        super().__init__(message)


class AlreadySubmittedError(GradingRequestError):
    status_code = 409

    def __init__(self, message: str = "You have already submitted this exam"):
        super().__init__(message)


class ReportExistsError(GradingRequestError):
    status_code = 409

    def __init__(self, report_id: str, message: str = "Monthly report already exists"):
        self.report_id = report_id
        super().__init__(message, {"reportId": report_id})


class NoResultsError(GradingRequestError):
    status_code = 404

    def __init__(self, message: str = "No exam results found for the specified month"):
        super().__init__(message)


class UnsupportedQuestionTypeError(GradingRequestError):
    status_code = 422

    def __init__(self, question_type: str):
        self.question_type = question_type
        super().__init__(f"Unsupported question type: {question_type}")


class InvalidExamError(GradingRequestError):
    """Stored exam document that does not describe a gradable exam."""

    status_code = 422
