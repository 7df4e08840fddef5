"""Services for grading answers and building reports."""

from .prompts import PromptBuilder
from .response_parser import ResponseParser
from .grading import GradingService
from .summary import ExamSummaryService
from .orchestration import GradeOrchestrationService
from .reports import MonthlyReportService

__all__ = [
    "PromptBuilder",
    "ResponseParser",
    "GradingService",
    "ExamSummaryService",
    "GradeOrchestrationService",
    "MonthlyReportService"
]
