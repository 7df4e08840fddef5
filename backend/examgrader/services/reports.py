"""
Monthly report service - aggregates a student's graded exams for one
calendar month and asks Gemini for the narrative.
"""

import calendar
import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from ..errors import NoResultsError, ReportExistsError
from ..models import MonthlyReport, SubjectProgress, Submission
from ..utils import format_percentage, month_window, new_id, previous_month, unique_in_order
from .prompts import PromptBuilder
from .records import find_student
from .response_parser import ResponseParser

logger = logging.getLogger(__name__)

UNKNOWN_SUBJECT = "Unknown"
ASSESSMENT_ERROR = "Error generating monthly assessment. Please review manually."
PROGRESS_ERROR = "Error generating overall progress evaluation."
NO_ASSESSMENT = "No monthly assessment provided."
NO_PROGRESS = "No overall progress evaluation provided."


def missing_analysis(subject: str) -> str:
    return f"No specific analysis available for {subject}"


class MonthlyReportService:
    """Generates and persists one MonthlyReport per (student, month, year)."""

    LABELS = ["MONTHLY_ASSESSMENT", "SUBJECT_ANALYSIS", "OVERALL_PROGRESS", "RECOMMENDED_ACTIONS"]

    # Phrases taken from each submission's feedback, and kept per subject
    PHRASES_PER_SUBMISSION = 2
    PHRASES_PER_SUBJECT = 3

    def __init__(self, db: AsyncIOMotorDatabase, llm_client):
        self.db = db
        self.llm = llm_client
        self.parser = ResponseParser()

    async def generate(self, student_id: str, month: int, year: int) -> MonthlyReport:
        """
        Build, narrate and persist the monthly report.

        Raises:
            StudentNotFoundError: unknown student or not a student
            ReportExistsError: a report for this month already exists
            NoResultsError: no submissions in the month
        """
        student = await find_student(self.db, student_id)

        existing = await self.db.monthly_reports.find_one(
            {"student_id": student_id, "month": month, "year": year},
            {"_id": 0, "report_id": 1},
        )
        if existing:
            raise ReportExistsError(existing["report_id"])

        submissions = await self._month_submissions(student_id, month, year)
        if not submissions:
            raise NoResultsError()

        logger.info(f"📊 Building {month}/{year} report for {student_id} from {len(submissions)} exams")

        exams = await self._exam_headers({s.exam_id for s in submissions})
        subject_progress, exam_results, totals = self._aggregate(submissions, exams)
        overall_score, overall_possible = totals
        overall_percentage = format_percentage(overall_score, overall_possible)

        baseline = await self._previous_percentage(student_id, month, year)
        improvement = overall_percentage - baseline if baseline is not None else None

        narrative = await self._narrate(
            student_name=student.name,
            student_grade=student.grade or "",
            month_label=f"{calendar.month_name[month]} {year}",
            exam_results=exam_results,
            subjects=[p.subject for p in subject_progress],
            overall_percentage=overall_percentage,
            improvement=improvement,
        )

        for progress in subject_progress:
            progress.analysis = narrative["subject_analysis"].get(
                progress.subject, missing_analysis(progress.subject)
            )

        report = MonthlyReport(
            report_id=new_id("rpt"),
            student_id=student_id,
            month=month,
            year=year,
            exam_results=[s.submission_id for s in submissions],
            subject_progress=subject_progress,
            overall_score=overall_score,
            overall_percentage=overall_percentage,
            monthly_assessment=narrative["monthly_assessment"],
            progress_evaluation=narrative["overall_progress"],
            recommended_actions=narrative["recommended_actions"],
            improvement_from_previous_month=improvement,
        )

        try:
            await self.db.monthly_reports.insert_one(report.model_dump())
        except DuplicateKeyError:
            winner = await self.db.monthly_reports.find_one(
                {"student_id": student_id, "month": month, "year": year},
                {"_id": 0, "report_id": 1},
            )
            raise ReportExistsError(winner["report_id"] if winner else "")

        logger.info(f"✅ Report {report.report_id}: {overall_percentage}%")
        return report

    async def _month_submissions(self, student_id: str, month: int, year: int) -> List[Submission]:
        start, end = month_window(month, year)
        cursor = self.db.submissions.find(
            {
                "student_id": student_id,
                "submission_time": {"$gte": start, "$lt": end},
            },
            {"_id": 0},
        ).sort("submission_time", 1)
        return [Submission.model_validate(doc) for doc in await cursor.to_list(length=None)]

    async def _exam_headers(self, exam_ids) -> Dict[str, Dict[str, Any]]:
        cursor = self.db.exams.find(
            {"exam_id": {"$in": list(exam_ids)}},
            {"_id": 0, "exam_id": 1, "title": 1, "subject": 1},
        )
        return {doc["exam_id"]: doc for doc in await cursor.to_list(length=None)}

    async def _previous_percentage(self, student_id: str, month: int, year: int) -> Optional[int]:
        prev_month, prev_year = previous_month(month, year)
        previous = await self.db.monthly_reports.find_one(
            {"student_id": student_id, "month": prev_month, "year": prev_year},
            {"_id": 0, "overall_percentage": 1},
        )
        return previous["overall_percentage"] if previous else None

    def _aggregate(self, submissions: List[Submission], exams: Dict[str, Dict[str, Any]]):
        """
        Group submissions by exam subject.

        Returns ``(subject_progress, exam_results, (total_score, total_possible))``.
        """
        by_subject: Dict[str, Dict[str, Any]] = {}
        exam_results = []
        total_score = 0
        total_possible = 0

        for submission in submissions:
            exam = exams.get(submission.exam_id, {})
            subject = exam.get("subject", UNKNOWN_SUBJECT)
            strengths = submission.overall_feedback.strength_areas
            weaknesses = submission.overall_feedback.improvement_areas

            bucket = by_subject.setdefault(
                subject,
                {"exam_count": 0, "score": 0, "possible": 0, "strengths": [], "weaknesses": []},
            )
            bucket["exam_count"] += 1
            bucket["score"] += submission.total_marks
            bucket["possible"] += submission.total_possible_marks
            bucket["strengths"].extend(strengths[: self.PHRASES_PER_SUBMISSION])
            bucket["weaknesses"].extend(weaknesses[: self.PHRASES_PER_SUBMISSION])

            total_score += submission.total_marks
            total_possible += submission.total_possible_marks

            exam_results.append({
                "exam_id": submission.exam_id,
                "exam_title": exam.get("title", submission.exam_id),
                "subject": subject,
                "date": submission.submission_time.date().isoformat(),
                "marks": submission.total_marks,
                "total_possible": submission.total_possible_marks,
                "percentage": format_percentage(submission.total_marks, submission.total_possible_marks),
                "strengths": strengths,
                "weaknesses": weaknesses,
            })

        subject_progress = [
            SubjectProgress(
                subject=subject,
                exam_count=bucket["exam_count"],
                average_score=format_percentage(bucket["score"], bucket["possible"]),
                strengths=unique_in_order(bucket["strengths"])[: self.PHRASES_PER_SUBJECT],
                weaknesses=unique_in_order(bucket["weaknesses"])[: self.PHRASES_PER_SUBJECT],
            )
            for subject, bucket in by_subject.items()
        ]
        return subject_progress, exam_results, (total_score, total_possible)

    async def _narrate(self, **prompt_args) -> Dict[str, Any]:
        prompt = PromptBuilder.build_monthly_report_prompt(**prompt_args)
        try:
            response = await self.llm.generate(prompt)
        except Exception as e:
            logger.error(f"⚠️  Error generating monthly progress report: {e}")
            return {
                "monthly_assessment": ASSESSMENT_ERROR,
                "subject_analysis": {},
                "overall_progress": PROGRESS_ERROR,
                "recommended_actions": [],
            }

        sections = self.parser.extract_sections(response, self.LABELS)
        return {
            "monthly_assessment": sections.get("MONTHLY_ASSESSMENT") or NO_ASSESSMENT,
            "subject_analysis": self.parser.parse_mapping(sections.get("SUBJECT_ANALYSIS")),
            "overall_progress": sections.get("OVERALL_PROGRESS") or NO_PROGRESS,
            "recommended_actions": self.parser.parse_list(sections.get("RECOMMENDED_ACTIONS")),
        }
