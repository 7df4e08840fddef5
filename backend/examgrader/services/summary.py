"""
Exam summary service - totals a graded exam and asks Gemini for an overall
assessment with strengths and areas for improvement.
"""

import logging
from typing import Any, Dict, List

from ..utils import format_percentage
from .prompts import PromptBuilder
from .response_parser import ResponseParser

logger = logging.getLogger(__name__)

NO_OVERALL_FEEDBACK = "No overall feedback provided."


class ExamSummaryService:
    """Builds the overall feedback stored with a submission."""

    LABELS = ["OVERALL_FEEDBACK", "STRENGTH_AREAS", "IMPROVEMENT_AREAS"]

    def __init__(self, llm_client):
        self.llm = llm_client
        self.parser = ResponseParser()

    async def summarize(
        self,
        student_name: str,
        exam_title: str,
        questions: List[Dict[str, Any]],
        answers: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """
        Summarize one graded exam.

        Args:
            questions: ``{"id", "text", "marks", "type"}`` per exam question
            answers: ``{"question_id", "answer", "marks", "feedback"}`` per graded answer

        Returns:
            {
                "overall_feedback": "...",
                "strength_areas": [...],
                "improvement_areas": [...],
                "total_marks": 12,
                "total_possible": 20,
                "percentage": 60
            }
        """
        total_marks = sum(a["marks"] for a in answers)
        total_possible = sum(q["marks"] for q in questions)
        percentage = format_percentage(total_marks, total_possible)

        summary = {
            "overall_feedback": "",
            "strength_areas": [],
            "improvement_areas": [],
            "total_marks": total_marks,
            "total_possible": total_possible,
            "percentage": percentage,
        }

        prompt = PromptBuilder.build_exam_summary_prompt(
            student_name=student_name,
            exam_title=exam_title,
            questions=questions,
            answers=answers,
            total_marks=total_marks,
            total_possible=total_possible,
            percentage=percentage,
        )

        try:
            response = await self.llm.generate(prompt)
        except Exception as e:
            logger.error(f"⚠️  Error generating exam summary: {e}")
            return summary

        sections = self.parser.extract_sections(response, self.LABELS)
        summary["overall_feedback"] = sections.get("OVERALL_FEEDBACK") or NO_OVERALL_FEEDBACK
        summary["strength_areas"] = self.parser.parse_list(sections.get("STRENGTH_AREAS"))
        summary["improvement_areas"] = self.parser.parse_list(sections.get("IMPROVEMENT_AREAS"))
        return summary
