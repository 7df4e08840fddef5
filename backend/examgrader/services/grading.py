"""
Grading service - grades one answer per call using Gemini.

Three strategies keyed by question type. Whatever the model replies, the
awarded marks end up in ``[0, question.marks]``; a failed model call grades
the answer 0 with ``ERROR_FEEDBACK``.
"""

import logging
from typing import Any, Dict, Optional

from ..errors import UnsupportedQuestionTypeError
from ..models import Question
from .prompts import PromptBuilder
from .response_parser import ResponseParser

logger = logging.getLogger(__name__)

ERROR_FEEDBACK = "Error during grading. Please review manually."
BLANK_FEEDBACK = "No answer provided."


class GradingService:
    """Grades student answers against a per-type rubric using Gemini AI."""

    # Point caps per criterion; reply labels are the upper-cased keys
    SHORT_ANSWER_RUBRIC = {
        "accuracy": 5,
        "clarity": 3,
        "completeness": 2,
    }
    LONG_ANSWER_RUBRIC = {
        "content_accuracy": 5,
        "clarity_structure": 3,
        "grammar_language": 2,
        "depth_explanation": 5,
    }

    def __init__(
        self,
        llm_client,
        short_answer_rubric: Optional[Dict[str, int]] = None,
        long_answer_rubric: Optional[Dict[str, int]] = None,
    ):
        self.llm = llm_client
        self.parser = ResponseParser()
        self.short_answer_rubric = short_answer_rubric or dict(self.SHORT_ANSWER_RUBRIC)
        self.long_answer_rubric = long_answer_rubric or dict(self.LONG_ANSWER_RUBRIC)
        self._strategies = {
            "single-word": self._grade_single_word_question,
            "short-answer": self._grade_short_answer_question,
            "long-answer": self._grade_long_answer_question,
        }

    async def grade_question(self, question: Question, student_answer: str) -> Dict[str, Any]:
        """
        Grade a student's answer to a single question.

        Returns:
            {
                "marks": 3,
                "feedback": "...",
                "grading_details": {"accuracy": 2, ..., "total": 4}
            }

        Raises:
            UnsupportedQuestionTypeError: for a type outside the known set
        """
        strategy = self._strategies.get(question.type)
        if strategy is None:
            raise UnsupportedQuestionTypeError(question.type)

        if not (student_answer or "").strip():
            return {"marks": 0, "feedback": BLANK_FEEDBACK, "grading_details": {"total": 0}}

        logger.info(f"⏳ Grading question {question.id} ({question.type})...")
        result = await strategy(question, student_answer)

        # Cap marks to question's maximum
        result["marks"] = max(0, min(result["marks"], question.marks))
        logger.info(f"✅ Question {question.id}: {result['marks']}/{question.marks}")
        return result

    async def _grade_single_word_question(self, question: Question, answer: str) -> Dict[str, Any]:
        graded = await self.grade_single_word_answer(answer, question.correct_answer)
        return {
            "marks": graded["marks"],
            "feedback": graded["feedback"],
            "grading_details": {"marks": graded["marks"], "total": graded["marks"]},
        }

    async def _grade_short_answer_question(self, question: Question, answer: str) -> Dict[str, Any]:
        graded = await self.grade_short_answer(answer, question.text, self.short_answer_rubric)
        return {
            "marks": graded["marks"]["total"],
            "feedback": graded["feedback"],
            "grading_details": graded["marks"],
        }

    async def _grade_long_answer_question(self, question: Question, answer: str) -> Dict[str, Any]:
        graded = await self.grade_long_answer(answer, question.text, self.long_answer_rubric)
        return {
            "marks": graded["marks"]["total"],
            "feedback": graded["feedback"],
            "grading_details": graded["marks"],
        }

    # ============ STRATEGIES ============

    async def grade_single_word_answer(self, student_answer: str, correct_answer: str) -> Dict[str, Any]:
        """Grade 0, 1 or 2 against a reference answer."""
        prompt = PromptBuilder.build_single_word_prompt(student_answer, correct_answer)
        try:
            response = await self.llm.generate(prompt)
            parsed = self.parser.parse_scores(response, ["MARKS"])
            return {"marks": parsed["MARKS"], "feedback": parsed["feedback"]}
        except Exception as e:
            logger.error(f"⚠️  Error grading single-word answer: {e}")
            return {"marks": 0, "feedback": ERROR_FEEDBACK}

    async def grade_short_answer(
        self,
        student_answer: str,
        question: str,
        rubric: Dict[str, int],
    ) -> Dict[str, Any]:
        """Grade accuracy, clarity and completeness; ``marks["total"]`` is their sum."""
        prompt = PromptBuilder.build_short_answer_prompt(student_answer, question, rubric)
        return await self._grade_with_rubric(prompt, list(rubric), "short answer")

    async def grade_long_answer(
        self,
        student_answer: str,
        question: str,
        rubric: Dict[str, int],
    ) -> Dict[str, Any]:
        """Grade the four essay criteria; ``marks["total"]`` is their sum."""
        prompt = PromptBuilder.build_long_answer_prompt(student_answer, question, rubric)
        return await self._grade_with_rubric(prompt, list(rubric), "long answer")

    async def _grade_with_rubric(self, prompt: str, criteria: list, kind: str) -> Dict[str, Any]:
        labels = [criterion.upper() for criterion in criteria]
        try:
            response = await self.llm.generate(prompt)
            parsed = self.parser.parse_scores(response, labels)
            marks = {criterion: parsed[label] for criterion, label in zip(criteria, labels)}
            feedback = parsed["feedback"]
        except Exception as e:
            logger.error(f"⚠️  Error grading {kind}: {e}")
            marks = {criterion: 0 for criterion in criteria}
            feedback = ERROR_FEEDBACK

        marks["total"] = sum(marks.values())
        return {"marks": marks, "feedback": feedback}
