"""
Unit tests for the per-question grader and the prompt builder, with a
scripted Gemini reply per question type.
"""

import pytest

from examgrader.errors import UnsupportedQuestionTypeError
from examgrader.models import Question
from examgrader.services import GradingService, PromptBuilder
from examgrader.services.grading import BLANK_FEEDBACK, ERROR_FEEDBACK
from examgrader.services.response_parser import NO_FEEDBACK

from conftest import ScriptedLLM


def single_word(marks: int = 2) -> Question:
    return Question(id="q1", type="single-word", text="Force toward Earth?", marks=marks, correct_answer="gravity")


def short_answer(marks: int = 5) -> Question:
    return Question(id="q2", type="short-answer", text="What is photosynthesis?", marks=marks)


def long_answer(marks: int = 15) -> Question:
    return Question(id="q3", type="long-answer", text="Explain the water cycle.", marks=marks)


class TestPromptBuilder:
    """Tests for PromptBuilder."""

    def test_single_word_prompt(self) -> None:
        prompt = PromptBuilder.build_single_word_prompt("gravty", "gravity")

        assert 'Correct answer: "gravity"' in prompt
        assert 'Student answer: "gravty"' in prompt
        assert "MARKS: [number]" in prompt
        assert "FEEDBACK: [text]" in prompt

    def test_short_answer_prompt_uses_rubric_caps(self) -> None:
        prompt = PromptBuilder.build_short_answer_prompt(
            "An answer", "A question", {"accuracy": 5, "clarity": 3, "completeness": 2}
        )

        assert "Accuracy: 0-5 points" in prompt
        assert "Clarity: 0-3 points" in prompt
        assert "Completeness: 0-2 points" in prompt
        assert "COMPLETENESS: [number]" in prompt

    def test_long_answer_prompt_lists_four_criteria(self) -> None:
        prompt = PromptBuilder.build_long_answer_prompt("Essay", "Question", GradingService.LONG_ANSWER_RUBRIC)

        for label in ("CONTENT_ACCURACY", "CLARITY_STRUCTURE", "GRAMMAR_LANGUAGE", "DEPTH_EXPLANATION"):
            assert f"{label}: [number]" in prompt
        assert "Depth of Explanation: 0-5 points" in prompt

    def test_answer_with_braces_is_kept_verbatim(self) -> None:
        prompt = PromptBuilder.build_single_word_prompt("{x}", "gravity")

        assert 'Student answer: "{x}"' in prompt

    def test_exam_summary_prompt_embeds_each_answer(self) -> None:
        prompt = PromptBuilder.build_exam_summary_prompt(
            student_name="Asha",
            exam_title="Forces",
            questions=[{"id": "a", "text": "What pulls?", "marks": 2, "type": "single-word"}],
            answers=[{"question_id": "a", "answer": "gravity", "marks": 2, "feedback": "Right"}],
            total_marks=2,
            total_possible=2,
            percentage=100,
        )

        assert "Score: 2/2 (100%)" in prompt
        assert "Question 1: What pulls?" in prompt
        assert 'Answer: "gravity"' in prompt
        assert "STRENGTH_AREAS:" in prompt

    def test_monthly_prompt_without_baseline(self) -> None:
        prompt = PromptBuilder.build_monthly_report_prompt(
            student_name="Asha",
            student_grade="8",
            month_label="March 2024",
            exam_results=[],
            subjects=["Science"],
            overall_percentage=70,
        )

        assert "No previous month data available for comparison" in prompt
        assert "Month: March 2024" in prompt

    def test_monthly_prompt_with_baseline(self) -> None:
        prompt = PromptBuilder.build_monthly_report_prompt(
            student_name="Asha",
            student_grade="8",
            month_label="March 2024",
            exam_results=[],
            subjects=["Science"],
            overall_percentage=70,
            improvement=5,
        )

        assert "+5 percentage points" in prompt


class TestSingleWord:
    """Tests for single-word grading."""

    async def test_exact_match_scores_full_marks(self, llm) -> None:
        result = await GradingService(llm).grade_question(single_word(), "gravity")

        assert result["marks"] == 2
        assert "gravity" in result["feedback"]
        assert result["grading_details"] == {"marks": 2, "total": 2}
        assert len(llm.calls("single_word")) == 1

    async def test_partial_credit(self) -> None:
        llm = ScriptedLLM(single_word="MARKS: 1\nFEEDBACK: Right idea, wrong form.")
        result = await GradingService(llm).grade_question(single_word(), "gravitational")

        assert result["marks"] == 1
        assert result["feedback"] == "Right idea, wrong form."

    async def test_unparseable_reply_scores_zero(self) -> None:
        llm = ScriptedLLM(single_word="The student is correct!")
        result = await GradingService(llm).grade_question(single_word(), "gravity")

        assert result["marks"] == 0
        assert result["feedback"] == NO_FEEDBACK

    async def test_model_failure_degrades_to_zero(self) -> None:
        llm = ScriptedLLM(single_word=RuntimeError("quota exceeded"))
        result = await GradingService(llm).grade_question(single_word(), "gravity")

        assert result["marks"] == 0
        assert result["feedback"] == ERROR_FEEDBACK


class TestRubricGrading:
    """Tests for short and long answer grading."""

    async def test_short_answer_total_is_sum_of_criteria(self, llm) -> None:
        result = await GradingService(llm).grade_question(short_answer(marks=10), "Plants make food.")

        assert result["grading_details"] == {"accuracy": 4, "clarity": 3, "completeness": 2, "total": 9}
        assert result["marks"] == 9

    async def test_short_answer_clamped_to_question_marks(self) -> None:
        llm = ScriptedLLM(short_answer="ACCURACY: 9\nCLARITY: 9\nCOMPLETENESS: 9\nFEEDBACK: Great")
        result = await GradingService(llm).grade_question(short_answer(marks=5), "Plants make food.")

        assert result["marks"] == 5
        assert result["grading_details"]["total"] == 27

    async def test_long_answer(self, llm) -> None:
        result = await GradingService(llm).grade_question(long_answer(), "Water evaporates...")

        assert result["marks"] == 8
        assert result["grading_details"]["depth_explanation"] == 2
        assert "water cycle" in result["feedback"]

    async def test_long_answer_failure(self) -> None:
        llm = ScriptedLLM(long_answer=TimeoutError())
        result = await GradingService(llm).grade_question(long_answer(), "Water evaporates...")

        assert result["marks"] == 0
        assert result["feedback"] == ERROR_FEEDBACK
        assert result["grading_details"]["total"] == 0

    async def test_custom_rubric_caps_reach_the_prompt(self, llm) -> None:
        grader = GradingService(llm, short_answer_rubric={"accuracy": 2, "clarity": 2, "completeness": 1})
        await grader.grade_question(short_answer(), "Plants make food.")

        assert "Accuracy: 0-2 points" in llm.calls("short_answer")[0]

    @pytest.mark.parametrize(
        "reply",
        [
            "ACCURACY: 100\nCLARITY: 100\nCOMPLETENESS: 100\nFEEDBACK: x",
            "ACCURACY: -4\nCLARITY: -1\nCOMPLETENESS: -2\nFEEDBACK: x",
            "nonsense",
            "",
        ],
    )
    async def test_marks_always_within_bounds(self, reply) -> None:
        question = short_answer(marks=4)
        result = await GradingService(ScriptedLLM(short_answer=reply)).grade_question(question, "An answer")

        assert 0 <= result["marks"] <= question.marks


class TestDispatch:
    """Tests for question type dispatch."""

    async def test_blank_answer_skips_model(self, llm) -> None:
        result = await GradingService(llm).grade_question(long_answer(), "   ")

        assert result["marks"] == 0
        assert result["feedback"] == BLANK_FEEDBACK
        assert llm.prompts == []

    @pytest.mark.parametrize("question", [single_word(), short_answer(), long_answer()])
    @pytest.mark.parametrize("answer", ["An answer", ""])
    async def test_details_always_carry_total(self, llm, question, answer) -> None:
        result = await GradingService(llm).grade_question(question, answer)

        assert "total" in result["grading_details"]

    async def test_unknown_type_is_rejected(self, llm) -> None:
        question = Question.model_construct(id="q9", type="true-false", text="?", marks=1)

        with pytest.raises(UnsupportedQuestionTypeError):
            await GradingService(llm).grade_question(question, "true")
        assert llm.prompts == []
