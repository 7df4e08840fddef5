"""
Prompt builder for answer grading and report narratives.

Every prompt ends with an exact reply format made of ``LABEL: value`` lines.
The labels are the parsing contract with ``ResponseParser``: change one and
the matching parser call must change with it.
"""

from typing import Any, Dict, List, Optional


class PromptBuilder:
    """Builds the fixed-template prompts sent to Gemini."""

    SINGLE_WORD_TEMPLATE = """Grade this single-word answer based on the following criteria:
- 2 points for a fully correct answer (exact match or very minor spelling error)
- 1 point for a partially correct answer (conceptually correct but incorrect form)
- 0 points for an incorrect answer

Correct answer: "{correct_answer}"
Student answer: "{student_answer}"

Return the grade (0, 1, or 2) and brief feedback explaining why the answer is correct or incorrect.
Format your response exactly as follows:
MARKS: [number]
FEEDBACK: [text]"""

    SHORT_ANSWER_TEMPLATE = """Grade this short answer (1-2 sentences) based on the following rubric:
1) Accuracy: 0-{accuracy} points (correctness of information)
2) Clarity: 0-{clarity} points (clarity and conciseness of the answer)
3) Completeness: 0-{completeness} points (whether the answer covers all required aspects)

Question: "{question}"
Student Answer: "{student_answer}"

Provide a detailed assessment for each criterion and overall feedback.
Format your response exactly as follows:
ACCURACY: [number]
CLARITY: [number]
COMPLETENESS: [number]
FEEDBACK: [text]"""

    LONG_ANSWER_TEMPLATE = """Grade this long answer or essay response based on the following rubric:
1) Content Accuracy: 0-{content_accuracy} points (correctness of facts and concepts)
2) Clarity & Structure: 0-{clarity_structure} points (organization and logical flow)
3) Grammar & Language: 0-{grammar_language} points (proper grammar, spelling, and academic tone)
4) Depth of Explanation: 0-{depth_explanation} points (thorough exploration of concepts with examples)

Question: "{question}"
Student Answer: "{student_answer}"

Provide a detailed assessment for each criterion and overall feedback with specific suggestions for improvement.
Format your response exactly as follows:
CONTENT_ACCURACY: [number]
CLARITY_STRUCTURE: [number]
GRAMMAR_LANGUAGE: [number]
DEPTH_EXPLANATION: [number]
FEEDBACK: [text]"""

    EXAM_SUMMARY_TEMPLATE = """Generate a comprehensive exam summary for the following student's performance:

Student: {student_name}
Exam: {exam_title}
Score: {total_marks}/{total_possible} ({percentage}%)

Question and Answer Details:
{details}

Based on the above information, please provide:
1. Overall performance assessment (3-4 sentences)
2. Three specific areas of strength (bullet points)
3. Three specific areas for improvement (bullet points)

Format your response exactly as follows:
OVERALL_FEEDBACK: [text]
STRENGTH_AREAS: [bullet point 1]; [bullet point 2]; [bullet point 3]
IMPROVEMENT_AREAS: [bullet point 1]; [bullet point 2]; [bullet point 3]"""

    MONTHLY_REPORT_TEMPLATE = """Generate a comprehensive monthly progress report for the following student:

Student: {student_name}
Grade: {student_grade}
Month: {month_label}

Exam Results:
{results}

Overall Percentage: {overall_percentage}%
{comparison}

Based on the above information, please provide:
1. Monthly assessment (3-4 sentences summarizing overall performance)
2. Subject-wise analysis (one paragraph per subject: {subjects})
3. Overall progress evaluation (considering improvement or decline)
4. Recommended actions for further improvement (3-4 specific, actionable suggestions)

Format your response exactly as follows:
MONTHLY_ASSESSMENT: [text]
SUBJECT_ANALYSIS: [Subject1]: [analysis1]; [Subject2]: [analysis2]
OVERALL_PROGRESS: [text]
RECOMMENDED_ACTIONS: [action1]; [action2]; [action3]; [action4]"""

    @staticmethod
    def build_single_word_prompt(student_answer: str, correct_answer: str) -> str:
        return PromptBuilder.SINGLE_WORD_TEMPLATE.format(
            correct_answer=correct_answer,
            student_answer=student_answer,
        )

    @staticmethod
    def build_short_answer_prompt(
        student_answer: str,
        question: str,
        rubric: Dict[str, int],
    ) -> str:
        """``rubric`` holds the point caps for accuracy, clarity and completeness."""
        return PromptBuilder.SHORT_ANSWER_TEMPLATE.format(
            question=question,
            student_answer=student_answer,
            **rubric,
        )

    @staticmethod
    def build_long_answer_prompt(
        student_answer: str,
        question: str,
        rubric: Dict[str, int],
    ) -> str:
        """``rubric`` holds the point caps for the four essay criteria."""
        return PromptBuilder.LONG_ANSWER_TEMPLATE.format(
            question=question,
            student_answer=student_answer,
            **rubric,
        )

    @staticmethod
    def build_exam_summary_prompt(
        student_name: str,
        exam_title: str,
        questions: List[Dict[str, Any]],
        answers: List[Dict[str, Any]],
        total_marks: int,
        total_possible: int,
        percentage: int,
    ) -> str:
        """
        Build the consolidated exam summary prompt.

        Args:
            questions: ``{"id", "text", "marks", "type"}`` per question
            answers: ``{"question_id", "answer", "marks", "feedback"}`` per answer
        """
        by_id = {q["id"]: q for q in questions}
        blocks = []
        for idx, ans in enumerate(answers, start=1):
            question = by_id.get(ans["question_id"], {})
            blocks.append(
                f"Question {idx}: {question.get('text', '')}\n"
                f"Type: {question.get('type', '')}\n"
                f"Marks: {ans['marks']}/{question.get('marks', 0)}\n"
                f"Answer: \"{ans['answer']}\"\n"
                f"Feedback: \"{ans['feedback']}\""
            )

        return PromptBuilder.EXAM_SUMMARY_TEMPLATE.format(
            student_name=student_name,
            exam_title=exam_title,
            total_marks=total_marks,
            total_possible=total_possible,
            percentage=percentage,
            details="\n\n".join(blocks),
        )

    @staticmethod
    def build_monthly_report_prompt(
        student_name: str,
        student_grade: str,
        month_label: str,
        exam_results: List[Dict[str, Any]],
        subjects: List[str],
        overall_percentage: int,
        improvement: Optional[int] = None,
    ) -> str:
        results = []
        for result in exam_results:
            results.append(
                f"Exam: {result['exam_title']}\n"
                f"Subject: {result['subject']}\n"
                f"Date: {result['date']}\n"
                f"Score: {result['marks']}/{result['total_possible']} ({result['percentage']}%)\n"
                f"Strengths: {', '.join(result['strengths'])}\n"
                f"Areas for Improvement: {', '.join(result['weaknesses'])}"
            )

        if improvement is None:
            comparison = "No previous month data available for comparison"
        else:
            sign = "+" if improvement > 0 else ""
            comparison = f"Change from Previous Month: {sign}{improvement} percentage points"

        return PromptBuilder.MONTHLY_REPORT_TEMPLATE.format(
            student_name=student_name,
            student_grade=student_grade,
            month_label=month_label,
            results="\n\n".join(results),
            overall_percentage=overall_percentage,
            comparison=comparison,
            subjects=", ".join(subjects),
        )
