"""
Pytest configuration and fixtures.

MongoDB is replaced by mongomock-motor and Gemini by ``ScriptedLLM``, which
answers each prompt kind with a canned reply.
"""

from datetime import datetime
from typing import Dict, List, Optional

import httpx
import pytest
from mongomock_motor import AsyncMongoMockClient

from examgrader.main import create_app, create_indexes
from examgrader.models import Exam, OverallFeedback, Question, Submission, User
from examgrader.utils import format_percentage, new_id


# ==============================================================================
# Scripted Gemini
# ==============================================================================


class ScriptedLLM:
    """Stands in for GeminiClient; a reply that is an exception gets raised."""

    DEFAULT_REPLIES = {
        "single_word": "MARKS: 2\nFEEDBACK: Correct, gravity is the right answer.",
        "short_answer": (
            "ACCURACY: 4\nCLARITY: 3\nCOMPLETENESS: 2\n"
            "FEEDBACK: Accurate and clear, mention the role of chlorophyll."
        ),
        "long_answer": (
            "CONTENT_ACCURACY: 3\nCLARITY_STRUCTURE: 2\nGRAMMAR_LANGUAGE: 1\nDEPTH_EXPLANATION: 2\n"
            "FEEDBACK: Solid outline of the water cycle, add examples."
        ),
        "summary": (
            "OVERALL_FEEDBACK: A strong attempt overall with good recall of key facts.\n"
            "STRENGTH_AREAS: Recall of definitions; Clear sentences; Use of terminology\n"
            "IMPROVEMENT_AREAS: Depth of explanation; Use of examples; Essay structure"
        ),
        "monthly": (
            "MONTHLY_ASSESSMENT: Steady performance this month.\n"
            "SUBJECT_ANALYSIS: Science: Good command of core concepts.; Math: Accurate but slow.\n"
            "OVERALL_PROGRESS: Improving compared to last month.\n"
            "RECOMMENDED_ACTIONS: Practice essays; Review notes weekly; Time each attempt"
        ),
    }

    def __init__(self, **overrides):
        self.replies = {**self.DEFAULT_REPLIES, **overrides}
        self.prompts: List[str] = []

    @staticmethod
    def kind_of(prompt: str) -> str:
        if "comprehensive exam summary" in prompt:
            return "summary"
        if "monthly progress report" in prompt:
            return "monthly"
        if "single-word answer" in prompt:
            return "single_word"
        if "short answer (1-2 sentences)" in prompt:
            return "short_answer"
        if "long answer or essay" in prompt:
            return "long_answer"
        raise AssertionError(f"Unexpected prompt: {prompt[:80]}")

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.replies[self.kind_of(prompt)]
        if isinstance(reply, Exception):
            raise reply
        return reply

    def calls(self, kind: str) -> List[str]:
        return [p for p in self.prompts if self.kind_of(p) == kind]


@pytest.fixture
def llm() -> ScriptedLLM:
    return ScriptedLLM()


# ==============================================================================
# Database Fixtures
# ==============================================================================


@pytest.fixture
async def db():
    client = AsyncMongoMockClient()
    database = client["examgrader_test"]
    await create_indexes(database)
    return database


class MissFirstLookup:
    """
    Database wrapper whose ``collection`` answers its first ``find_one`` with
    None, as if a concurrent writer had not committed yet. Everything else
    goes to the real collection.
    """

    def __init__(self, db, collection: str):
        self._db = db
        self._collection = collection
        self.missed = 0

    def __getattr__(self, name):
        collection = getattr(self._db, name)
        if name != self._collection:
            return collection
        wrapper = self

        class _Collection:
            def __getattr__(self, attr):
                return getattr(collection, attr)

            async def find_one(self, *args, **kwargs):
                if wrapper.missed == 0:
                    wrapper.missed += 1
                    return None
                return await collection.find_one(*args, **kwargs)

        return _Collection()


@pytest.fixture
def student() -> User:
    return User(user_id="123", name="Asha Patel", email="asha@example.com", role="student", grade="8")


@pytest.fixture
def teacher() -> User:
    return User(user_id="t-1", name="Mr. Okafor", email="okafor@example.com", role="teacher")


@pytest.fixture
def science_exam(teacher) -> Exam:
    return Exam(
        exam_id="1",
        title="Forces and Living Things",
        subject="Science",
        grade="8",
        time_limit=45,
        created_by=teacher.user_id,
        instructions=["Answer all questions.", "Write in full sentences."],
        questions=[
            Question(
                id="1-1",
                type="single-word",
                text="What force pulls objects toward the Earth?",
                marks=2,
                correct_answer="gravity",
            ),
            Question(
                id="1-2",
                type="short-answer",
                text="What is photosynthesis?",
                marks=5,
            ),
            Question(
                id="1-3",
                type="long-answer",
                text="Explain the water cycle.",
                marks=10,
            ),
        ],
    )


@pytest.fixture
async def seeded_db(db, student, teacher, science_exam):
    await db.users.insert_many([student.model_dump(), teacher.model_dump()])
    await db.exams.insert_one(science_exam.model_dump())
    return db


@pytest.fixture
def submission_factory(seeded_db, student):
    """Insert a graded submission directly, bypassing the grader."""

    async def make(
        exam_id: str,
        submitted_at: datetime,
        marks: int,
        possible: int,
        strengths: Optional[List[str]] = None,
        weaknesses: Optional[List[str]] = None,
        student_id: Optional[str] = None,
    ) -> Submission:
        submission = Submission(
            submission_id=new_id("sub"),
            student_id=student_id or student.user_id,
            exam_id=exam_id,
            start_time=submitted_at,
            submission_time=submitted_at,
            total_marks=marks,
            total_possible_marks=possible,
            percentage=format_percentage(marks, possible),
            feedback="Graded.",
            overall_feedback=OverallFeedback(
                strength_areas=strengths or [],
                improvement_areas=weaknesses or [],
            ),
        )
        await seeded_db.submissions.insert_one(submission.model_dump())
        return submission

    return make


@pytest.fixture
def exam_factory(seeded_db, teacher):
    """Insert a minimal exam for a subject."""

    async def make(exam_id: str, subject: str, title: Optional[str] = None) -> Exam:
        exam = Exam(
            exam_id=exam_id,
            title=title or f"{subject} quiz",
            subject=subject,
            grade="8",
            time_limit=30,
            created_by=teacher.user_id,
            questions=[Question(id=f"{exam_id}-1", type="short-answer", text="Explain.", marks=10)],
        )
        await seeded_db.exams.insert_one(exam.model_dump())
        return exam

    return make


# ==============================================================================
# HTTP Fixtures
# ==============================================================================


@pytest.fixture
async def client(seeded_db, llm):
    app = create_app(db=seeded_db, llm_client=llm)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def grade_payload() -> Dict[str, object]:
    return {
        "examId": "1",
        "studentId": "123",
        "answers": {
            "1-1": "gravity",
            "1-2": "Plants turn light, water and carbon dioxide into glucose and oxygen.",
            "1-3": "Water evaporates, condenses into clouds and falls as rain.",
        },
        "startTime": "2024-03-15T09:00:00Z",
    }
