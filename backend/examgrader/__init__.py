"""
ExamGrader - AI-assisted exam grading backend.

Grades free-text exam answers with Google Gemini and aggregates graded
submissions into monthly progress reports.
"""

__version__ = "1.0.0"
