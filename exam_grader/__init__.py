"""Exam ingestion, normalization and grading."""

from .grading import grade_exam
from .models import (
    EditableExam,
    EditableQuestion,
    ExamData,
    GradeSummary,
    IssueLevel,
    ParseIssue,
    ParseResult,
    Question,
    QuestionResult,
    QuestionType,
)
from .service import ExamProcessingService
from .transcoder import editable_to_exam, to_editable_exam

__all__ = [
    "EditableExam",
    "EditableQuestion",
    "ExamData",
    "ExamProcessingService",
    "GradeSummary",
    "IssueLevel",
    "ParseIssue",
    "ParseResult",
    "Question",
    "QuestionResult",
    "QuestionType",
    "editable_to_exam",
    "grade_exam",
    "to_editable_exam",
]
