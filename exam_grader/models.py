from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class QuestionType(str, Enum):
    SINGLE = "single"
    MULTI = "multi"
    SHORT = "short"
    OX = "ox"


class IssueLevel(str, Enum):
    ERROR = "error"
    WARN = "warn"


UserAnswer = Union[int, list[int], str, None]

OX_CHOICES = ["O", "X"]


@dataclass(frozen=True)
class Question:
    id: str
    type: QuestionType
    prompt: str
    choices: list[str] = field(default_factory=list)
    choice_labels: Optional[list[Optional[str]]] = None
    answer: Union[int, list[int], None] = None
    answer_text: Optional[list[str]] = None
    explanation: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "prompt": self.prompt,
        }
        if self.type is not QuestionType.SHORT:
            payload["choices"] = list(self.choices)
            if self.choice_labels is not None:
                payload["choiceLabels"] = list(self.choice_labels)
            if self.answer is not None:
                payload["answer"] = list(self.answer) if isinstance(self.answer, list) else self.answer
        if self.answer_text is not None:
            payload["answerText"] = list(self.answer_text)
        if self.explanation:
            payload["explanation"] = self.explanation
        return payload


@dataclass(frozen=True)
class ExamData:
    title: str
    questions: list[Question] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "questions": [question.to_dict() for question in self.questions],
        }


@dataclass(frozen=True)
class ParseIssue:
    level: IssueLevel
    message: str
    question_id: Optional[str] = None

    @classmethod
    def error(cls, message: str, question_id: Optional[str] = None) -> "ParseIssue":
        return cls(IssueLevel.ERROR, message, question_id)

    @classmethod
    def warn(cls, message: str, question_id: Optional[str] = None) -> "ParseIssue":
        return cls(IssueLevel.WARN, message, question_id)


@dataclass
class EditableQuestion:
    id: str
    type: QuestionType
    prompt: str = ""
    choices_text: str = ""
    answer_text: str = ""
    explanation: str = ""


@dataclass
class EditableExam:
    title: str
    questions: list[EditableQuestion] = field(default_factory=list)


@dataclass
class ParseResult:
    exam: Optional[ExamData]
    editable: Optional[EditableExam]
    issues: list[ParseIssue] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(issue.level is IssueLevel.ERROR for issue in self.issues)


@dataclass
class QuestionResult:
    id: str
    prompt: str
    type: QuestionType
    correct: bool
    answered: bool
    user_answer_label: str
    correct_answer_label: str
    explanation: Optional[str] = None


@dataclass
class GradeSummary:
    total: int
    correct: int
    incorrect: int
    unanswered: int
    accuracy: int
    results: list[QuestionResult] = field(default_factory=list)
