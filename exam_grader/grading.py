from __future__ import annotations

from typing import Mapping

from .models import ExamData, GradeSummary, Question, QuestionResult, QuestionType, UserAnswer
from .tokenizer import UNANSWERED_LABEL, format_choice_answer, normalize_short_answer


NO_ANSWER_LABEL = "(정답 없음)"


def grade_exam(exam: ExamData, answers: Mapping[str, UserAnswer]) -> GradeSummary:
    """Score ``answers`` (question id -> user answer) against ``exam``."""
    results: list[QuestionResult] = []
    for question in exam.questions:
        user_answer = answers.get(question.id)
        answered = is_answered(question, user_answer)
        results.append(
            QuestionResult(
                id=question.id,
                prompt=question.prompt,
                type=question.type,
                correct=is_correct_answer(question, user_answer) if answered else False,
                answered=answered,
                user_answer_label=format_user_answer(question, user_answer),
                correct_answer_label=format_correct_answer(question),
                explanation=question.explanation,
            )
        )

    total = len(results)
    correct = sum(1 for result in results if result.correct)
    unanswered = sum(1 for result in results if not result.answered)
    accuracy = int(correct / total * 100 + 0.5) if total else 0
    return GradeSummary(
        total=total,
        correct=correct,
        incorrect=total - correct - unanswered,
        unanswered=unanswered,
        accuracy=accuracy,
        results=results,
    )


def _is_index(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_answered(question: Question, answer: UserAnswer) -> bool:
    if question.type is QuestionType.SHORT:
        return isinstance(answer, str) and bool(normalize_short_answer(answer))
    if question.type is QuestionType.MULTI:
        return isinstance(answer, list) and len(answer) > 0
    if question.type is QuestionType.SINGLE or question.type is QuestionType.OX:
        return _is_index(answer)
    raise ValueError(f"Unsupported question type: {question.type!r}")


def is_correct_answer(question: Question, answer: UserAnswer) -> bool:
    if question.type is QuestionType.SHORT:
        if not isinstance(answer, str):
            return False
        accepted = {normalize_short_answer(value) for value in question.answer_text or []}
        return normalize_short_answer(answer) in accepted

    if question.type is QuestionType.MULTI:
        if not isinstance(answer, list) or not isinstance(question.answer, list):
            return False
        return sorted(set(answer)) == sorted(set(question.answer))

    if question.type is QuestionType.SINGLE or question.type is QuestionType.OX:
        if not _is_index(answer) or not _is_index(question.answer):
            return False
        return answer == question.answer

    raise ValueError(f"Unsupported question type: {question.type!r}")


def format_user_answer(question: Question, answer: UserAnswer) -> str:
    if not is_answered(question, answer):
        return UNANSWERED_LABEL
    if question.type is QuestionType.SHORT:
        return answer.strip() if isinstance(answer, str) else ""
    if question.type is QuestionType.MULTI:
        return format_choice_answer(question, answer if isinstance(answer, list) else [])
    return format_choice_answer(question, answer if _is_index(answer) else None)


def format_correct_answer(question: Question) -> str:
    if question.type is QuestionType.SHORT:
        accepted = question.answer_text or []
        return " / ".join(accepted) if accepted else NO_ANSWER_LABEL
    if question.type is QuestionType.MULTI:
        return format_choice_answer(question, question.answer if isinstance(question.answer, list) else [])
    return format_choice_answer(question, question.answer if _is_index(question.answer) else None)
