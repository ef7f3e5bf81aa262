from __future__ import annotations

from dataclasses import replace
from typing import Optional, Union

from .models import ParseIssue, Question


MSG_EMPTY_INPUT = "입력값이 비어 있습니다."
MSG_JSON_FAILED = "JSON 파싱에 실패했습니다."
MSG_NO_JSON_QUESTIONS = "문제 데이터가 없습니다."
MSG_NO_TEXT_QUESTIONS = "문제 데이터를 찾지 못했습니다."
MSG_MALFORMED_QUESTION = "문제 형식이 올바르지 않습니다."
MSG_EMPTY_PROMPT = "문제 지문이 비어 있습니다."
MSG_EMPTY_ANSWER = "정답이 비어 있습니다."
MSG_NO_CHOICES = "보기가 없습니다."
MSG_CHECK_OX = "O/X 정답을 확인하세요."
MSG_CHECK_MULTI = "복수 정답을 확인하세요."
MSG_CHECK_SINGLE = "정답을 확인하세요."
MSG_TYPE_GUESSED = "문제 타입을 추정했습니다."
MSG_ANSWER_OUT_OF_RANGE = "정답 번호가 보기 범위를 벗어났습니다."


def ensure_unique_ids(questions: list[Question]) -> list[Question]:
    """Keep the first id verbatim and suffix later collisions with -2, -3, ..."""
    seen: dict[str, int] = {}
    unique: list[Question] = []
    for question in questions:
        count = seen.get(question.id, 0)
        seen[question.id] = count + 1
        if count == 0:
            unique.append(question)
        else:
            unique.append(replace(question, id=f"{question.id}-{count + 1}"))
    return unique


def check_answer_range(
    answer: Union[int, list[int], None],
    choices: list[str],
    question_id: str,
    issues: list[ParseIssue],
) -> None:
    if answer is None or not choices:
        return
    indices = answer if isinstance(answer, list) else [answer]
    if any(index >= len(choices) for index in indices):
        issues.append(ParseIssue.warn(MSG_ANSWER_OUT_OF_RANGE, question_id))


def optional_text(value: str) -> Optional[str]:
    text = (value or "").strip()
    return text or None
