from __future__ import annotations

import logging
from typing import Any, Optional

from .builder import (
    MSG_CHECK_OX,
    MSG_CHECK_SINGLE,
    MSG_EMPTY_ANSWER,
    MSG_EMPTY_PROMPT,
    MSG_MALFORMED_QUESTION,
    MSG_NO_CHOICES,
    MSG_NO_JSON_QUESTIONS,
    MSG_TYPE_GUESSED,
    check_answer_range,
    ensure_unique_ids,
    optional_text,
)
from .config_manager import parsing_option
from .models import OX_CHOICES, ExamData, ParseIssue, Question, QuestionType
from .tokenizer import extract_indices, parse_ox, split_short_answer_tokens


logger = logging.getLogger(__name__)

TYPE_ALIASES = {
    "single": QuestionType.SINGLE,
    "multi": QuestionType.MULTI,
    "short": QuestionType.SHORT,
    "ox": QuestionType.OX,
    "truefalse": QuestionType.OX,
    "tf": QuestionType.OX,
}


def normalize_json_input(
    parsed: Any, config: Optional[dict[str, Any]] = None,
) -> tuple[Optional[ExamData], list[ParseIssue]]:
    """Map an already-decoded JSON value onto the canonical exam model."""
    issues: list[ParseIssue] = []
    title = parsing_option(config, "default_title")
    raw_questions: list[Any] = []

    if isinstance(parsed, list):
        raw_questions = parsed
    elif isinstance(parsed, dict):
        if isinstance(parsed.get("title"), str):
            title = parsed["title"]
        if isinstance(parsed.get("questions"), list):
            raw_questions = parsed["questions"]

    if not raw_questions:
        issues.append(ParseIssue.error(MSG_NO_JSON_QUESTIONS))
        return None, issues

    questions = [
        normalize_json_question(raw, index, issues)
        for index, raw in enumerate(raw_questions)
    ]
    logger.debug("Normalized %d JSON questions with %d issues", len(questions), len(issues))
    return ExamData(title=title, questions=ensure_unique_ids(questions)), issues


def normalize_json_question(raw: Any, index: int, issues: list[ParseIssue]) -> Question:
    fallback_id = f"Q{index + 1}"
    if not isinstance(raw, dict):
        issues.append(ParseIssue.warn(MSG_MALFORMED_QUESTION, fallback_id))
        return Question(id=fallback_id, type=QuestionType.SHORT, prompt="", answer_text=[])

    question_id = _normalize_id(raw.get("id")) or fallback_id
    prompt = raw["prompt"] if isinstance(raw.get("prompt"), str) else ""
    explanation = optional_text(raw["explanation"]) if isinstance(raw.get("explanation"), str) else None
    question_type = normalize_question_type(raw.get("type"), raw, issues, question_id)

    if not prompt.strip():
        issues.append(ParseIssue.warn(MSG_EMPTY_PROMPT, question_id))

    choices = [_stringify(choice) for choice in raw["choices"]] if isinstance(raw.get("choices"), list) else []
    choice_labels: Optional[list[Optional[str]]] = None
    if isinstance(raw.get("choiceLabels"), list):
        labels = [_stringify(label).strip() for label in raw["choiceLabels"]]
        if len(labels) == len(choices):
            choice_labels = list(labels)

    raw_answer = raw.get("answer") if raw.get("answer") is not None else raw.get("answerText")

    if question_type is QuestionType.SHORT:
        answer_text = normalize_short_answers(raw)
        if not answer_text:
            issues.append(ParseIssue.warn(MSG_EMPTY_ANSWER, question_id))
        return Question(
            id=question_id,
            type=question_type,
            prompt=prompt,
            answer_text=answer_text,
            explanation=explanation,
        )

    if question_type is QuestionType.OX:
        ox_answer = normalize_ox_answer(raw_answer)
        if ox_answer is None:
            issues.append(ParseIssue.warn(MSG_CHECK_OX, question_id))
        check_answer_range(ox_answer, OX_CHOICES, question_id, issues)
        return Question(
            id=question_id,
            type=question_type,
            prompt=prompt,
            choices=list(OX_CHOICES),
            choice_labels=list(OX_CHOICES),
            answer=ox_answer,
            explanation=explanation,
        )

    if question_type is QuestionType.SINGLE or question_type is QuestionType.MULTI:
        if not choices:
            issues.append(ParseIssue.warn(MSG_NO_CHOICES, question_id))
        indices = normalize_choice_answer(raw_answer, choices)
        if not indices:
            issues.append(ParseIssue.warn(MSG_CHECK_SINGLE, question_id))
        answer: Any = indices if question_type is QuestionType.MULTI else (indices[0] if indices else None)
        check_answer_range(answer, choices, question_id, issues)
        return Question(
            id=question_id,
            type=question_type,
            prompt=prompt,
            choices=choices,
            choice_labels=choice_labels,
            answer=answer,
            explanation=explanation,
        )

    raise ValueError(f"Unsupported question type: {question_type!r}")


def normalize_question_type(
    raw_type: Any, item: dict[str, Any], issues: list[ParseIssue], question_id: str,
) -> QuestionType:
    if isinstance(raw_type, str) and raw_type.lower() in TYPE_ALIASES:
        return TYPE_ALIASES[raw_type.lower()]

    choices = item.get("choices")
    if isinstance(choices, list) and choices:
        return QuestionType.SINGLE

    answer_text = item.get("answerText")
    if isinstance(answer_text, list) or (isinstance(answer_text, str) and answer_text) or isinstance(item.get("answer"), str):
        return QuestionType.SHORT

    issues.append(ParseIssue.warn(MSG_TYPE_GUESSED, question_id))
    return QuestionType.SHORT


def normalize_short_answers(item: dict[str, Any]) -> list[str]:
    answer_text = item.get("answerText")
    if isinstance(answer_text, list):
        return [text for text in (_stringify(value).strip() for value in answer_text) if text]
    if isinstance(answer_text, str):
        return split_short_answer_tokens(answer_text)
    if isinstance(item.get("answer"), str):
        return split_short_answer_tokens(item["answer"])
    return []


def normalize_ox_answer(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return 0 if value else 1
    if isinstance(value, (int, float)):
        return 0 if value == 0 else 1
    if isinstance(value, str):
        parsed = parse_ox(value)
        if parsed is not None:
            return parsed
        indices = extract_indices(value, OX_CHOICES)
        if indices:
            return indices[0]
    return None


def normalize_choice_answer(value: Any, choices: list[str]) -> list[int]:
    """Resolve a JSON answer value; bare numbers are already 0-based."""
    if isinstance(value, list):
        indices: set[int] = set()
        for entry in value:
            indices.update(normalize_choice_answer(entry, choices))
        return sorted(index for index in indices if index >= 0)
    if isinstance(value, bool):
        return []
    if isinstance(value, int):
        return [value] if value >= 0 else []
    if isinstance(value, float) and value.is_integer():
        return [int(value)] if value >= 0 else []
    if isinstance(value, str):
        return extract_indices(value, choices)
    return []


def _normalize_id(value: Any) -> str:
    if isinstance(value, bool):
        return ""
    if isinstance(value, (str, int)):
        return str(value).strip()
    return ""


def _stringify(value: Any) -> str:
    return "" if value is None else str(value)
