from __future__ import annotations

import re
from typing import Any, Optional

from .builder import (
    MSG_CHECK_MULTI,
    MSG_CHECK_OX,
    MSG_CHECK_SINGLE,
    MSG_EMPTY_ANSWER,
    MSG_EMPTY_PROMPT,
    MSG_NO_CHOICES,
    check_answer_range,
    ensure_unique_ids,
    optional_text,
)
from .config_manager import parsing_option
from .detector import parse_choice_line
from .models import (
    OX_CHOICES,
    EditableExam,
    EditableQuestion,
    ExamData,
    ParseIssue,
    Question,
    QuestionType,
)
from .tokenizer import (
    CIRCLED_NUMBERS,
    extract_indices,
    normalize_choice_token,
    parse_ox,
    split_short_answer_tokens,
)


_LABEL_TERMINATED_RE = re.compile(r"[.)]$")
_OX_LABEL_RE = re.compile(r"^[OX]$", re.IGNORECASE)
_ALNUM_LABEL_RE = re.compile(r"^[A-Za-z0-9]+$")
_DIGIT_RE = re.compile(r"\d+")
_WHITESPACE_RE = re.compile(r"\s")
_SHORT_DELIMITER_RE = re.compile(r"[|,;/]+")
_EDITOR_SEPARATOR_RE = re.compile(r"\|+")

EDITOR_SHORT_SEPARATOR = "|"


def editable_to_exam(
    editable: EditableExam, config: Optional[dict[str, Any]] = None,
) -> tuple[ExamData, list[ParseIssue]]:
    """Rebuild a fresh canonical exam from the editable form.

    The declared type of each question is trusted as given. The editable
    input is never modified.
    """
    issues: list[ParseIssue] = []
    questions = [
        _editable_question_to_question(item, index, issues)
        for index, item in enumerate(editable.questions)
    ]
    title = editable.title.strip() or parsing_option(config, "default_title")
    return ExamData(title=title, questions=ensure_unique_ids(questions)), issues


def _editable_question_to_question(
    item: EditableQuestion, index: int, issues: list[ParseIssue],
) -> Question:
    question_id = item.id.strip() or f"Q{index + 1}"
    prompt = item.prompt.strip()
    explanation = optional_text(item.explanation)
    answer_raw = item.answer_text.strip()

    if not prompt:
        issues.append(ParseIssue.warn(MSG_EMPTY_PROMPT, question_id))

    question_type = QuestionType(item.type)

    if question_type is QuestionType.SHORT:
        answer_text = parse_short_answers_text(answer_raw)
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
        answer = parse_ox(answer_raw)
        if answer is None:
            answer = parse_ox(_WHITESPACE_RE.sub("", answer_raw))
        if answer is None and _DIGIT_RE.search(answer_raw):
            resolved = extract_indices(answer_raw, OX_CHOICES)
            answer = resolved[0] if resolved else None
        if answer is None:
            issues.append(ParseIssue.warn(MSG_CHECK_OX, question_id))
        check_answer_range(answer, OX_CHOICES, question_id, issues)
        return Question(
            id=question_id,
            type=question_type,
            prompt=prompt,
            choices=list(OX_CHOICES),
            choice_labels=list(OX_CHOICES),
            answer=answer,
            explanation=explanation,
        )

    if question_type is QuestionType.SINGLE or question_type is QuestionType.MULTI:
        choices, labels = parse_choices_text(item.choices_text)
        if not choices:
            issues.append(ParseIssue.warn(MSG_NO_CHOICES, question_id))
        indices = extract_indices(answer_raw, choices)
        if question_type is QuestionType.MULTI:
            if not indices:
                issues.append(ParseIssue.warn(MSG_CHECK_MULTI, question_id))
            answer_value: Any = indices
        else:
            if not indices:
                issues.append(ParseIssue.warn(MSG_CHECK_SINGLE, question_id))
            answer_value = indices[0] if indices else None
        check_answer_range(answer_value, choices, question_id, issues)
        return Question(
            id=question_id,
            type=question_type,
            prompt=prompt,
            choices=choices,
            choice_labels=labels,
            answer=answer_value,
            explanation=explanation,
        )

    raise ValueError(f"Unsupported question type: {question_type!r}")


def parse_choices_text(choices_text: str) -> tuple[list[str], Optional[list[Optional[str]]]]:
    choices: list[str] = []
    labels: list[Optional[str]] = []
    for line in choices_text.replace("\r\n", "\n").split("\n"):
        line = line.strip()
        if not line:
            continue
        token = parse_choice_line(line)
        if token is not None:
            choices.append(normalize_choice_token(token.text))
            labels.append(token.label.strip() if token.label else None)
        else:
            choices.append(normalize_choice_token(line))
            labels.append(None)

    return choices, (labels if any(labels) else None)


def to_editable_exam(exam: ExamData) -> EditableExam:
    return EditableExam(
        title=exam.title,
        questions=[
            EditableQuestion(
                id=question.id,
                type=question.type,
                prompt=question.prompt,
                choices_text=format_choices_for_editor(question),
                answer_text=format_answer_for_editor(question),
                explanation=question.explanation or "",
            )
            for question in exam.questions
        ],
    )


def parse_short_answers_text(raw: str) -> list[str]:
    """Split the editor notation of accepted short answers.

    When the text holds ``|`` only that separator splits it, so a literal
    such as ``1,000`` survives. Without ``|`` the looser ``,;/`` delimiters
    apply as on the ingestion paths.
    """
    trimmed = (raw or "").strip()
    if EDITOR_SHORT_SEPARATOR not in trimmed:
        return split_short_answer_tokens(trimmed)

    answers: list[str] = []
    for piece in trimmed.split(EDITOR_SHORT_SEPARATOR):
        piece = piece.strip()
        if piece and piece not in answers:
            answers.append(piece)

    phrase = trimmed.strip(EDITOR_SHORT_SEPARATOR + " ")
    if len(answers) > 1 and phrase not in answers:
        answers.append(phrase)
    return answers


def format_choices_for_editor(question: Question) -> str:
    labels = question.choice_labels or []
    lines: list[str] = []
    for index, choice in enumerate(question.choices):
        raw_label = labels[index] if index < len(labels) else None
        label = format_label_for_editor(raw_label)
        line = f"{label} {choice}" if label else ""
        if line and _reads_back(line, raw_label, choice):
            lines.append(line)
        else:
            lines.append(_bare_choice_line(choice))
    return "\n".join(lines)


def _reads_back(line: str, label: str, choice: str) -> bool:
    token = parse_choice_line(line)
    if token is None or token.label is None:
        return False
    expected = _LABEL_TERMINATED_RE.sub("", label.strip())
    return (
        token.label.upper() == expected.upper()
        and normalize_choice_token(token.text) == normalize_choice_token(choice)
    )


def _bare_choice_line(choice: str) -> str:
    # 보기 문법으로 읽히는 본문은 글머리표를 붙여 그대로 돌아오게 한다.
    if parse_choice_line(choice) is not None:
        return f"- {choice}"
    return choice


def format_label_for_editor(label: Optional[str]) -> Optional[str]:
    if not label:
        return None
    if _LABEL_TERMINATED_RE.search(label):
        return label
    if label in CIRCLED_NUMBERS:
        return label
    if _OX_LABEL_RE.match(label):
        return label.upper()
    if _ALNUM_LABEL_RE.match(label):
        return f"{label}."
    return label


def format_answer_for_editor(question: Question) -> str:
    labels = question.choice_labels or []

    def label_for(index: int) -> str:
        label = labels[index] if 0 <= index < len(labels) else None
        if label and extract_indices(label, question.choices) == [index]:
            return label
        return str(index + 1)

    if question.type is QuestionType.SHORT:
        answers = _editor_short_answers(question.answer_text or [])
        text = f" {EDITOR_SHORT_SEPARATOR} ".join(answers)
        if len(answers) == 1 and _SHORT_DELIMITER_RE.search(text):
            # 구분자가 든 단일 정답은 끝에 |를 붙여 쪼개지지 않게 한다.
            text = f"{text} {EDITOR_SHORT_SEPARATOR}"
        return text

    if question.type is QuestionType.MULTI:
        if not isinstance(question.answer, list):
            return ""
        return ", ".join(label_for(index) for index in question.answer)

    if question.type is QuestionType.OX:
        if isinstance(question.answer, int):
            return "O" if question.answer == 0 else "X"
        return ""

    if question.type is QuestionType.SINGLE:
        return label_for(question.answer) if isinstance(question.answer, int) else ""

    raise ValueError(f"Unsupported question type: {question.type!r}")


def _editor_short_answers(values: list[str]) -> list[str]:
    # 다시 파싱할 때 재생성되는 이어 붙인 문구는 생략한다.
    kept: list[str] = []
    for value in values:
        if _is_joined_phrase(value, values):
            continue
        kept.append(value)
    return kept


def _is_joined_phrase(value: str, values: list[str]) -> bool:
    parts = [part.strip() for part in _EDITOR_SEPARATOR_RE.split(value) if part.strip()]
    return len(parts) > 1 and all(part in values for part in parts)
