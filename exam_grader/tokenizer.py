from __future__ import annotations

import re
from typing import Optional, Sequence, Union

from .models import Question, QuestionType


CIRCLED_NUMBERS = {
    "①": 0,
    "②": 1,
    "③": 2,
    "④": 3,
    "⑤": 4,
    "⑥": 5,
    "⑦": 6,
    "⑧": 7,
    "⑨": 8,
    "⑩": 9,
}

OX_TRUE_TOKENS = ("o", "true", "t", "예")
OX_FALSE_TOKENS = ("x", "false", "f", "아니오")

UNANSWERED_LABEL = "미답"

_BRACKET_RE = re.compile(r"[()\[\]{}]")
_SEPARATOR_GLYPH_RE = re.compile(r"[·•]")
_WHITESPACE_RE = re.compile(r"\s+")
_TOKEN_SPLIT_RE = re.compile(r"[,/|;\s]+")
_TRAILING_MARK_RE = re.compile(r"[.)]$")
_DIGITS_RE = re.compile(r"\d+")
_LATIN_LETTER_RE = re.compile(r"^[A-Za-z]$")
_ALNUM_LABEL_RE = re.compile(r"^[A-Za-z0-9]+$")
_MULTI_DELIMITER_RE = re.compile(r"[,/|\s]+")
_SHORT_SPLIT_RE = re.compile(r"[|,;/]+")


def normalize_short_answer(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value.strip()).lower()


def normalize_choice_token(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value.strip())


def _find_choice(token: str, choices: Sequence[str]) -> Optional[int]:
    target = normalize_choice_token(token).lower()
    for index, choice in enumerate(choices):
        if normalize_choice_token(choice).lower() == target:
            return index
    return None


def extract_indices(raw: str, choices: Sequence[str] = ()) -> list[int]:
    """Resolve a free-form answer string into 0-based choice indices.

    Each token is tried as a circled numeral, a 1-based number, a single
    Latin letter and finally as literal choice text. When no token resolves,
    the whole cleaned string is matched against the choices. The result is
    de-duplicated and sorted ascending.
    """
    cleaned = _BRACKET_RE.sub(" ", raw or "")
    cleaned = _SEPARATOR_GLYPH_RE.sub(" ", cleaned)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
    if not cleaned:
        return []

    indices: set[int] = set()
    for token in _TOKEN_SPLIT_RE.split(cleaned):
        if not token:
            continue
        token = _TRAILING_MARK_RE.sub("", token)

        if token in CIRCLED_NUMBERS:
            indices.add(CIRCLED_NUMBERS[token])
            continue

        digits = _DIGITS_RE.search(token)
        if digits and int(digits.group(0)) > 0:
            indices.add(int(digits.group(0)) - 1)
            continue

        if _LATIN_LETTER_RE.match(token):
            indices.add(ord(token.upper()) - ord("A"))
            continue

        found = _find_choice(token, choices)
        if found is not None:
            indices.add(found)

    if not indices:
        found = _find_choice(cleaned, choices)
        if found is not None:
            indices.add(found)

    return sorted(index for index in indices if index >= 0)


def is_ox_answer(value: str) -> bool:
    return parse_ox(value) is not None


def parse_ox(value: str) -> Optional[int]:
    normalized = (value or "").strip().lower()
    if normalized in OX_TRUE_TOKENS:
        return 0
    if normalized in OX_FALSE_TOKENS:
        return 1
    return None


def guess_type(choices: Sequence[str], answer_raw: str) -> QuestionType:
    if is_ox_answer(answer_raw):
        return QuestionType.OX

    if choices:
        trimmed = (answer_raw or "").strip()
        has_delimiter = bool(_MULTI_DELIMITER_RE.search(trimmed)) and len(trimmed) > 1
        if has_delimiter and len(extract_indices(trimmed, choices)) > 1:
            return QuestionType.MULTI
        return QuestionType.SINGLE

    return QuestionType.SHORT


def split_short_answer_tokens(raw: str) -> list[str]:
    trimmed = (raw or "").strip()
    if not trimmed:
        return []

    tokens: list[str] = []
    for part in _SHORT_SPLIT_RE.split(trimmed):
        part = part.strip()
        if part and part not in tokens:
            tokens.append(part)

    if len(tokens) > 1 and trimmed not in tokens:
        # 전체 문구도 정답으로 인정한다.
        tokens.append(trimmed)
    return tokens


def format_choice_label(question: Question, index: int) -> str:
    labels = question.choice_labels or []
    explicit = labels[index] if 0 <= index < len(labels) else None
    if not explicit or not explicit.strip():
        return str(index + 1)

    raw_label = explicit.strip()
    if question.type is QuestionType.OX:
        return raw_label
    if raw_label in CIRCLED_NUMBERS:
        return raw_label
    if _ALNUM_LABEL_RE.match(raw_label):
        return f"{raw_label}."
    return raw_label


def format_choice_answer(question: Question, answer: Union[int, list[int], None]) -> str:
    if answer is None:
        return UNANSWERED_LABEL

    indices = answer if isinstance(answer, list) else [answer]
    parts: list[str] = []
    for index in indices:
        label = format_choice_label(question, index)
        text = question.choices[index] if 0 <= index < len(question.choices) else ""
        if not text or text == label:
            parts.append(label)
        else:
            parts.append(f"{label} {text}")
    return ", ".join(parts)
