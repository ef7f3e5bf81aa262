from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence


DEFAULT_ANSWER_KEY_HEADINGS = [
    r"정답",
    r"정답\s*(?:&|및|/)\s*해설",
    r"Answer\s*Key",
]

DEFAULT_SECTION_KEYWORDS = ["객관식", "ox", "빈칸", "사례형", "정답", "해설"]

_CIRCLED_CHOICE_RE = re.compile(r"^([①②③④⑤⑥⑦⑧⑨⑩])\s*(.+)$")
_NUMERIC_CHOICE_RE = re.compile(r"^(\d+)\s*[\)\.]\s*(.+)$")
_LETTER_CHOICE_RE = re.compile(r"^([A-Za-z])\s*[\)\.]\s*(.+)$")
_BULLET_CHOICE_RE = re.compile(r"^[-•]\s*(.+)$")

_QUESTION_WORD_RE = re.compile(r"^(?:문제|Question)\s*#?\s*(\d+)\s*[\)\.:]?\s*(.*)$", re.IGNORECASE)
_QUESTION_Q_RE = re.compile(r"^Q\s*(\d+)\s*[\)\.:]?\s*(.*)$", re.IGNORECASE)
_QUESTION_HASH_RE = re.compile(r"^#\s*(\d+)\s*(.*)$")
_QUESTION_NUMERIC_RE = re.compile(r"^(\d+)\s*[\)\.:]\s*(.*)$")

_INLINE_ANSWER_RE = re.compile(r"^(정답|Answer)\s*[:\)\-]\s*(.+)$", re.IGNORECASE)
_INLINE_EXPLANATION_RE = re.compile(r"^(해설|Explanation)\s*[:\)\-]\s*(.+)$", re.IGNORECASE)

_MARKDOWN_BULLET_RE = re.compile(r"^\s*[-*+>]\s+")
_MARKDOWN_HEADING_RE = re.compile(r"^#{1,6}\s+")
_HEADING_PREFIX_RE = re.compile(r"^#{1,6}\s*")
_SECTION_DIVIDER_RE = re.compile(r"^[-–—]{3,}$")


@dataclass(frozen=True)
class ChoiceToken:
    label: Optional[str]
    text: str


@dataclass(frozen=True)
class QuestionStart:
    id: str
    prompt: str


def parse_choice_line(line: str) -> Optional[ChoiceToken]:
    """Split one choice line into its display label and body text."""
    match = _CIRCLED_CHOICE_RE.match(line)
    if match:
        return ChoiceToken(match.group(1), match.group(2).strip())

    match = _NUMERIC_CHOICE_RE.match(line)
    if match:
        return ChoiceToken(match.group(1), match.group(2).strip())

    match = _LETTER_CHOICE_RE.match(line)
    if match:
        return ChoiceToken(match.group(1).upper(), match.group(2).strip())

    match = _BULLET_CHOICE_RE.match(line)
    if match:
        return ChoiceToken(None, match.group(1).strip())

    return None


def parse_question_start(line: str, allow_numeric: bool) -> Optional[QuestionStart]:
    for pattern in (_QUESTION_WORD_RE, _QUESTION_Q_RE, _QUESTION_HASH_RE):
        match = pattern.match(line)
        if match:
            return QuestionStart(f"Q{match.group(1)}", (match.group(2) or "").strip())

    if allow_numeric:
        # 보기 번호와 구분하기 위해 빈 줄 뒤에서만 숫자 머리를 문제 시작으로 본다.
        match = _QUESTION_NUMERIC_RE.match(line)
        if match:
            return QuestionStart(f"Q{match.group(1)}", (match.group(2) or "").strip())
    return None


def match_inline_answer(line: str) -> Optional[str]:
    match = _INLINE_ANSWER_RE.match(line)
    return match.group(2).strip() if match else None


def match_inline_explanation(line: str) -> Optional[str]:
    match = _INLINE_EXPLANATION_RE.match(line)
    return match.group(2).strip() if match else None


def strip_markdown(line: str) -> str:
    text = _MARKDOWN_BULLET_RE.sub("", line, count=1)
    text = text.replace("**", "").replace("__", "").replace("`", "")
    return text.strip()


def is_section_divider(line: str) -> bool:
    return bool(_SECTION_DIVIDER_RE.match(line.strip()))


def is_section_heading(line: str, keywords: Optional[Sequence[str]] = None) -> bool:
    if _MARKDOWN_HEADING_RE.match(line):
        return True
    normalized = strip_markdown(line).lower()
    return any(normalized.startswith(keyword.lower()) for keyword in keywords or DEFAULT_SECTION_KEYWORDS)


def compile_answer_key_heading(headings: Optional[Sequence[str]] = None) -> re.Pattern[str]:
    alternatives = "|".join(f"(?:{pattern})" for pattern in headings or DEFAULT_ANSWER_KEY_HEADINGS)
    return re.compile(rf"^(?:{alternatives})$", re.IGNORECASE)


def is_answer_key_heading(line: str, pattern: Optional[re.Pattern[str]] = None) -> bool:
    trimmed = line.strip()
    if not trimmed or ":" in trimmed or "：" in trimmed:
        return False
    normalized = _HEADING_PREFIX_RE.sub("", trimmed)
    normalized = normalized.replace("**", "").replace("__", "").strip()
    return bool((pattern or compile_answer_key_heading()).match(normalized))
