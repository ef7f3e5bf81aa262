from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from .builder import (
    MSG_CHECK_MULTI,
    MSG_CHECK_OX,
    MSG_CHECK_SINGLE,
    MSG_EMPTY_ANSWER,
    MSG_EMPTY_PROMPT,
    MSG_NO_CHOICES,
    MSG_NO_TEXT_QUESTIONS,
    check_answer_range,
    ensure_unique_ids,
    optional_text,
)
from .config_manager import parsing_option
from .detector import (
    DEFAULT_SECTION_KEYWORDS,
    compile_answer_key_heading,
    is_answer_key_heading,
    is_section_divider,
    is_section_heading,
    match_inline_answer,
    match_inline_explanation,
    parse_choice_line,
    parse_question_start,
    strip_markdown,
)
from .models import OX_CHOICES, ExamData, ParseIssue, Question, QuestionType
from .tokenizer import (
    extract_indices,
    guess_type,
    normalize_choice_token,
    parse_ox,
    split_short_answer_tokens,
)


logger = logging.getLogger(__name__)


@dataclass
class AnswerKeyEntry:
    answer: str
    explanation: Optional[str] = None


@dataclass
class _PlainBlock:
    id: str
    prompt_lines: list[str] = field(default_factory=list)
    choices: list[str] = field(default_factory=list)
    choice_labels: list[Optional[str]] = field(default_factory=list)
    answer_raw: str = ""
    explanation_lines: list[str] = field(default_factory=list)


class PlainTextParser:
    _ANSWER_KEY_LINE_RE = re.compile(r"^(\d+)\s*[\)\.]?\s*(.+)$")
    _LIST_BULLET_RE = re.compile(r"^[-*+>]\s+")
    _BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
    _EXAMPLE_ANSWER_RE = re.compile(r"^예[:\)]\s*(.+)$")
    _TRAILING_DETAIL_RE = re.compile(r"^(.+?)\s*(?:\((.+)\))?\s*$", re.DOTALL)
    _SINGLE_LETTER_RE = re.compile(r"^[A-Za-z]$")
    _OX_TOKEN_RE = re.compile(r"^(O|X)$", re.IGNORECASE)

    def __init__(self, config: Optional[dict[str, Any]] = None) -> None:
        self.config = config or {}
        self.section_keywords: list[str] = parsing_option(
            self.config, "section_keywords", DEFAULT_SECTION_KEYWORDS
        )
        self.answer_key_heading = compile_answer_key_heading(
            parsing_option(self.config, "answer_key_headings")
        )
        self.short_token_max_length: int = int(parsing_option(self.config, "short_token_max_length"))
        self.title: str = parsing_option(self.config, "text_title")

    def parse(self, raw: str) -> tuple[Optional[ExamData], list[ParseIssue]]:
        issues: list[ParseIssue] = []
        question_text, answer_text = self.split_answer_section(raw)
        answer_key = self.parse_answer_key(answer_text) if answer_text is not None else {}
        blocks = self._segment_blocks(question_text)
        logger.debug("Segmented %d question blocks, %d answer-key entries", len(blocks), len(answer_key))

        if not blocks:
            issues.append(ParseIssue.error(MSG_NO_TEXT_QUESTIONS))
            return None, issues

        questions = [
            self._build_question(block, index, answer_key, issues)
            for index, block in enumerate(blocks)
        ]
        return ExamData(title=self.title, questions=ensure_unique_ids(questions)), issues

    # ── 정답 구역 분리 ──────────────────────────────────────

    def split_answer_section(self, raw: str) -> tuple[str, Optional[str]]:
        lines = _split_lines(raw)
        for index, line in enumerate(lines):
            if is_answer_key_heading(line, self.answer_key_heading):
                return "\n".join(lines[:index]), "\n".join(lines[index + 1:])
        return raw, None

    def parse_answer_key(self, raw: str) -> dict[str, AnswerKeyEntry]:
        entries: dict[str, AnswerKeyEntry] = {}
        for line in _split_lines(raw):
            trimmed = line.strip()
            if not trimmed:
                continue
            if is_section_divider(trimmed) or is_section_heading(trimmed, self.section_keywords):
                continue

            match = self._ANSWER_KEY_LINE_RE.match(self._LIST_BULLET_RE.sub("", trimmed, count=1))
            if not match:
                continue
            entry = self.parse_answer_entry(match.group(2).strip())
            if entry is not None:
                entries[f"Q{match.group(1)}"] = entry
        return entries

    def parse_answer_entry(self, raw: str) -> Optional[AnswerKeyEntry]:
        if not raw:
            return None

        bold = self._BOLD_RE.search(raw)
        if bold:
            remainder = raw.replace(bold.group(0), "", 1).strip()
            explanation = _strip_wrapping_parens(strip_markdown(remainder)) if remainder else None
            return AnswerKeyEntry(bold.group(1).strip(), explanation or None)

        cleaned = strip_markdown(raw)
        example = self._EXAMPLE_ANSWER_RE.match(cleaned)
        if example:
            return AnswerKeyEntry(example.group(1).strip())

        split = self._TRAILING_DETAIL_RE.match(cleaned)
        if split:
            candidate = split.group(1).strip()
            detail = (split.group(2) or "").strip()
            if detail and self._is_short_answer_token(candidate):
                return AnswerKeyEntry(candidate, detail)

        return AnswerKeyEntry(cleaned.strip())

    def _is_short_answer_token(self, value: str) -> bool:
        trimmed = value.strip()
        if len(trimmed) <= self.short_token_max_length:
            return True
        return bool(self._SINGLE_LETTER_RE.match(trimmed) or self._OX_TOKEN_RE.match(trimmed))

    # ── 문제 구역 상태 기계 ─────────────────────────────────

    def _segment_blocks(self, question_text: str) -> list[_PlainBlock]:
        blocks: list[_PlainBlock] = []
        current: Optional[_PlainBlock] = None
        last_was_blank = True

        def start_block(block_id: str, prompt: str = "") -> _PlainBlock:
            nonlocal current
            if current is not None:
                blocks.append(current)
            current = _PlainBlock(id=block_id, prompt_lines=[prompt] if prompt else [])
            return current

        for line in _split_lines(question_text):
            trimmed = line.strip()
            if not trimmed:
                last_was_blank = True
                continue
            # 구분선은 글머리표 보기(`-`)로 읽히므로 다른 규칙보다 먼저 거른다.
            if is_section_divider(trimmed):
                last_was_blank = True
                continue

            cleaned = strip_markdown(trimmed)

            answer = match_inline_answer(cleaned)
            if answer is not None:
                block = current or start_block(f"Q{len(blocks) + 1}")
                block.answer_raw = answer
                last_was_blank = False
                continue

            explanation = match_inline_explanation(cleaned)
            if explanation is not None:
                block = current or start_block(f"Q{len(blocks) + 1}")
                block.explanation_lines.append(explanation)
                last_was_blank = False
                continue

            question_start = parse_question_start(cleaned, current is None or last_was_blank)
            if question_start is not None:
                start_block(question_start.id, question_start.prompt)
                last_was_blank = False
                continue

            choice = parse_choice_line(trimmed) or parse_choice_line(cleaned)
            if choice is not None and current is not None:
                current.choices.append(choice.text)
                current.choice_labels.append(choice.label)
                last_was_blank = False
                continue

            if is_section_heading(trimmed, self.section_keywords):
                last_was_blank = True
                continue

            if current is None:
                start_block(f"Q{len(blocks) + 1}", cleaned)
            elif current.choices:
                # 보기가 다음 줄로 이어진 경우
                current.choices[-1] = f"{current.choices[-1]} {cleaned}".strip()
            else:
                current.prompt_lines.append(cleaned)
            last_was_blank = False

        if current is not None:
            blocks.append(current)
        return blocks

    # ── 문항 확정 ───────────────────────────────────────────

    def _build_question(
        self,
        block: _PlainBlock,
        index: int,
        answer_key: dict[str, AnswerKeyEntry],
        issues: list[ParseIssue],
    ) -> Question:
        question_id = block.id.strip() or f"Q{index + 1}"
        prompt = "\n".join(block.prompt_lines).strip()
        explanation = " ".join(block.explanation_lines).strip()
        entry = answer_key.get(question_id) or answer_key.get(f"Q{index + 1}")

        answer_raw = block.answer_raw.strip()
        if not answer_raw and entry is not None:
            answer_raw = entry.answer.strip()
        if not explanation and entry is not None and entry.explanation:
            explanation = entry.explanation.strip()

        choices = [normalize_choice_token(choice) for choice in block.choices]
        choice_labels = list(block.choice_labels) if any(block.choice_labels) else None
        question_type = guess_type(choices, answer_raw)

        if not prompt:
            issues.append(ParseIssue.warn(MSG_EMPTY_PROMPT, question_id))
        if not answer_raw:
            issues.append(ParseIssue.warn(MSG_EMPTY_ANSWER, question_id))
        if question_type in (QuestionType.SINGLE, QuestionType.MULTI) and not choices:
            issues.append(ParseIssue.warn(MSG_NO_CHOICES, question_id))

        if question_type is QuestionType.SHORT:
            return Question(
                id=question_id,
                type=question_type,
                prompt=prompt,
                answer_text=split_short_answer_tokens(answer_raw),
                explanation=optional_text(explanation),
            )

        if question_type is QuestionType.OX:
            answer = parse_ox(answer_raw)
            if answer is None and answer_raw:
                resolved = extract_indices(answer_raw, OX_CHOICES)
                answer = resolved[0] if resolved else None
            if answer is None:
                issues.append(ParseIssue.warn(MSG_CHECK_OX, question_id))
            return Question(
                id=question_id,
                type=question_type,
                prompt=prompt,
                choices=list(OX_CHOICES),
                choice_labels=list(OX_CHOICES),
                answer=answer,
                explanation=optional_text(explanation),
            )

        if question_type is QuestionType.SINGLE or question_type is QuestionType.MULTI:
            indices = extract_indices(answer_raw, choices) if answer_raw else []
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
                choice_labels=choice_labels,
                answer=answer_value,
                explanation=optional_text(explanation),
            )

        raise ValueError(f"Unsupported question type: {question_type!r}")


def parse_plain_text(
    raw: str, config: Optional[dict[str, Any]] = None,
) -> tuple[Optional[ExamData], list[ParseIssue]]:
    return PlainTextParser(config).parse(raw)


def _split_lines(raw: str) -> list[str]:
    return raw.replace("\r\n", "\n").split("\n")


def _strip_wrapping_parens(value: str) -> str:
    trimmed = value.strip()
    if trimmed.startswith("(") and trimmed.endswith(")"):
        return trimmed[1:-1].strip()
    return trimmed
