from __future__ import annotations

from typing import Iterable

from .builder import MSG_JSON_FAILED, MSG_NO_JSON_QUESTIONS, MSG_NO_TEXT_QUESTIONS
from .models import IssueLevel, ParseIssue


def _join_lines(lines: Iterable[str]) -> str:
    return "\n".join(line for line in lines if line.strip())


def _trim_raw_error(text: str, limit: int = 700) -> str:
    raw = (text or "").strip()
    if len(raw) <= limit:
        return raw
    return raw[:limit].rstrip() + " ..."


def build_issue_report(issues: Iterable[ParseIssue]) -> str:
    """Render parse issues as a short report: errors first, then warnings."""
    issue_list = list(issues)
    if not issue_list:
        return "문제 없이 변환되었습니다."

    errors = [issue for issue in issue_list if issue.level is IssueLevel.ERROR]
    warnings = [issue for issue in issue_list if issue.level is IssueLevel.WARN]

    lines: list[str] = []
    if errors:
        lines.append(f"[오류] {len(errors)}건 - 시험지를 만들지 못했습니다.")
        lines.extend(f"- {issue.message}" for issue in errors)
        tips = _tips_for_errors(errors)
        if tips:
            lines.append("확인사항:")
            lines.extend(f"- {tip}" for tip in tips)
    if warnings:
        lines.append(f"[경고] {len(warnings)}건")
        for issue in warnings:
            prefix = f"{issue.question_id}: " if issue.question_id else ""
            lines.append(f"- {prefix}{issue.message}")
    return _join_lines(lines)


def _tips_for_errors(errors: list[ParseIssue]) -> list[str]:
    messages = {issue.message for issue in errors}
    tips: list[str] = []
    if MSG_JSON_FAILED in messages:
        tips.append("JSON 문법(따옴표, 쉼표, 괄호 짝)을 확인해 주세요.")
        tips.append("코드 블록(```)으로 감싼 경우 블록 안쪽 내용만 붙여 넣어도 됩니다.")
    if MSG_NO_JSON_QUESTIONS in messages:
        tips.append("'questions' 배열에 문제가 1개 이상 있어야 합니다.")
    if MSG_NO_TEXT_QUESTIONS in messages:
        tips.append("문제 시작 줄이 '문제 1)', 'Q1.' 또는 '1.' 형식인지 확인해 주세요.")
    return tips


def build_parse_error_message(raw_message: str) -> str:
    raw = (raw_message or "").strip()
    lower = raw.lower()
    if "utf-8" in lower:
        return _join_lines(
            [
                "텍스트 인코딩을 읽지 못했습니다.",
                "파일을 UTF-8로 다시 저장한 뒤 시도해 주세요.",
                "",
                "[원본 오류]",
                _trim_raw_error(raw),
            ]
        )
    if "파일을 읽지 못했습니다" in raw:
        return _join_lines(
            [
                "파일을 열 수 없습니다.",
                "파일 경로와 읽기 권한을 확인해 주세요.",
                "",
                "[원본 오류]",
                _trim_raw_error(raw),
            ]
        )
    return raw
