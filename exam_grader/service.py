from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional

from .builder import MSG_EMPTY_INPUT, MSG_JSON_FAILED
from .config_manager import ConfigManager
from .exceptions import JsonRecoveryError, UnsupportedFileError
from .grading import grade_exam
from .json_recovery import loads_lenient
from .models import EditableExam, ExamData, GradeSummary, ParseIssue, ParseResult, UserAnswer
from .normalizer import normalize_json_input
from .parser import PlainTextParser
from .transcoder import editable_to_exam, to_editable_exam


logger = logging.getLogger(__name__)


def looks_like_json(text: str, filename: Optional[str] = None) -> bool:
    if filename and filename.lower().endswith(".json"):
        return True
    trimmed = text.strip()
    return trimmed.startswith("{") or trimmed.startswith("[")


class ExamProcessingService:
    def __init__(self, config_manager: Optional[ConfigManager] = None) -> None:
        self.config_manager = config_manager or ConfigManager()
        self._refresh_dependencies()

    def _refresh_dependencies(self) -> None:
        self.config = self.config_manager.all()
        self.parser = PlainTextParser(self.config)

    def reload_config(self) -> None:
        self.config_manager.reload()
        self._refresh_dependencies()

    def parse_input(self, raw: str, filename: Optional[str] = None) -> ParseResult:
        trimmed = (raw or "").strip()
        if not trimmed:
            return ParseResult(exam=None, editable=None, issues=[ParseIssue.error(MSG_EMPTY_INPUT)])

        if looks_like_json(trimmed, filename):
            try:
                parsed = loads_lenient(trimmed)
            except JsonRecoveryError as exc:
                logger.warning("JSON recovery failed: %s", exc.excerpt[:80])
                return ParseResult(exam=None, editable=None, issues=[ParseIssue.error(MSG_JSON_FAILED)])
            exam, issues = normalize_json_input(parsed, self.config)
        else:
            exam, issues = self.parser.parse(trimmed)

        return self._build_result(exam, issues, filename)

    def parse_file(self, file_path: str) -> ParseResult:
        path = Path(file_path)
        try:
            raw = path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as exc:
            raise UnsupportedFileError(f"UTF-8 텍스트 파일만 지원합니다: {path.name}") from exc
        except OSError as exc:
            raise UnsupportedFileError(f"파일을 읽지 못했습니다: {path.name} ({exc})") from exc
        return self.parse_input(raw, filename=path.name)

    def apply_edits(self, editable: EditableExam) -> ParseResult:
        exam, issues = editable_to_exam(editable, self.config)
        return self._build_result(exam, issues, None)

    def grade(self, exam: ExamData, answers: Mapping[str, UserAnswer]) -> GradeSummary:
        summary = grade_exam(exam, answers)
        logger.info(
            "Graded %s: %d/%d correct, %d unanswered",
            exam.title, summary.correct, summary.total, summary.unanswered,
        )
        return summary

    def _build_result(
        self, exam: Optional[ExamData], issues: list[ParseIssue], source: Optional[str],
    ) -> ParseResult:
        if exam is None:
            logger.warning("No exam produced from %s: %s", source or "input", issues[0].message if issues else "")
            return ParseResult(exam=None, editable=None, issues=issues)

        logger.info("Parsed %d questions from %s", len(exam.questions), source or "input")
        if issues:
            logger.warning("%d issues attached to %s", len(issues), source or "input")
        return ParseResult(exam=exam, editable=to_editable_exam(exam), issues=issues)
