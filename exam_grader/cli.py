from __future__ import annotations

import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from .error_messages import build_issue_report, build_parse_error_message
from .exceptions import ProcessingError
from .service import ExamProcessingService


def _summary_to_payload(summary: Any) -> dict[str, Any]:
    payload = asdict(summary)
    for result in payload["results"]:
        result["type"] = result["type"].value
    return payload


def _load_answers(path: str) -> dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as file:
        data = json.load(file)
    if not isinstance(data, dict):
        raise ProcessingError("답안 파일은 {\"문항 id\": 답} 형식의 JSON 객체여야 합니다.")
    return data


def main(argv: list[str]) -> int:
    if len(argv) not in (2, 3):
        print("usage: python -m exam_grader.cli <input_file> [answers_json]")
        return 2

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    service = ExamProcessingService()
    level = service.config_manager.get("logging.level", "WARNING")
    logging.getLogger().setLevel(str(level).upper())

    try:
        result = service.parse_file(argv[1])
        answers = _load_answers(argv[2]) if len(argv) == 3 else None
    except (ProcessingError, OSError, ValueError) as exc:
        print(build_parse_error_message(str(exc)), file=sys.stderr)
        return 1

    print(build_issue_report(result.issues), file=sys.stderr)
    if result.exam is None:
        return 1

    if answers is None:
        payload = result.exam.to_dict()
    else:
        payload = _summary_to_payload(service.grade(result.exam, answers))
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
