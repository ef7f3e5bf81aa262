"""Lenient JSON decoding for hand-edited or model-generated exam text.

Text produced by people or by a language model often arrives wrapped in code
fences, with typographic quotes, trailing commas or raw double quotes inside
string values. ``loads_lenient`` tries a fixed ladder of repairs on a few
candidate slices of the input before giving up.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Optional

from .exceptions import JsonRecoveryError


logger = logging.getLogger(__name__)

EXCERPT_LIMIT = 600

_CODE_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_code_fences(text: str) -> str:
    return _CODE_FENCE_RE.sub("", text).replace("```", "")


def strip_bom(text: str) -> str:
    return text[1:] if text.startswith("\ufeff") else text


def normalize_quotes(text: str) -> str:
    return text.replace("“", '"').replace("”", '"').replace("‘", "'").replace("’", "'")


def remove_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA_RE.sub(r"\1", text)


def extract_json_candidate(text: str) -> Optional[str]:
    trimmed = text.strip()
    if trimmed.startswith(("{", "[")):
        return trimmed

    for opener, closer in (("{", "}"), ("[", "]")):
        start = trimmed.find(opener)
        end = trimmed.rfind(closer)
        if start >= 0 and end > start:
            return trimmed[start:end + 1]
    return None


def escape_unescaped_quotes(text: str) -> str:
    """Escape double quotes (and raw control characters) inside string values.

    A quote closes a string only when the next non-space character is a
    structural one (``,`` ``}`` ``]`` ``:``) or the end of input.
    """
    result: list[str] = []
    in_string = False
    escaped = False
    length = len(text)

    def next_non_space(start: int) -> Optional[str]:
        for position in range(start, length):
            if text[position] not in " \n\r\t":
                return text[position]
        return None

    for index, char in enumerate(text):
        if not in_string:
            if char == '"':
                in_string = True
            result.append(char)
            continue

        if escaped:
            result.append(char)
            escaped = False
            continue

        if char == "\\":
            result.append(char)
            escaped = True
            continue

        if char == '"':
            if next_non_space(index + 1) in (None, ",", "}", "]", ":"):
                in_string = False
                result.append(char)
            else:
                result.append('\\"')
            continue

        if char == "\n":
            result.append("\\n")
        elif char == "\r":
            result.append("\\r")
        elif char == "\t":
            result.append("\\t")
        else:
            result.append(char)

    return "".join(result)


def extract_balanced_json(text: str) -> Optional[str]:
    length = len(text)
    for start in range(length):
        if text[start] not in "{[":
            continue

        stack = [text[start]]
        in_string = False
        escaped = False
        for index in range(start + 1, length):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue

            if char == '"':
                in_string = True
            elif char in "{[":
                stack.append(char)
            elif char in "}]":
                if (char == "}") != (stack[-1] == "{"):
                    break
                stack.pop()
                if not stack:
                    return text[start:index + 1]
    return None


_REPAIRS: list[tuple[str, Callable[[str], str]]] = [
    ("plain", lambda text: text),
    ("trailing-commas", remove_trailing_commas),
    ("escaped-quotes", escape_unescaped_quotes),
    ("trailing-commas+escaped-quotes", lambda text: escape_unescaped_quotes(remove_trailing_commas(text))),
]


def loads_lenient(text: str) -> Any:
    cleaned = normalize_quotes(strip_bom(strip_code_fences(text or ""))).strip()
    candidates: list[str] = []
    if cleaned:
        candidates.append(cleaned)

    extracted = extract_json_candidate(cleaned)
    if extracted and extracted not in candidates:
        candidates.append(extracted)

    balanced = extract_balanced_json(cleaned)
    if balanced and balanced not in candidates:
        candidates.append(balanced)

    for candidate in candidates:
        for name, repair in _REPAIRS:
            try:
                value = json.loads(repair(candidate))
            except ValueError:
                continue
            if name != "plain":
                logger.debug("Recovered JSON using %s strategy", name)
            return value

    compact = _WHITESPACE_RE.sub(" ", cleaned).strip()
    excerpt = compact[:EXCERPT_LIMIT] + ("..." if len(compact) > EXCERPT_LIMIT else "")
    raise JsonRecoveryError(f"JSON을 파싱하지 못했습니다. 입력 일부: {excerpt}", excerpt=excerpt)
