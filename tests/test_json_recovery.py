import unittest

from exam_grader.exceptions import JsonRecoveryError, ParseError
from exam_grader.json_recovery import (
    EXCERPT_LIMIT,
    escape_unescaped_quotes,
    extract_balanced_json,
    extract_json_candidate,
    loads_lenient,
    remove_trailing_commas,
)


class LenientJsonTestCase(unittest.TestCase):
    def test_plain_json(self) -> None:
        self.assertEqual(loads_lenient('{"title": "t"}'), {"title": "t"})
        self.assertEqual(loads_lenient("[1, 2]"), [1, 2])

    def test_code_fence(self) -> None:
        raw = '```json\n{"title": "시험", "questions": []}\n```'
        self.assertEqual(loads_lenient(raw), {"title": "시험", "questions": []})

    def test_byte_order_mark(self) -> None:
        self.assertEqual(loads_lenient('\ufeff{"a": 1}'), {"a": 1})

    def test_smart_quotes(self) -> None:
        self.assertEqual(loads_lenient("{“title”: “시험”}"), {"title": "시험"})

    def test_trailing_commas(self) -> None:
        self.assertEqual(loads_lenient('{"a": [1, 2,],}'), {"a": [1, 2]})

    def test_unescaped_inner_quotes(self) -> None:
        parsed = loads_lenient('{"prompt": "He said "hi" today"}')
        self.assertEqual(parsed, {"prompt": 'He said "hi" today'})

    def test_surrounding_prose(self) -> None:
        raw = '변환 결과입니다: {"title": "t", "questions": [{"id": "Q1"}]} 확인해 주세요.'
        self.assertEqual(loads_lenient(raw)["questions"], [{"id": "Q1"}])

    def test_failure_raises_with_excerpt(self) -> None:
        with self.assertRaises(JsonRecoveryError) as context:
            loads_lenient("not   json\nat all")
        self.assertEqual(context.exception.excerpt, "not json at all")
        self.assertIsInstance(context.exception, ParseError)

    def test_excerpt_is_truncated(self) -> None:
        with self.assertRaises(JsonRecoveryError) as context:
            loads_lenient("x" * (EXCERPT_LIMIT + 100))
        self.assertEqual(len(context.exception.excerpt), EXCERPT_LIMIT + 3)
        self.assertTrue(context.exception.excerpt.endswith("..."))


class RepairStepTestCase(unittest.TestCase):
    def test_remove_trailing_commas(self) -> None:
        self.assertEqual(remove_trailing_commas('[1, 2 , ]'), "[1, 2 ]")

    def test_escape_unescaped_quotes_keeps_structure(self) -> None:
        self.assertEqual(escape_unescaped_quotes('{"a": "b"}'), '{"a": "b"}')
        self.assertEqual(escape_unescaped_quotes('{"a": "x\ny"}'), '{"a": "x\\ny"}')

    def test_extract_json_candidate(self) -> None:
        self.assertEqual(extract_json_candidate('앞 {"a": 1} 뒤'), '{"a": 1}')
        self.assertIsNone(extract_json_candidate("괄호 없음"))

    def test_extract_balanced_json_ignores_braces_in_strings(self) -> None:
        text = 'head {"a": {"b": "}"}} tail }'
        self.assertEqual(extract_balanced_json(text), '{"a": {"b": "}"}}')
        self.assertIsNone(extract_balanced_json("{ unclosed"))


if __name__ == "__main__":
    unittest.main()
