import unittest

from exam_grader.builder import (
    MSG_ANSWER_OUT_OF_RANGE,
    MSG_CHECK_OX,
    MSG_EMPTY_PROMPT,
    MSG_NO_CHOICES,
    MSG_NO_JSON_QUESTIONS,
    MSG_TYPE_GUESSED,
)
from exam_grader.models import IssueLevel, QuestionType
from exam_grader.normalizer import normalize_json_input


class NormalizeJsonInputTestCase(unittest.TestCase):
    def _messages(self, issues, question_id=None):
        return [issue.message for issue in issues if question_id is None or issue.question_id == question_id]

    def test_canonical_object(self) -> None:
        exam, issues = normalize_json_input({
            "title": "t",
            "questions": [{"id": "Q1", "type": "single", "prompt": "?", "choices": ["1", "2"], "answer": 0}],
        })
        self.assertEqual(issues, [])
        self.assertEqual(exam.title, "t")
        question = exam.questions[0]
        self.assertIs(question.type, QuestionType.SINGLE)
        self.assertEqual(question.choices, ["1", "2"])
        self.assertEqual(question.answer, 0)

    def test_bare_array_uses_default_title_and_ids(self) -> None:
        exam, _ = normalize_json_input([
            {"prompt": "a?", "choices": ["x", "y"], "answer": "②"},
            {"prompt": "b?", "answerText": "서울"},
        ])
        self.assertEqual(exam.title, "무제 시험")
        self.assertEqual([question.id for question in exam.questions], ["Q1", "Q2"])
        self.assertEqual(exam.questions[0].answer, 1)
        self.assertIs(exam.questions[1].type, QuestionType.SHORT)
        self.assertEqual(exam.questions[1].answer_text, ["서울"])

    def test_default_title_comes_from_config(self) -> None:
        exam, _ = normalize_json_input(
            [{"prompt": "?", "answerText": "a"}],
            {"parsing": {"default_title": "모의고사"}},
        )
        self.assertEqual(exam.title, "모의고사")

    def test_zero_questions_is_an_error(self) -> None:
        for payload in ({"title": "t", "questions": []}, [], {"title": "t"}, "text", 3):
            with self.subTest(payload=payload):
                exam, issues = normalize_json_input(payload)
                self.assertIsNone(exam)
                self.assertEqual(len(issues), 1)
                self.assertIs(issues[0].level, IssueLevel.ERROR)
                self.assertEqual(issues[0].message, MSG_NO_JSON_QUESTIONS)

    def test_missing_choices_keeps_every_question(self) -> None:
        exam, issues = normalize_json_input({"questions": [
            {"id": "Q1", "type": "single", "prompt": "a?", "answer": 0},
            {"id": "Q2", "type": "single", "prompt": "b?", "choices": ["x", "y"], "answer": 1},
        ]})
        self.assertEqual(len(exam.questions), 2)
        self.assertIn(MSG_NO_CHOICES, self._messages(issues, "Q1"))
        self.assertEqual(self._messages(issues, "Q2"), [])
        self.assertTrue(all(issue.level is IssueLevel.WARN for issue in issues))

    def test_malformed_entry_degrades_to_warning(self) -> None:
        exam, issues = normalize_json_input({"questions": ["oops", {"prompt": "?", "answerText": "a"}]})
        self.assertEqual(len(exam.questions), 2)
        self.assertIs(exam.questions[0].type, QuestionType.SHORT)
        self.assertTrue(any(issue.question_id == "Q1" for issue in issues))

    def test_type_aliases_and_guessing(self) -> None:
        exam, issues = normalize_json_input([
            {"type": "TF", "prompt": "?", "answer": "O"},
            {"type": "trueFalse", "prompt": "?", "answer": False},
            {"prompt": "?", "choices": ["a", "b"], "answer": 1},
            {"prompt": "?"},
        ])
        types = [question.type for question in exam.questions]
        self.assertEqual(types, [QuestionType.OX, QuestionType.OX, QuestionType.SINGLE, QuestionType.SHORT])
        self.assertEqual(exam.questions[0].answer, 0)
        self.assertEqual(exam.questions[1].answer, 1)
        self.assertIn(MSG_TYPE_GUESSED, self._messages(issues, "Q4"))

    def test_ox_answers(self) -> None:
        exam, issues = normalize_json_input([
            {"type": "ox", "prompt": "?", "answer": 0},
            {"type": "ox", "prompt": "?", "answer": 1},
            {"type": "ox", "prompt": "?", "answer": "x"},
            {"type": "ox", "prompt": "?", "answer": "2"},
            {"type": "ox", "prompt": "?", "answer": "모름"},
        ])
        self.assertEqual([question.answer for question in exam.questions], [0, 1, 1, 1, None])
        for question in exam.questions:
            self.assertEqual(question.choices, ["O", "X"])
            self.assertEqual(question.choice_labels, ["O", "X"])
        self.assertIn(MSG_CHECK_OX, self._messages(issues, "Q5"))

    def test_short_answers(self) -> None:
        exam, _ = normalize_json_input([
            {"type": "short", "prompt": "?", "answer": "서울 | 서울특별시"},
            {"type": "short", "prompt": "?", "answerText": [" 부산 ", "", "Busan"]},
        ])
        self.assertEqual(exam.questions[0].answer_text, ["서울", "서울특별시", "서울 | 서울특별시"])
        self.assertEqual(exam.questions[1].answer_text, ["부산", "Busan"])
        self.assertIsNone(exam.questions[0].answer)

    def test_multi_answers_are_sorted_indices(self) -> None:
        exam, _ = normalize_json_input([
            {"type": "multi", "prompt": "?", "choices": ["a", "b", "c"], "answer": [2, 0]},
            {"type": "multi", "prompt": "?", "choices": ["a", "b", "c"], "answer": "①, ③"},
        ])
        self.assertEqual(exam.questions[0].answer, [0, 2])
        self.assertEqual(exam.questions[1].answer, [0, 2])

    def test_choice_labels_must_match_choice_count(self) -> None:
        exam, _ = normalize_json_input([
            {"prompt": "?", "choices": ["a", "b"], "choiceLabels": ["가", "나"], "answer": 0},
            {"prompt": "?", "choices": ["a", "b"], "choiceLabels": ["가"], "answer": 0},
        ])
        self.assertEqual(exam.questions[0].choice_labels, ["가", "나"])
        self.assertIsNone(exam.questions[1].choice_labels)

    def test_numeric_ids_and_duplicates(self) -> None:
        exam, _ = normalize_json_input([
            {"id": 7, "prompt": "?", "answerText": "a"},
            {"id": "Q1", "prompt": "?", "answerText": "a"},
            {"id": "Q1", "prompt": "?", "answerText": "a"},
        ])
        self.assertEqual([question.id for question in exam.questions], ["7", "Q1", "Q1-2"])

    def test_empty_prompt_and_out_of_range_answer_warn(self) -> None:
        exam, issues = normalize_json_input([
            {"type": "single", "choices": ["a", "b"], "answer": 5},
        ])
        self.assertEqual(exam.questions[0].answer, 5)
        messages = self._messages(issues, "Q1")
        self.assertIn(MSG_EMPTY_PROMPT, messages)
        self.assertIn(MSG_ANSWER_OUT_OF_RANGE, messages)


if __name__ == "__main__":
    unittest.main()
