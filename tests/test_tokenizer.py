import unittest

from exam_grader.models import Question, QuestionType
from exam_grader.tokenizer import (
    extract_indices,
    format_choice_answer,
    format_choice_label,
    guess_type,
    is_ox_answer,
    normalize_short_answer,
    parse_ox,
    split_short_answer_tokens,
)


class ExtractIndicesTestCase(unittest.TestCase):
    def test_circled_numeral(self) -> None:
        self.assertEqual(extract_indices("②"), [1])
        self.assertEqual(extract_indices("⑩"), [9])

    def test_digits_are_one_based(self) -> None:
        self.assertEqual(extract_indices("1, 3"), [0, 2])
        self.assertEqual(extract_indices("2번"), [1])
        self.assertEqual(extract_indices("(4)"), [3])

    def test_latin_letters(self) -> None:
        self.assertEqual(extract_indices("B"), [1])
        self.assertEqual(extract_indices("a / c"), [0, 2])

    def test_result_is_ascending_and_deduplicated(self) -> None:
        self.assertEqual(extract_indices("3, 1"), [0, 2])
        self.assertEqual(extract_indices("2, ②, B"), [1])

    def test_literal_choice_text(self) -> None:
        choices = ["HTML", "CSS", "Git"]
        self.assertEqual(extract_indices("  css ", choices), [1])
        self.assertEqual(extract_indices("HTML, Git", choices), [0, 2])

    def test_whole_string_fallback(self) -> None:
        choices = ["New York", "Paris"]
        self.assertEqual(extract_indices("new   york", choices), [0])

    def test_exact_choice_text_resolves_to_its_index(self) -> None:
        choices = ["HTML", "CSS", "JavaScript", "서울특별시", "New York City"]
        for index, choice in enumerate(choices):
            with self.subTest(choice=choice):
                self.assertEqual(extract_indices(choice, choices), [index])

    def test_unresolvable_input(self) -> None:
        self.assertEqual(extract_indices(""), [])
        self.assertEqual(extract_indices("   "), [])
        self.assertEqual(extract_indices("0"), [])
        self.assertEqual(extract_indices("없음", ["가", "나"]), [])

    def test_indices_are_not_bounds_checked(self) -> None:
        self.assertEqual(extract_indices("7", ["a", "b"]), [6])


class OxAndTypeGuessTestCase(unittest.TestCase):
    def test_parse_ox(self) -> None:
        for raw in ("O", "o", "true", "T", "예"):
            self.assertEqual(parse_ox(raw), 0, raw)
        for raw in (" X ", "false", "f", "아니오"):
            self.assertEqual(parse_ox(raw), 1, raw)
        self.assertIsNone(parse_ox("maybe"))
        self.assertFalse(is_ox_answer("②"))

    def test_guess_type(self) -> None:
        self.assertIs(guess_type([], "O"), QuestionType.OX)
        self.assertIs(guess_type(["a", "b", "c"], "1, 2"), QuestionType.MULTI)
        self.assertIs(guess_type(["a", "b", "c"], "②"), QuestionType.SINGLE)
        self.assertIs(guess_type(["HTML", "CSS"], "HTML"), QuestionType.SINGLE)
        self.assertIs(guess_type(["a", "b"], ""), QuestionType.SINGLE)
        self.assertIs(guess_type([], "서울"), QuestionType.SHORT)
        self.assertIs(guess_type([], ""), QuestionType.SHORT)

    def test_repeated_index_is_not_multi(self) -> None:
        self.assertIs(guess_type(["a", "b"], "2, ②"), QuestionType.SINGLE)


class ShortAnswerTokenTestCase(unittest.TestCase):
    def test_single_token(self) -> None:
        self.assertEqual(split_short_answer_tokens("  서울 "), ["서울"])

    def test_multiple_tokens_keep_full_phrase(self) -> None:
        self.assertEqual(
            split_short_answer_tokens("서울 | 서울특별시"),
            ["서울", "서울특별시", "서울 | 서울특별시"],
        )

    def test_duplicates_collapse(self) -> None:
        self.assertEqual(split_short_answer_tokens("a, a"), ["a"])
        self.assertEqual(split_short_answer_tokens(""), [])

    def test_normalize_short_answer(self) -> None:
        self.assertEqual(normalize_short_answer("  Seoul   City "), "seoul city")


class ChoiceLabelTestCase(unittest.TestCase):
    def _question(self, labels=None, question_type=QuestionType.SINGLE) -> Question:
        return Question(
            id="Q1",
            type=question_type,
            prompt="?",
            choices=["가", "나", "다"],
            choice_labels=labels,
            answer=0,
        )

    def test_explicit_labels(self) -> None:
        self.assertEqual(format_choice_label(self._question(["①", "②", "③"]), 1), "②")
        self.assertEqual(format_choice_label(self._question(["A", "B", "C"]), 2), "C.")
        self.assertEqual(format_choice_label(self._question(["1", "2", "3"]), 0), "1.")
        self.assertEqual(format_choice_label(self._question(["가)", "나)", "다)"]), 0), "가)")

    def test_fallback_label_has_no_period(self) -> None:
        self.assertEqual(format_choice_label(self._question(), 2), "3")
        self.assertEqual(format_choice_label(self._question(["A", None, "C"]), 1), "2")

    def test_ox_label_is_verbatim(self) -> None:
        question = Question(
            id="Q1", type=QuestionType.OX, prompt="?",
            choices=["O", "X"], choice_labels=["O", "X"], answer=0,
        )
        self.assertEqual(format_choice_label(question, 1), "X")

    def test_every_index_has_a_label(self) -> None:
        question = self._question(["①", "", "C"])
        for index in range(len(question.choices) + 1):
            self.assertTrue(format_choice_label(question, index))

    def test_format_choice_answer(self) -> None:
        question = self._question(["①", "②", "③"])
        self.assertEqual(format_choice_answer(question, 1), "② 나")
        self.assertEqual(format_choice_answer(question, [0, 2]), "① 가, ③ 다")
        self.assertEqual(format_choice_answer(question, None), "미답")


if __name__ == "__main__":
    unittest.main()
