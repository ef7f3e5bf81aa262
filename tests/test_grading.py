import unittest

from exam_grader.grading import grade_exam, is_answered
from exam_grader.models import ExamData, Question, QuestionType
from exam_grader.normalizer import normalize_json_input


def _exam() -> ExamData:
    return ExamData(
        title="채점",
        questions=[
            Question(id="Q1", type=QuestionType.SINGLE, prompt="a", choices=["가", "나"],
                     choice_labels=["①", "②"], answer=1, explanation="나가 맞다"),
            Question(id="Q2", type=QuestionType.MULTI, prompt="b", choices=["x", "y", "z"], answer=[0, 2]),
            Question(id="Q3", type=QuestionType.SHORT, prompt="c", answer_text=["서울", "Seoul City"]),
            Question(id="Q4", type=QuestionType.OX, prompt="d", choices=["O", "X"],
                     choice_labels=["O", "X"], answer=0),
        ],
    )


class GradeExamTestCase(unittest.TestCase):
    def test_all_correct(self) -> None:
        summary = grade_exam(_exam(), {"Q1": 1, "Q2": [2, 0], "Q3": "  서울  ", "Q4": 0})
        self.assertEqual((summary.total, summary.correct, summary.incorrect, summary.unanswered), (4, 4, 0, 0))
        self.assertEqual(summary.accuracy, 100)
        self.assertTrue(all(result.correct for result in summary.results))

    def test_no_answers(self) -> None:
        summary = grade_exam(_exam(), {})
        self.assertEqual(summary.unanswered, 4)
        self.assertEqual(summary.correct, 0)
        self.assertEqual(summary.incorrect, 0)
        self.assertEqual(summary.accuracy, 0)
        self.assertEqual({result.user_answer_label for result in summary.results}, {"미답"})

    def test_counts_always_add_up(self) -> None:
        summary = grade_exam(_exam(), {"Q1": 0, "Q2": [0], "Q3": "seoul   city"})
        self.assertEqual(summary.correct, 1)
        self.assertEqual(summary.incorrect, 2)
        self.assertEqual(summary.unanswered, 1)
        self.assertEqual(summary.correct + summary.incorrect + summary.unanswered, summary.total)
        self.assertEqual(summary.accuracy, 25)

    def test_accuracy_rounds_half_up(self) -> None:
        exam = ExamData(title="t", questions=_exam().questions[:3])
        self.assertEqual(grade_exam(exam, {"Q1": 1, "Q2": [0, 2]}).accuracy, 67)
        self.assertEqual(grade_exam(exam, {"Q1": 1}).accuracy, 33)

    def test_empty_exam(self) -> None:
        summary = grade_exam(ExamData(title="t", questions=[]), {})
        self.assertEqual((summary.total, summary.accuracy), (0, 0))

    def test_wrong_answer_shape_is_incorrect(self) -> None:
        summary = grade_exam(_exam(), {"Q1": "1", "Q2": 0, "Q3": 3, "Q4": True})
        self.assertEqual(summary.correct, 0)
        self.assertEqual(summary.unanswered, 4)

    def test_labels(self) -> None:
        results = grade_exam(_exam(), {"Q1": 0, "Q2": [1], "Q3": " 부산 ", "Q4": 1}).results
        self.assertEqual(results[0].user_answer_label, "① 가")
        self.assertEqual(results[0].correct_answer_label, "② 나")
        self.assertEqual(results[0].explanation, "나가 맞다")
        self.assertEqual(results[1].user_answer_label, "2 y")
        self.assertEqual(results[1].correct_answer_label, "1 x, 3 z")
        self.assertEqual(results[2].user_answer_label, "부산")
        self.assertEqual(results[2].correct_answer_label, "서울 / Seoul City")
        self.assertEqual(results[3].user_answer_label, "X")
        self.assertEqual(results[3].correct_answer_label, "O")

    def test_short_answer_without_accepted_values(self) -> None:
        exam = ExamData(title="t", questions=[Question(id="Q1", type=QuestionType.SHORT, prompt="?", answer_text=[])])
        result = grade_exam(exam, {"Q1": "무엇이든"}).results[0]
        self.assertFalse(result.correct)
        self.assertTrue(result.answered)
        self.assertEqual(result.correct_answer_label, "(정답 없음)")

    def test_is_answered(self) -> None:
        questions = _exam().questions
        self.assertFalse(is_answered(questions[1], []))
        self.assertFalse(is_answered(questions[2], "   "))
        self.assertTrue(is_answered(questions[0], 0))

    def test_json_scenario(self) -> None:
        exam, _ = normalize_json_input(
            {"title": "t", "questions": [{"id": "Q1", "type": "single", "choices": ["1", "2"], "answer": 0}]}
        )
        self.assertEqual(len(exam.questions), 1)
        self.assertTrue(grade_exam(exam, {"Q1": 0}).results[0].correct)
        result = grade_exam(exam, {"Q1": 1}).results[0]
        self.assertTrue(result.answered)
        self.assertFalse(result.correct)


if __name__ == "__main__":
    unittest.main()
