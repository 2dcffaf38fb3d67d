"""Tests for assessment scoring helpers."""

from packages.schemas.catalog import Question, TestDefinition
from services.assessment.scorer import percentage, same_answer, score_answers


def _test(correct: list) -> TestDefinition:
    return TestDefinition(
        id="t1",
        title="Python basics",
        direction="d1",
        time_limit=10,
        attempts=1,
        questions=[
            Question(id=str(i + 1), question=f"Q{i + 1}", options=["a", "b", "c", "d"], correct=c)
            for i, c in enumerate(correct)
        ],
    )


def test_scenario_three_of_four() -> None:
    score, outcomes = score_answers(_test([0, 1, 2, 3]), [0, 1, 9, 3])
    assert score == 3
    assert percentage(score, 4) == 75
    assert [o.is_correct for o in outcomes] == [True, True, False, True]
    assert outcomes[2].user_answer == 9
    assert outcomes[2].correct_answer == 2
    assert [o.question_id for o in outcomes] == ["1", "2", "3", "4"]


def test_missing_answers_are_incorrect_not_errors() -> None:
    score, outcomes = score_answers(_test([0, 1, 2]), [0])
    assert score == 1
    assert outcomes[1].user_answer is None
    assert not outcomes[1].is_correct and not outcomes[2].is_correct


def test_extra_answers_are_ignored() -> None:
    score, outcomes = score_answers(_test([1]), [1, 2, 3])
    assert score == 1
    assert len(outcomes) == 1


def test_zero_question_test_scores_zero_percent() -> None:
    score, outcomes = score_answers(_test([]), [0, 1])
    assert (score, outcomes) == (0, [])
    assert percentage(0, 0) == 0


def test_percentage_rounds_half_up() -> None:
    assert percentage(1, 8) == 13
    assert percentage(1, 3) == 33
    assert percentage(2, 3) == 67
    assert percentage(5, 5) == 100


def test_same_answer_is_strict() -> None:
    assert same_answer(1, 1)
    assert same_answer(1, 1.0)
    assert same_answer("b", "b")
    assert not same_answer("1", 1)
    assert not same_answer(True, 1)
    assert not same_answer(None, None)
