# services/assessment/scorer.py
"""Scoring utilities for the Assessment service.

Functions:
- same_answer: strict equality between a submitted answer and the correct marker.
- grade_question: outcome of one question given the answer at its ordinal.
- percentage: rounded share of correct answers, 0 for an empty test.
- score_answers: grade a whole answer list against a test definition.
"""

import math
from typing import Any, List, Sequence, Tuple

from packages.schemas.assessment import QuestionOutcome
from packages.schemas.catalog import Question, TestDefinition

_MISSING = object()


def same_answer(given: Any, correct: Any) -> bool:
    """Return True if `given` equals `correct` without cross-type coercion.

    `True` never matches `1` and `"1"` never matches `1`; `1` and `1.0` match.
    """
    if given is _MISSING or given is None or correct is None:
        return False
    if isinstance(given, bool) or isinstance(correct, bool):
        return type(given) is type(correct) and given == correct
    if isinstance(given, (int, float)) and isinstance(correct, (int, float)):
        return given == correct
    return type(given) is type(correct) and given == correct


def grade_question(q: Question, answers: Sequence[Any], index: int) -> QuestionOutcome:
    """Grade question `q` against the answer at position `index`.

    An absent or out-of-range answer is simply incorrect.
    """
    given = answers[index] if 0 <= index < len(answers) else _MISSING
    return QuestionOutcome(
        question_id=q.id,
        user_answer=None if given is _MISSING else given,
        correct_answer=q.correct,
        is_correct=same_answer(given, q.correct),
    )


def percentage(score: int, total: int) -> int:
    """Return `round(100 * score / total)` rounding halves up; 0 when `total` is 0."""
    if total <= 0:
        return 0
    return int(math.floor(100 * score / total + 0.5))


def score_answers(test: TestDefinition, answers: Sequence[Any]) -> Tuple[int, List[QuestionOutcome]]:
    """Grade every question of `test` in order and return (score, outcomes)."""
    outcomes = [grade_question(q, answers, i) for i, q in enumerate(test.questions)]
    return sum(1 for o in outcomes if o.is_correct), outcomes
