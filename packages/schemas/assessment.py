"""Assessment schemas for submissions, per-question outcomes, and scoring."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import ConfigDict, Field

from .base import ApiModel, Record, migration, utcnow


class QuestionOutcome(ApiModel):
    """Grading outcome for one question of a submission."""
    model_config = ConfigDict(frozen=True)

    question_id: str
    user_answer: Any = None
    correct_answer: Any = None
    is_correct: bool


class SubmissionResult(Record):
    """Immutable record of one account's graded attempt at one test."""
    model_config = ConfigDict(frozen=True)
    collection = "results"

    id: str
    user_id: str
    test_id: str
    score: int
    total_questions: int
    percentage: int = Field(ge=0, le=100)
    time_spent: int | float = 0
    question_results: tuple[QuestionOutcome, ...] = ()
    created_at: datetime = Field(default_factory=utcnow)


@migration("results")
def _results_v0_to_v1(doc: dict[str, Any]) -> dict[str, Any]:
    for key in ("id", "userId", "testId"):
        doc[key] = str(doc.get(key, ""))
    doc["timeSpent"] = doc.get("timeSpent") or 0
    doc["questionResults"] = [
        {**qr, "questionId": str(qr.get("questionId", ""))} for qr in doc.get("questionResults") or []
    ]
    return doc


class SubmitRequest(ApiModel):
    """A learner's answers for one test, by question ordinal."""
    test_id: str = Field(min_length=1)
    answers: List[Any]
    time_spent: Optional[int | float] = None


class ScoreSummary(ApiModel):
    """Aggregate outcome returned to the learner after submission."""
    score: int
    total_questions: int
    percentage: int


class SubmitResponse(ScoreSummary):
    success: bool = True


class ResultWithTitle(SubmissionResult):
    """Result listing entry joined with the test title."""
    test_title: str


class AdminResultView(ResultWithTitle):
    """Result listing entry joined with the test title and the account name."""
    user_name: str


class DirectionStats(ApiModel):
    users: int = 0
    tests: int = 0
    results: int = 0


class Statistics(ApiModel):
    total_users: int
    total_tests: int
    total_results: int
    direction_stats: dict[str, DirectionStats]
