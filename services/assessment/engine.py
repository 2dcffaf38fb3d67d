# services/assessment/engine.py
"""Submission & scoring engine.

Each (account, test) pair moves once from NotAttempted to Completed. The
duplicate check and the append run inside the `results` collection lock, so
concurrent submissions for the same pair produce exactly one result.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from packages.common.errors import AlreadySubmitted, TestNotFound
from packages.common.storage import RESULTS, Document, RecordStore
from packages.common.tracing import xapi_event
from packages.schemas.assessment import ScoreSummary, SubmissionResult
from services.catalog.repo import CatalogRepo, new_id
from .scorer import percentage, score_answers

log = logging.getLogger(__name__)


class SubmissionEngine:
    """Grades answer sets and records immutable results."""

    def __init__(self, store: RecordStore, catalog: CatalogRepo) -> None:
        self.store = store
        self.catalog = catalog

    def results(self) -> list[SubmissionResult]:
        return SubmissionResult.parse_many(self.store.load(RESULTS))

    def results_for(self, user_id: str) -> list[SubmissionResult]:
        return [r for r in self.results() if r.user_id == user_id]

    def completed_tests(self, user_id: str) -> set[str]:
        return {r.test_id for r in self.results_for(user_id)}

    def submit(
        self,
        user_id: str,
        test_id: str,
        answers: Sequence[Any],
        time_spent: int | float | None = None,
    ) -> ScoreSummary:
        """Grade `answers` for `test_id` and record the result.

        Raises:
            TestNotFound: the test does not exist.
            AlreadySubmitted: a result for (user_id, test_id) already exists.
            StorageError: the result could not be persisted; nothing is recorded.
        """
        test = self.catalog.get_test(test_id)
        if test is None:
            raise TestNotFound(detail=test_id)

        score, outcomes = score_answers(test, answers)
        total = len(test.questions)

        def _append(docs: list[Document]) -> SubmissionResult:
            if any(str(d.get("userId")) == user_id and str(d.get("testId")) == test_id for d in docs):
                raise AlreadySubmitted(detail=f"{user_id}/{test_id}")
            result = SubmissionResult(
                id=new_id(),
                user_id=user_id,
                test_id=test_id,
                score=score,
                total_questions=total,
                percentage=percentage(score, total),
                time_spent=time_spent or 0,
                question_results=tuple(outcomes),
            )
            docs.append(result.to_doc())
            return result

        result = self.store.update(RESULTS, _append)
        log.info(f"Result {result.id}: user={user_id} test={test_id} score={score}/{total}")
        xapi_event(user_id, "submitted", test_id, score=score, total=total, percentage=result.percentage)
        return ScoreSummary(score=result.score, total_questions=result.total_questions, percentage=result.percentage)
