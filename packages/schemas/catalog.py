"""Catalog schemas: directions and test definitions."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from .base import ApiModel, Record, migration, utcnow


class Direction(Record):
    """A track (subject area) that scopes tests and accounts."""
    collection = "directions"

    id: str
    name: str


@migration("directions")
def _directions_v0_to_v1(doc: dict[str, Any]) -> dict[str, Any]:
    doc["id"] = str(doc.get("id", ""))
    return doc


class Question(ApiModel):
    """One multiple-choice question; `correct` is the marker of the right option."""
    id: str
    question: str
    options: list[Any] = Field(default_factory=list)
    correct: Any = None


class QuestionView(ApiModel):
    """Question as sent to a learner: no correct-option marker."""
    id: str
    question: str
    options: list[Any] = Field(default_factory=list)


class TestDefinition(Record):
    __test__ = False
    collection = "tests"

    id: str
    title: str
    direction: str
    direction_name: str | None = None
    time_limit: int
    attempts: int
    questions: list[Question] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime | None = None


@migration("tests")
def _tests_v0_to_v1(doc: dict[str, Any]) -> dict[str, Any]:
    doc["id"] = str(doc.get("id", ""))
    doc["direction"] = str(doc.get("direction", ""))
    doc["questions"] = [
        {**q, "id": str(q.get("id", i + 1))} for i, q in enumerate(doc.get("questions") or [])
    ]
    return doc


class QuestionInput(ApiModel):
    """Client-supplied question; any `id` it carries is discarded."""
    question: str = Field(min_length=1)
    options: list[Any] = Field(min_length=1)
    correct: Any


class TestInput(ApiModel):
    __test__ = False

    title: str = Field(min_length=1)
    direction: str = Field(min_length=1)
    time_limit: int = Field(gt=0)
    attempts: int = Field(gt=0)
    questions: list[QuestionInput] = Field(min_length=1)


class LearnerTest(ApiModel):
    """A test as fetched for answering."""
    id: str
    title: str
    direction: str
    direction_name: str | None = None
    time_limit: int
    attempts: int
    questions: list[QuestionView]
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_definition(cls, test: TestDefinition) -> "LearnerTest":
        return cls(
            id=test.id,
            title=test.title,
            direction=test.direction,
            direction_name=test.direction_name,
            time_limit=test.time_limit,
            attempts=test.attempts,
            questions=[QuestionView(id=q.id, question=q.question, options=q.options) for q in test.questions],
            created_at=test.created_at,
            updated_at=test.updated_at,
        )


class TestListing(LearnerTest):
    """Learner listing entry, annotated with the caller's completion state."""
    __test__ = False

    completed: bool = False


class DirectionInput(ApiModel):
    name: str = Field(min_length=1)
