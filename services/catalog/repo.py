"""Repository layer for the Test Catalog.

CRUD helpers over the `directions` and `tests` collections with referential
checks: a test must point at an existing direction, and a direction cannot be
removed while an account or a test still refers to it. Writers that store a
direction reference resolve it while holding the `directions` lock, and take
that lock before `users` or `tests`.
"""

import logging
import uuid

from packages.common.errors import (
    DirectionInUse,
    DirectionNotFound,
    DuplicateDirection,
    TestNotFound,
    UnknownDirection,
    ValidationError,
)
from packages.common.storage import DIRECTIONS, TESTS, USERS, Document, RecordStore
from packages.schemas.base import utcnow
from packages.schemas.catalog import Direction, Question, TestDefinition, TestInput

log = logging.getLogger(__name__)


def new_id() -> str:
    """Collision-resistant identifier for new records."""
    return uuid.uuid4().hex


def number_questions(data: TestInput) -> list[Question]:
    """Assign ids "1".."N" in order; client-supplied ids never survive."""
    return [
        Question(id=str(i), question=q.question, options=q.options, correct=q.correct)
        for i, q in enumerate(data.questions, start=1)
    ]


class CatalogRepo:
    """Directions and test definitions stored as whole-collection snapshots."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    # ----- directions -----

    def directions(self) -> list[Direction]:
        return Direction.parse_many(self.store.load(DIRECTIONS))

    def get_direction(self, direction_id: str) -> Direction | None:
        return next((d for d in self.directions() if d.id == direction_id), None)

    def resolve_direction(self, direction_id: str) -> Direction:
        """Return the direction or raise `UnknownDirection` (a 400, not a 404)."""
        direction = self.get_direction(direction_id)
        if direction is None:
            raise UnknownDirection(detail=direction_id)
        return direction

    def add_direction(self, name: str) -> Direction:
        """Create a direction named `name` (surrounding whitespace dropped).

        Raises:
            ValidationError: the name is blank.
            DuplicateDirection: a direction with that name exists.
        """
        name = name.strip()
        if not name:
            raise ValidationError("direction_name_required")

        def _add(docs: list[Document]) -> Direction:
            if any(d.name == name for d in Direction.parse_many(docs)):
                raise DuplicateDirection(detail=name)
            direction = Direction(id=new_id(), name=name)
            docs.append(direction.to_doc())
            return direction

        direction = self.store.update(DIRECTIONS, _add)
        log.info(f"Direction {direction.id} '{direction.name}' created")
        return direction

    def delete_direction(self, direction_id: str) -> None:
        """Remove an unreferenced direction.

        Raises:
            DirectionNotFound: no such direction.
            DirectionInUse: an account or a test still references it.
        """
        def _delete(docs: list[Document]) -> None:
            idx = next((i for i, d in enumerate(docs) if str(d.get("id")) == direction_id), None)
            if idx is None:
                raise DirectionNotFound(detail=direction_id)
            if any(str(u.get("direction")) == direction_id for u in self.store.load(USERS)):
                raise DirectionInUse("direction_in_use_users")
            if any(str(t.get("direction")) == direction_id for t in self.store.load(TESTS)):
                raise DirectionInUse("direction_in_use_tests")
            del docs[idx]

        self.store.update(DIRECTIONS, _delete)
        log.info(f"Direction {direction_id} deleted")

    # ----- tests -----

    def tests(self) -> list[TestDefinition]:
        return TestDefinition.parse_many(self.store.load(TESTS))

    def get_test(self, test_id: str) -> TestDefinition | None:
        return next((t for t in self.tests() if t.id == test_id), None)

    def titles(self) -> dict[str, str]:
        return {t.id: t.title for t in self.tests()}

    def create_test(self, data: TestInput) -> TestDefinition:
        with self.store.locked(DIRECTIONS):
            direction = self.resolve_direction(data.direction)
            test = TestDefinition(
                id=new_id(),
                title=data.title,
                direction=direction.id,
                direction_name=direction.name,
                time_limit=data.time_limit,
                attempts=data.attempts,
                questions=number_questions(data),
            )
            self.store.update(TESTS, lambda docs: docs.append(test.to_doc()))
        log.info(f"Test {test.id} '{test.title}' created with {len(test.questions)} questions")
        return test

    def update_test(self, test_id: str, data: TestInput) -> TestDefinition:
        """Replace the editable fields of a test; `createdAt` is kept."""
        def _update(docs: list[Document]) -> TestDefinition:
            idx = next((i for i, d in enumerate(docs) if str(d.get("id")) == test_id), None)
            if idx is None:
                raise TestNotFound(detail=test_id)
            current = TestDefinition.from_doc(docs[idx])
            updated = current.model_copy(update={
                "title": data.title,
                "direction": direction.id,
                "direction_name": direction.name,
                "time_limit": data.time_limit,
                "attempts": data.attempts,
                "questions": number_questions(data),
                "updated_at": utcnow(),
            })
            docs[idx] = updated.to_doc()
            return updated

        with self.store.locked(DIRECTIONS):
            direction = self.resolve_direction(data.direction)
            test = self.store.update(TESTS, _update)
        log.info(f"Test {test.id} updated")
        return test

    def delete_test(self, test_id: str) -> None:
        """Remove a test; results that reference it are left in place."""
        def _delete(docs: list[Document]) -> None:
            idx = next((i for i, d in enumerate(docs) if str(d.get("id")) == test_id), None)
            if idx is None:
                raise TestNotFound(detail=test_id)
            del docs[idx]

        self.store.update(TESTS, _delete)
        log.info(f"Test {test_id} deleted")
