"""Versioned record base for persisted documents.

Documents on disk use camelCase keys and carry a schema version `v`. Loading
runs the document through the collection's migration chain before
validation, so renamed or added fields are handled by explicit functions.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, ClassVar, Iterable, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

log = logging.getLogger(__name__)

SCHEMA_VERSION = 1

Migration = Callable[[dict[str, Any]], dict[str, Any]]
# collection -> migrations indexed by source version (0 -> 1 at index 0, ...)
MIGRATIONS: dict[str, list[Migration]] = {}

R = TypeVar("R", bound="Record")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def migration(collection: str) -> Callable[[Migration], Migration]:
    """Register the next migration step for `collection`."""
    def deco(fn: Migration) -> Migration:
        MIGRATIONS.setdefault(collection, []).append(fn)
        return fn
    return deco


def upgrade(collection: str, doc: dict[str, Any]) -> dict[str, Any]:
    """Bring a raw document up to `SCHEMA_VERSION`."""
    steps = MIGRATIONS.get(collection, [])
    doc = dict(doc)
    version = int(doc.get("v", 0))
    while version < SCHEMA_VERSION:
        if version < len(steps):
            doc = steps[version](doc)
        version += 1
        doc["v"] = version
    return doc


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Record(ApiModel):
    """A persisted document of one collection."""

    collection: ClassVar[str]

    v: int = SCHEMA_VERSION

    @classmethod
    def from_doc(cls: type[R], doc: dict[str, Any]) -> R:
        return cls.model_validate(upgrade(cls.collection, doc))

    @classmethod
    def parse_many(cls: type[R], docs: Iterable[dict[str, Any]]) -> list[R]:
        """Validate documents, skipping (and logging) malformed ones."""
        out: list[R] = []
        for doc in docs:
            try:
                out.append(cls.from_doc(doc))
            except (ValidationError, ValueError, TypeError) as e:
                log.warning(f"Skipping malformed {cls.collection} document {doc.get('id')!r}: {e}")
        return out

    def to_doc(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
