"""Defensive fetch-by-id.

Resolves exactly one logical entity from a store that may hold zero, one or
several physical rows for the same id:

1. the id is validated before any I/O;
2. the store is probed with a list query, never a single-row primitive;
3. no rows is ``EntityNotFound``, one row is the entity, several rows are
   tolerated by taking the first in store order and logging a diagnostic.
"""

from collections.abc import Callable, Hashable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.studio.core.db import SessionFactory
from src.studio.core.error_classifier import ErrorClassifier, ErrorContext
from src.studio.core.errors import (
    EntityNotFound,
    ErrorSeverity,
    NotAuthorized,
    StorageFailure,
    ValidationFailed,
)
from src.studio.core.logging import get_logger
from src.studio.core.validators import parse_entity_id
from src.studio.models import EntityKind
from src.studio.repositories import (
    BaseRepository,
    ConversationRepository,
    FileRepository,
    MessageRepository,
    ProjectRepository,
)

logger = get_logger(__name__)

T = TypeVar("T")

REPOSITORIES: dict[EntityKind, type[BaseRepository[Any]]] = {
    EntityKind.PROJECT: ProjectRepository,
    EntityKind.FILE: FileRepository,
    EntityKind.CONVERSATION: ConversationRepository,
    EntityKind.MESSAGE: MessageRepository,
}


def select_canonical(rows: Sequence[T]) -> T | None:
    """Pick the row that stands for a logical entity.

    Tie-break is the first row in the order the store returned them
    (insertion order). Returns None for an empty sequence.
    """
    return rows[0] if rows else None


def collapse_duplicates(
    rows: Iterable[T],
    key: Callable[[T], Hashable] = lambda row: row.id,  # type: ignore[attr-defined]
) -> list[T]:
    """Keep the first row per logical id, preserving order."""
    seen: set[Hashable] = set()
    unique: list[T] = []
    for row in rows:
        k = key(row)
        if k in seen:
            continue
        seen.add(k)
        unique.append(row)
    return unique


@dataclass(frozen=True)
class Resolution(Generic[T]):
    """Outcome of a successful defensive fetch."""

    entity: T
    candidates: int

    @property
    def ambiguous(self) -> bool:
        return self.candidates > 1


def ensure_owner(entity: Any, caller_id: UUID) -> None:
    """Reject mutation by anyone but the owner.

    The message is deliberately generic so it does not confirm the entity
    exists.
    """
    if entity.owner_id != caller_id:
        raise NotAuthorized("Forbidden", code=403)


class DefensiveFetcher:
    """Fetch-by-id that tolerates missing and duplicated rows."""

    def __init__(self, session_factory: SessionFactory, classifier: ErrorClassifier):
        self.session_factory = session_factory
        self.classifier = classifier

    async def resolve(
        self,
        kind: EntityKind,
        raw_id: object,
        *,
        session: AsyncSession | None = None,
    ) -> Resolution[Any]:
        """Resolve one entity of ``kind`` by id.

        Args:
            kind: Entity kind to look up.
            raw_id: Id as received from the caller (string or UUID).
            session: Optional session to probe within, so a mutation can verify
                its parent in the same transaction.

        Raises:
            ValidationFailed: ``raw_id`` is not a UUID (no query is issued).
            EntityNotFound: No row carries this id.
        """
        repo_class = REPOSITORIES.get(kind)
        if repo_class is None:
            raise ValidationFailed(f"Entities of kind '{kind.value}' cannot be fetched by id")

        entity_id = parse_entity_id(raw_id, field=f"{kind.value}_id")

        if session is not None:
            rows = await repo_class(session).list_by_id(entity_id)
        else:
            async with self.session_factory() as own_session:
                rows = await repo_class(own_session).list_by_id(entity_id)

        entity = select_canonical(rows)
        if entity is None:
            raise EntityNotFound(
                f"{kind.value.capitalize()} {entity_id} not found",
                code=404,
                details={"entity_kind": kind.value, "entity_id": str(entity_id)},
            )

        if len(rows) > 1:
            self._report_duplicates(kind, entity_id, len(rows))

        return Resolution(entity=entity, candidates=len(rows))

    async def resolve_owned(
        self,
        kind: EntityKind,
        raw_id: object,
        caller_id: UUID,
        *,
        session: AsyncSession | None = None,
    ) -> Resolution[Any]:
        """Resolve and check that ``caller_id`` owns the entity."""
        resolution = await self.resolve(kind, raw_id, session=session)
        ensure_owner(resolution.entity, caller_id)
        return resolution

    def _report_duplicates(self, kind: EntityKind, entity_id: UUID, count: int) -> None:
        logger.warning(
            "Duplicate rows share one id, using first",
            entity_kind=kind.value,
            entity_id=str(entity_id),
            row_count=count,
        )
        self.classifier.classify(
            StorageFailure(
                f"{count} rows found for {kind.value} {entity_id}",
                code="duplicate_rows",
                details={"row_count": count},
            ),
            ErrorContext(
                operation="resolve",
                entity_kind=kind.value,
                entity_id=str(entity_id),
            ),
            severity=ErrorSeverity.WARNING,
        )
