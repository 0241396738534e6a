"""Concurrent assembly of an entity's dependent collections.

Collections are fetched in parallel, each in its own session. A collection
that fails degrades to an empty list; the failure is classified, logged and
returned as a warning so callers can tell "empty" from "failed to load".
"""

import asyncio
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.studio.core.db import SessionFactory
from src.studio.core.error_classifier import ErrorClassifier, ErrorContext
from src.studio.core.errors import AppError, ErrorKind
from src.studio.core.logging import get_logger
from src.studio.models import Conversation, EntityKind, Message, Project
from src.studio.repositories import (
    ConversationRepository,
    FileRepository,
    MessageRepository,
    SettingRepository,
)
from src.studio.schemas import (
    ConversationDetail,
    ConversationRead,
    FileRead,
    MessageRead,
    ProjectDetail,
    ProjectRead,
    SettingRead,
)
from src.studio.services.fetch import collapse_duplicates

logger = get_logger(__name__)

T = TypeVar("T")

CollectionLoader = Callable[[AsyncSession, UUID], Awaitable[list[Any]]]


@dataclass
class Aggregate(Generic[T]):
    """Composite view plus the failures that were degraded along the way."""

    data: T
    warnings: list[AppError] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.warnings)


async def load_files(session: AsyncSession, project_id: UUID) -> list[FileRead]:
    rows = await FileRepository(session).list_by_project(project_id)
    return [FileRead.model_validate(f) for f in collapse_duplicates(rows)]


async def load_settings(session: AsyncSession, project_id: UUID) -> list[SettingRead]:
    rows = await SettingRepository(session).list_by_project(project_id)
    return [SettingRead.model_validate(s) for s in rows]


async def load_messages(session: AsyncSession, conversation_id: UUID) -> list[MessageRead]:
    rows = await MessageRepository(session).list_by_conversation(conversation_id)
    return [MessageRead.model_validate(m) for m in collapse_duplicates(rows)]


async def load_conversations(
    session: AsyncSession, project_id: UUID
) -> list[ConversationDetail]:
    """Conversations of a project with their messages, newest activity first."""
    conversations = collapse_duplicates(
        await ConversationRepository(session).list_by_project(project_id)
    )
    messages = collapse_duplicates(
        await MessageRepository(session).list_by_conversations([c.id for c in conversations])
    )
    by_conversation: dict[UUID, list[Message]] = defaultdict(list)
    for message in messages:
        by_conversation[message.conversation_id].append(message)

    return [
        _conversation_detail(c, [MessageRead.model_validate(m) for m in by_conversation[c.id]])
        for c in conversations
    ]


def _conversation_detail(
    conversation: Conversation, messages: list[MessageRead]
) -> ConversationDetail:
    return ConversationDetail(
        **ConversationRead.model_validate(conversation).model_dump(),
        messages=messages,
    )


PROJECT_COLLECTIONS: dict[str, CollectionLoader] = {
    "files": load_files,
    "settings": load_settings,
    "conversations": load_conversations,
}

CONVERSATION_COLLECTIONS: dict[str, CollectionLoader] = {
    "messages": load_messages,
}


class Aggregator:
    """Fetches dependent collections concurrently and merges them."""

    def __init__(
        self,
        session_factory: SessionFactory,
        classifier: ErrorClassifier,
        *,
        retry_network: bool = True,
        project_collections: dict[str, CollectionLoader] | None = None,
        conversation_collections: dict[str, CollectionLoader] | None = None,
    ):
        self.session_factory = session_factory
        self.classifier = classifier
        self.retry_network = retry_network
        self.project_collections = project_collections or PROJECT_COLLECTIONS
        self.conversation_collections = conversation_collections or CONVERSATION_COLLECTIONS

    async def expand(self, kind: EntityKind, entity: Any) -> Aggregate[Any]:
        """Build the composite view for any resolvable entity."""
        if kind == EntityKind.PROJECT:
            return await self.project(entity)
        if kind == EntityKind.CONVERSATION:
            return await self.conversation(entity)
        if kind == EntityKind.FILE:
            return Aggregate(FileRead.model_validate(entity))
        if kind == EntityKind.MESSAGE:
            return Aggregate(MessageRead.model_validate(entity))
        raise ValueError(f"No composite view for {kind.value}")

    async def project(self, project: Project) -> Aggregate[ProjectDetail]:
        collections, warnings = await self.gather(
            EntityKind.PROJECT, project.id, self.project_collections
        )
        detail = ProjectDetail(
            **ProjectRead.model_validate(project).model_dump(),
            **collections,
        )
        return Aggregate(detail, warnings)

    async def conversation(self, conversation: Conversation) -> Aggregate[ConversationDetail]:
        collections, warnings = await self.gather(
            EntityKind.CONVERSATION, conversation.id, self.conversation_collections
        )
        detail = ConversationDetail(
            **ConversationRead.model_validate(conversation).model_dump(),
            **collections,
        )
        return Aggregate(detail, warnings)

    async def gather(
        self,
        parent_kind: EntityKind,
        parent_id: UUID,
        loaders: dict[str, CollectionLoader],
    ) -> tuple[dict[str, list[Any]], list[AppError]]:
        """Run every loader concurrently; never raises for a loader failure."""
        names = list(loaders)
        outcomes = await asyncio.gather(
            *(self._load(parent_kind, parent_id, name, loaders[name]) for name in names)
        )

        collections: dict[str, list[Any]] = {}
        warnings: list[AppError] = []
        for name, (items, error) in zip(names, outcomes, strict=True):
            collections[name] = items
            if error is not None:
                warnings.append(error)
        return collections, warnings

    async def _load(
        self,
        parent_kind: EntityKind,
        parent_id: UUID,
        name: str,
        loader: CollectionLoader,
    ) -> tuple[list[Any], AppError | None]:
        context = ErrorContext(
            operation=f"load_{name}",
            entity_kind=parent_kind.value,
            entity_id=str(parent_id),
        )
        attempt = 1
        while True:
            try:
                async with self.session_factory() as session:
                    return await loader(session, parent_id), None
            except Exception as exc:
                error = self.classifier.classify(exc, context)
                if error.kind == ErrorKind.NETWORK and self.retry_network and attempt == 1:
                    logger.info("Retrying dependent collection", collection=name)
                    attempt += 1
                    continue
                logger.warning(
                    "Dependent collection unavailable, using empty list",
                    collection=name,
                    parent_kind=parent_kind.value,
                    parent_id=str(parent_id),
                    error_kind=error.kind.value,
                )
                return [], error
