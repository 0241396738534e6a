"""Entity access facade.

The single entry point for reading and mutating entities. Reads consult the
entity cache first and fall through to the defensive fetch and aggregator;
mutations verify the parent and its owner, write, then invalidate whatever
cached views they made stale.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from src.studio.core.db import SessionFactory
from src.studio.core.error_classifier import ErrorClassifier, ErrorContext
from src.studio.core.errors import ClassifiedError, ErrorSeverity, NotAuthorized, ValidationFailed
from src.studio.core.logging import get_logger
from src.studio.core.validators import parse_entity_id
from src.studio.models import (
    Conversation,
    EntityKind,
    Message,
    Project,
    ProjectFile,
    ProjectSetting,
)
from src.studio.models.base import utc_now
from src.studio.repositories import (
    ConversationRepository,
    FileRepository,
    MessageRepository,
    ProjectRepository,
    SettingRepository,
)
from src.studio.schemas import (
    DEFAULT_CONVERSATION_TITLE,
    ConversationCreate,
    ConversationDetail,
    ConversationRead,
    ConversationUpdate,
    FileCreate,
    FileRead,
    MessageCreate,
    MessageRead,
    ProjectCreate,
    ProjectDetail,
    ProjectRead,
    ProjectUpdate,
    SettingRead,
)
from src.studio.services.aggregator import Aggregate, Aggregator
from src.studio.services.entity_cache import EntityCache
from src.studio.services.fetch import DefensiveFetcher, collapse_duplicates, ensure_owner
from src.studio.services.scaffold import (
    DEFAULT_SETTINGS,
    default_manifest,
    infer_file_type,
    starter_files,
)

logger = get_logger(__name__)

SETTING_KEY_MAX_LENGTH = 100


class EntityAccessService:
    """Cached, ownership-aware access to projects and their children."""

    def __init__(
        self,
        session_factory: SessionFactory,
        cache: EntityCache,
        classifier: ErrorClassifier,
        fetcher: DefensiveFetcher | None = None,
        aggregator: Aggregator | None = None,
        *,
        retry_network: bool = True,
    ):
        self.session_factory = session_factory
        self.cache = cache
        self.classifier = classifier
        self.fetcher = fetcher or DefensiveFetcher(session_factory, classifier)
        self.aggregator = aggregator or Aggregator(
            session_factory, classifier, retry_network=retry_network
        )

    @contextmanager
    def _classified(
        self,
        operation: str,
        kind: EntityKind,
        entity_id: object = None,
    ) -> Iterator[None]:
        """Re-raise any failure as a ClassifiedError recorded exactly once."""
        try:
            yield
        except ClassifiedError:
            raise
        except Exception as exc:
            context = ErrorContext(
                operation=operation,
                entity_kind=kind.value,
                entity_id=None if entity_id is None else str(entity_id),
            )
            raise self.classifier.to_exception(exc, context) from exc

    # Reads

    async def load(self, kind: EntityKind, raw_id: object) -> Aggregate[Any]:
        """Composite view of one entity, with degraded collections reported.

        A degraded aggregate is returned but not cached, so the next read
        retries the collections that failed.
        """
        with self._classified("load", kind, raw_id):
            entity_id = parse_entity_id(raw_id, field=f"{kind.value}_id")

            cached = self.cache.get(kind, entity_id)
            if cached is not None:
                logger.debug("Cache hit", entity_kind=kind.value, entity_id=str(entity_id))
                return Aggregate(cached)
            logger.debug("Cache miss", entity_kind=kind.value, entity_id=str(entity_id))

            resolution = await self.fetcher.resolve(kind, entity_id)
            aggregate = await self.aggregator.expand(kind, resolution.entity)

            if aggregate.degraded:
                logger.info(
                    "Degraded view not cached",
                    entity_kind=kind.value,
                    entity_id=str(entity_id),
                    warnings=len(aggregate.warnings),
                )
            else:
                self.cache.put(kind, entity_id, aggregate.data)
            return aggregate

    async def get(self, kind: EntityKind, raw_id: object) -> Any:
        """Cached composite view of one entity."""
        return (await self.load(kind, raw_id)).data

    def invalidate(self, kind: EntityKind, entity_id: UUID) -> bool:
        return self.cache.invalidate(kind, entity_id)

    async def list_projects(
        self, caller_id: UUID, owner_id: object = None
    ) -> list[ProjectRead]:
        """Projects owned by the caller, most recently updated first."""
        with self._classified("list_projects", EntityKind.PROJECT):
            owner = caller_id if owner_id is None else parse_entity_id(owner_id, "owner_id")
            if owner != caller_id:
                raise NotAuthorized("Forbidden", code=403)

            async with self.session_factory() as session:
                rows = await ProjectRepository(session).list_by_owner(owner)
            return [ProjectRead.model_validate(p) for p in collapse_duplicates(rows)]

    async def list_conversations(self, raw_project_id: object) -> list[ConversationRead]:
        """Conversations of a project; empty when the project has none or is unknown."""
        with self._classified("list_conversations", EntityKind.PROJECT, raw_project_id):
            project_id = parse_entity_id(raw_project_id, field="project_id")
            async with self.session_factory() as session:
                rows = await ConversationRepository(session).list_by_project(project_id)
            return [ConversationRead.model_validate(c) for c in collapse_duplicates(rows)]

    # Projects

    async def create_project(self, caller_id: UUID, data: ProjectCreate) -> ProjectDetail:
        """Create a project owned by the caller, with optional starter content."""
        with self._classified("create_project", EntityKind.PROJECT):
            if data.owner_id is not None and data.owner_id != caller_id:
                raise NotAuthorized("Forbidden", code=403)

            now = utc_now()
            project = Project(
                id=uuid4(),
                name=data.name,
                description=data.description,
                owner_id=caller_id,
                manifest=data.manifest or default_manifest(data.name, data.description),
                created_at=now,
                updated_at=now,
            )
            files = starter_files(project.id, data.name, data.description) if data.seed_files else []
            settings = [
                ProjectSetting(project_id=project.id, key=key, value=value, updated_at=now)
                for key, value in (DEFAULT_SETTINGS.items() if data.seed_files else ())
            ]

            self.cache.register_pending(
                EntityKind.PROJECT, project.id, ProjectDetail.model_validate(project)
            )
            try:
                async with self.session_factory() as session:
                    ProjectRepository(session).add(project)
                    file_repo = FileRepository(session)
                    for file in files:
                        file_repo.add(file)
                    setting_repo = SettingRepository(session)
                    for setting in settings:
                        setting_repo.add(setting)
                    try:
                        await session.commit()
                    except Exception:
                        await session.rollback()
                        raise
            except Exception:
                self.cache.discard_pending(EntityKind.PROJECT, project.id)
                raise

            detail = ProjectDetail(
                **ProjectRead.model_validate(project).model_dump(),
                files=[FileRead.model_validate(f) for f in files],
                settings=[SettingRead.model_validate(s) for s in settings],
            )
            self.cache.confirm(EntityKind.PROJECT, project.id, detail)
            logger.info("Project created", project_id=str(project.id), files=len(files))
            return detail

    async def update_project(
        self, caller_id: UUID, raw_id: object, data: ProjectUpdate
    ) -> ProjectDetail:
        with self._classified("update_project", EntityKind.PROJECT, raw_id):
            async with self.session_factory() as session:
                resolution = await self.fetcher.resolve_owned(
                    EntityKind.PROJECT, raw_id, caller_id, session=session
                )
                project_id = resolution.entity.id

                values = data.model_dump(exclude_unset=True)
                # name and manifest are never cleared, description may be
                values = {
                    k: v for k, v in values.items() if v is not None or k == "description"
                }
                values["updated_at"] = utc_now()
                try:
                    await ProjectRepository(session).update_fields(project_id, values)
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

            self.cache.invalidate(EntityKind.PROJECT, project_id)
            logger.info("Project updated", project_id=str(project_id), fields=sorted(values))
        return await self.get(EntityKind.PROJECT, project_id)

    async def delete_project(self, caller_id: UUID, raw_id: object) -> UUID:
        """Soft-delete a project and remove its files, settings and conversations."""
        with self._classified("delete_project", EntityKind.PROJECT, raw_id):
            async with self.session_factory() as session:
                resolution = await self.fetcher.resolve_owned(
                    EntityKind.PROJECT, raw_id, caller_id, session=session
                )
                project_id = resolution.entity.id
                try:
                    file_ids = await FileRepository(session).delete_by_project(project_id)
                    await SettingRepository(session).delete_by_project(project_id)
                    conversation_ids = await ConversationRepository(session).delete_by_project(
                        project_id
                    )
                    message_ids = await MessageRepository(session).delete_by_conversations(
                        conversation_ids
                    )
                    await ProjectRepository(session).soft_delete(project_id, utc_now())
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

            self.cache.invalidate(EntityKind.PROJECT, project_id)
            for kind, ids in (
                (EntityKind.FILE, file_ids),
                (EntityKind.CONVERSATION, conversation_ids),
                (EntityKind.MESSAGE, message_ids),
            ):
                for child_id in ids:
                    self.cache.invalidate(kind, child_id)
            logger.info(
                "Project deleted",
                project_id=str(project_id),
                conversations=len(conversation_ids),
            )
            return project_id

    # Project children

    async def create_file(
        self, caller_id: UUID, raw_project_id: object, data: FileCreate
    ) -> FileRead:
        with self._classified("create_file", EntityKind.FILE):
            async with self.session_factory() as session:
                project = (
                    await self.fetcher.resolve_owned(
                        EntityKind.PROJECT, raw_project_id, caller_id, session=session
                    )
                ).entity
                file_type = data.file_type or infer_file_type(data.name)
                file = ProjectFile(
                    id=uuid4(),
                    project_id=project.id,
                    name=data.name,
                    path=data.path or data.name,
                    file_type=file_type.value,
                    content=data.content,
                )
                self.cache.register_pending(EntityKind.FILE, file.id, FileRead.model_validate(file))
                try:
                    FileRepository(session).add(file)
                    await session.commit()
                except Exception:
                    await session.rollback()
                    self.cache.discard_pending(EntityKind.FILE, file.id)
                    raise

            read = FileRead.model_validate(file)
            self.cache.confirm(EntityKind.FILE, file.id, read)
            self.cache.invalidate(EntityKind.PROJECT, project.id)
            return read

    async def upsert_setting(
        self, caller_id: UUID, raw_project_id: object, key: str, value: Any
    ) -> SettingRead:
        with self._classified("upsert_setting", EntityKind.SETTING, raw_project_id):
            parse_entity_id(raw_project_id, field="project_id")
            key = key.strip()
            if not key or len(key) > SETTING_KEY_MAX_LENGTH:
                raise ValidationFailed(
                    f"Setting key must be 1-{SETTING_KEY_MAX_LENGTH} characters",
                    code=400,
                    details={"field": "key"},
                )

            async with self.session_factory() as session:
                project = (
                    await self.fetcher.resolve_owned(
                        EntityKind.PROJECT, raw_project_id, caller_id, session=session
                    )
                ).entity
                try:
                    setting = await SettingRepository(session).upsert(project.id, key, value)
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

            self.cache.invalidate(EntityKind.PROJECT, project.id)
            return SettingRead.model_validate(setting)

    # Conversations

    async def create_conversation(
        self, caller_id: UUID, data: ConversationCreate
    ) -> ConversationDetail:
        """Start a conversation under a project the caller owns.

        The id is generated here and registered in the cache as pending before
        the write; a failed write removes the placeholder again.
        """
        with self._classified("create_conversation", EntityKind.CONVERSATION):
            async with self.session_factory() as session:
                project = (
                    await self.fetcher.resolve_owned(
                        EntityKind.PROJECT, data.project_id, caller_id, session=session
                    )
                ).entity
                now = utc_now()
                conversation = Conversation(
                    id=uuid4(),
                    project_id=project.id,
                    owner_id=caller_id,
                    title=data.title or DEFAULT_CONVERSATION_TITLE,
                    created_at=now,
                    updated_at=now,
                )
                self.cache.register_pending(
                    EntityKind.CONVERSATION,
                    conversation.id,
                    ConversationDetail.model_validate(conversation),
                )
                try:
                    ConversationRepository(session).add(conversation)
                    await session.commit()
                except Exception:
                    await session.rollback()
                    self.cache.discard_pending(EntityKind.CONVERSATION, conversation.id)
                    raise

            detail = ConversationDetail.model_validate(conversation)
            self.cache.confirm(EntityKind.CONVERSATION, conversation.id, detail)
            self.cache.invalidate(EntityKind.PROJECT, project.id)
            logger.info(
                "Conversation created",
                conversation_id=str(conversation.id),
                project_id=str(project.id),
            )
            return detail

    async def update_conversation(
        self, caller_id: UUID, raw_id: object, data: ConversationUpdate
    ) -> ConversationDetail:
        with self._classified("update_conversation", EntityKind.CONVERSATION, raw_id):
            async with self.session_factory() as session:
                conversation = (
                    await self.fetcher.resolve_owned(
                        EntityKind.CONVERSATION, raw_id, caller_id, session=session
                    )
                ).entity
                conversation_id, project_id = conversation.id, conversation.project_id
                try:
                    await ConversationRepository(session).update_fields(
                        conversation_id, {"title": data.title, "updated_at": utc_now()}
                    )
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

            self.cache.invalidate(EntityKind.CONVERSATION, conversation_id)
            self.cache.invalidate(EntityKind.PROJECT, project_id)
        return await self.get(EntityKind.CONVERSATION, conversation_id)

    async def append_message(
        self, caller_id: UUID, raw_conversation_id: object, data: MessageCreate
    ) -> MessageRead:
        """Append a message, then bump the conversation's ``updated_at``.

        The bump is best effort: if it fails the message still stands and the
        failure is recorded as a warning.
        """
        with self._classified("append_message", EntityKind.MESSAGE, raw_conversation_id):
            async with self.session_factory() as session:
                conversation = (
                    await self.fetcher.resolve(
                        EntityKind.CONVERSATION, raw_conversation_id, session=session
                    )
                ).entity
                ensure_owner(conversation, caller_id)
                conversation_id, project_id = conversation.id, conversation.project_id

                message = Message(
                    id=uuid4(),
                    conversation_id=conversation_id,
                    role=data.role.value,
                    content=data.content,
                    created_at=utc_now(),
                )
                self.cache.register_pending(
                    EntityKind.MESSAGE, message.id, MessageRead.model_validate(message)
                )
                try:
                    MessageRepository(session).add(message)
                    await session.commit()
                except Exception:
                    await session.rollback()
                    self.cache.discard_pending(EntityKind.MESSAGE, message.id)
                    raise

            read = MessageRead.model_validate(message)
            self.cache.confirm(EntityKind.MESSAGE, message.id, read)

        await self._touch_conversation(conversation_id, max(utc_now(), message.created_at))
        self.cache.invalidate(EntityKind.CONVERSATION, conversation_id)
        self.cache.invalidate(EntityKind.PROJECT, project_id)
        return read

    async def _touch_conversation(self, conversation_id: UUID, when: datetime) -> None:
        try:
            async with self.session_factory() as session:
                await ConversationRepository(session).touch(conversation_id, when)
                await session.commit()
        except Exception as exc:
            error = self.classifier.classify(
                exc,
                ErrorContext(
                    operation="touch_conversation",
                    entity_kind=EntityKind.CONVERSATION.value,
                    entity_id=str(conversation_id),
                ),
                severity=ErrorSeverity.WARNING,
            )
            logger.warning(
                "Conversation timestamp not updated after message append",
                conversation_id=str(conversation_id),
                error_kind=error.kind.value,
            )
