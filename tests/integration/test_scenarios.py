"""End-to-end flows through the access facade."""

from uuid import UUID

import pytest
from sqlalchemy import select

from src.studio.core.db import SessionFactory
from src.studio.core.errors import ClassifiedError, ErrorKind
from src.studio.models import Conversation, EntityKind
from src.studio.schemas import ConversationCreate, MessageCreate, ProjectCreate
from src.studio.services import EntityAccessService
from tests.factories import generate_id

pytestmark = pytest.mark.integration


async def test_project_conversation_message_round_trip(
    access_service: EntityAccessService, owner_id: UUID
):
    project = await access_service.create_project(owner_id, ProjectCreate(name="Demo"))
    conversation = await access_service.create_conversation(
        owner_id, ConversationCreate(project_id=str(project.id))
    )
    message = await access_service.append_message(
        owner_id, str(conversation.id), MessageCreate(role="user", content="hi")
    )

    fetched = await access_service.get(EntityKind.PROJECT, str(project.id))

    conversations = {c.id: c for c in fetched.conversations}
    assert conversation.id in conversations
    stored = conversations[conversation.id]
    assert [(m.id, m.role, m.content) for m in stored.messages] == [
        (message.id, "user", "hi")
    ]
    assert stored.updated_at >= message.created_at


async def test_conversation_under_missing_project(
    access_service: EntityAccessService, owner_id: UUID
):
    missing_project_id = str(generate_id())

    with pytest.raises(ClassifiedError) as exc_info:
        await access_service.create_conversation(
            owner_id, ConversationCreate(project_id=missing_project_id)
        )

    assert exc_info.value.kind == ErrorKind.NOT_FOUND
    assert await access_service.list_conversations(missing_project_id) == []


async def test_delete_by_non_owner_leaves_project_unchanged(
    access_service: EntityAccessService,
    session_factory: SessionFactory,
    owner_id: UUID,
    other_user_id: UUID,
):
    project = await access_service.create_project(owner_id, ProjectCreate(name="Mine"))
    await access_service.create_conversation(
        owner_id, ConversationCreate(project_id=str(project.id))
    )
    before = (await access_service.get(EntityKind.PROJECT, project.id)).model_dump()

    with pytest.raises(ClassifiedError) as exc_info:
        await access_service.delete_project(other_user_id, str(project.id))

    assert exc_info.value.kind == ErrorKind.AUTHORIZATION
    assert exc_info.value.error.message == "Forbidden"

    access_service.invalidate(EntityKind.PROJECT, project.id)
    after = (await access_service.get(EntityKind.PROJECT, project.id)).model_dump()
    assert after == before

    async with session_factory() as session:
        rows = (await session.execute(select(Conversation))).scalars().all()
    assert len(rows) == 1
