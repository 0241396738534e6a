"""Repositories for Conversation and Message entities."""

from collections.abc import Sequence
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, update

from src.studio.models import Conversation, Message
from src.studio.repositories.base import BaseRepository


class ConversationRepository(BaseRepository[Conversation]):
    model = Conversation

    async def list_by_project(self, project_id: UUID) -> list[Conversation]:
        """Conversations of a project, most recently updated first."""
        return await self.list_where(
            Conversation.project_id == project_id,
            order_by=Conversation.updated_at.desc(),  # type: ignore[attr-defined]
        )

    async def update_fields(self, conversation_id: UUID, values: dict[str, Any]) -> int:
        result = await self.session.execute(
            update(Conversation)
            .where(Conversation.id == conversation_id)  # type: ignore[arg-type]
            .values(**values)
        )
        return result.rowcount or 0

    async def touch(self, conversation_id: UUID, when: datetime) -> int:
        """Bump ``updated_at`` on every row with this id."""
        return await self.update_fields(conversation_id, {"updated_at": when})

    async def delete_by_project(self, project_id: UUID) -> list[UUID]:
        """Delete a project's conversations, returning their ids."""
        ids = [c.id for c in await self.list_by_project(project_id)]
        await self.session.execute(
            delete(Conversation).where(Conversation.project_id == project_id)  # type: ignore[arg-type]
        )
        return ids


class MessageRepository(BaseRepository[Message]):
    model = Message

    async def list_by_conversation(self, conversation_id: UUID) -> list[Message]:
        """Messages in chronological order."""
        return await self.list_where(
            Message.conversation_id == conversation_id,
            order_by=Message.created_at,
        )

    async def list_by_conversations(self, conversation_ids: Sequence[UUID]) -> list[Message]:
        """Messages for several conversations in one round-trip."""
        if not conversation_ids:
            return []
        return await self.list_where(
            Message.conversation_id.in_(list(conversation_ids)),  # type: ignore[attr-defined]
            order_by=Message.created_at,
        )

    async def delete_by_conversations(self, conversation_ids: Sequence[UUID]) -> list[UUID]:
        """Delete every message of these conversations, returning the message ids."""
        ids = [m.id for m in await self.list_by_conversations(conversation_ids)]
        if ids:
            await self.session.execute(
                delete(Message).where(Message.conversation_id.in_(list(conversation_ids)))  # type: ignore[attr-defined]
            )
        return ids
