"""Test helper functions for common data creation patterns."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from structlog.testing import CapturingLogger

from src.studio.models import Conversation, Message, Project
from tests.factories import ConversationFactory, MessageFactory, ProjectFactory


def logged(cap_logger: CapturingLogger, method: str, event: str) -> list[dict]:
    """Captured calls at ``method`` level whose event equals ``event``."""
    return [
        call.kwargs
        for call in cap_logger.calls
        if call.method_name == method and call.kwargs.get("event") == event
    ]


async def insert(session: AsyncSession, *rows) -> None:
    """Add rows and commit them."""
    session.add_all(rows)
    await session.commit()


async def create_project_tree(
    session: AsyncSession,
    owner_id: UUID,
    messages: int = 2,
) -> tuple[Project, Conversation, list[Message]]:
    """Project with one conversation holding ``messages`` messages.

    Args:
        session: Database session
        owner_id: Owner of both the project and the conversation
        messages: Number of messages to create

    Returns:
        Tuple of (project, conversation, messages)
    """
    project = ProjectFactory.build(owner_id=owner_id)
    conversation = ConversationFactory.build(project_id=project.id, owner_id=owner_id)
    entries = [MessageFactory.build(conversation_id=conversation.id) for _ in range(messages)]
    await insert(session, project, conversation, *entries)
    return project, conversation, entries
