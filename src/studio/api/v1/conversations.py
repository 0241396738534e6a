"""Conversation and message endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from src.studio.api.dependencies import AccessServiceDep, CurrentUserId
from src.studio.models import EntityKind
from src.studio.schemas import ConversationCreate, ConversationUpdate, MessageCreate
from src.studio.schemas.responses import (
    ConversationEnvelope,
    ConversationListEnvelope,
    MessageEnvelope,
)

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.post(
    "",
    response_model=ConversationEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create conversation",
    responses={
        201: {"description": "Conversation created"},
        400: {"description": "Malformed projectId"},
        403: {"description": "Project belongs to someone else"},
        404: {"description": "Parent project not found"},
    },
)
async def create_conversation(
    request: ConversationCreate,
    service: AccessServiceDep,
    user_id: CurrentUserId,
) -> ConversationEnvelope:
    conversation = await service.create_conversation(user_id, request)
    return ConversationEnvelope(message="Conversation created", conversation=conversation)


@router.get(
    "",
    response_model=ConversationListEnvelope,
    summary="List conversations",
    description="Conversations of a project, most recently updated first.",
)
async def list_conversations(
    project_id: Annotated[str, Query(alias="projectId")],
    service: AccessServiceDep,
) -> ConversationListEnvelope:
    conversations = await service.list_conversations(project_id)
    return ConversationListEnvelope(
        message=f"{len(conversations)} conversation(s)",
        conversations=conversations,
    )


@router.get(
    "/{conversation_id}",
    response_model=ConversationEnvelope,
    summary="Get conversation",
    responses={
        200: {"description": "Conversation with its messages"},
        400: {"description": "Malformed conversation id"},
        404: {"description": "Conversation not found"},
    },
)
async def get_conversation(
    conversation_id: str,
    service: AccessServiceDep,
) -> ConversationEnvelope:
    conversation = await service.get(EntityKind.CONVERSATION, conversation_id)
    return ConversationEnvelope(message="Conversation loaded", conversation=conversation)


@router.patch(
    "/{conversation_id}",
    response_model=ConversationEnvelope,
    summary="Rename conversation",
)
async def update_conversation(
    conversation_id: str,
    request: ConversationUpdate,
    service: AccessServiceDep,
    user_id: CurrentUserId,
) -> ConversationEnvelope:
    conversation = await service.update_conversation(user_id, conversation_id, request)
    return ConversationEnvelope(message="Conversation updated", conversation=conversation)


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Append message",
    responses={
        201: {"description": "Message appended"},
        400: {"description": "Invalid role or content"},
        404: {"description": "Conversation not found"},
    },
)
async def append_message(
    conversation_id: str,
    request: MessageCreate,
    service: AccessServiceDep,
    user_id: CurrentUserId,
) -> MessageEnvelope:
    """Append a message; the conversation's updatedAt is bumped on a best-effort basis."""
    message = await service.append_message(user_id, conversation_id, request)
    return MessageEnvelope(message="Message added", entry=message)
