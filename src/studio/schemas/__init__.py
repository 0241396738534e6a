from src.studio.schemas.conversation import (
    DEFAULT_CONVERSATION_TITLE,
    ConversationCreate,
    ConversationDetail,
    ConversationRead,
    ConversationUpdate,
    MessageCreate,
    MessageRead,
)
from src.studio.schemas.project import (
    FileCreate,
    FileRead,
    ProjectCreate,
    ProjectDetail,
    ProjectRead,
    ProjectUpdate,
    SettingRead,
    SettingUpsert,
)

__all__ = [
    # Conversation
    "DEFAULT_CONVERSATION_TITLE",
    "ConversationCreate",
    "ConversationDetail",
    "ConversationRead",
    "ConversationUpdate",
    "MessageCreate",
    "MessageRead",
    # Project
    "FileCreate",
    "FileRead",
    "ProjectCreate",
    "ProjectDetail",
    "ProjectRead",
    "ProjectUpdate",
    "SettingRead",
    "SettingUpsert",
]
