"""Repository layer - data access abstraction."""

from src.studio.repositories.base import BaseRepository
from src.studio.repositories.conversation import ConversationRepository, MessageRepository
from src.studio.repositories.file import FileRepository
from src.studio.repositories.project import ProjectRepository
from src.studio.repositories.setting import SettingRepository

__all__ = [
    "BaseRepository",
    "ConversationRepository",
    "FileRepository",
    "MessageRepository",
    "ProjectRepository",
    "SettingRepository",
]
