"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import ProjectFactory, ConversationFactory, ...
"""

from tests.factories.base import BaseFactory, generate_id, utc_now
from tests.factories.conversation import ConversationFactory, MessageFactory
from tests.factories.project import ProjectFactory, ProjectFileFactory, ProjectSettingFactory

__all__ = [
    # Base
    "BaseFactory",
    "generate_id",
    "utc_now",
    # Project
    "ProjectFactory",
    "ProjectFileFactory",
    "ProjectSettingFactory",
    # Conversation
    "ConversationFactory",
    "MessageFactory",
]
