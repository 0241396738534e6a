"""Shared enums for models."""

from enum import Enum


class EntityKind(str, Enum):
    """Cacheable entity kinds."""

    PROJECT = "project"
    FILE = "file"
    SETTING = "setting"
    CONVERSATION = "conversation"
    MESSAGE = "message"


class FileType(str, Enum):
    """File types in an extension project."""

    HTML = "html"
    CSS = "css"
    JAVASCRIPT = "javascript"
    JSON = "json"
    IMAGE = "image"
    OTHER = "other"


class MessageRole(str, Enum):
    """Author of a conversation message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
