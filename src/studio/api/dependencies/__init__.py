"""FastAPI dependency injection definitions - Lobby Pattern."""

# Auth
from src.studio.api.dependencies.auth import CurrentUserId, get_current_user_id

# Services
from src.studio.api.dependencies.services import (
    AccessServiceDep,
    ErrorHistoryDep,
    get_access_service,
    get_error_history,
)

__all__ = [
    # Auth
    "CurrentUserId",
    "get_current_user_id",
    # Services
    "AccessServiceDep",
    "ErrorHistoryDep",
    "get_access_service",
    "get_error_history",
]
