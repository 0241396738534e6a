"""Caller identity dependency.

Authentication happens upstream; requests arrive with the already
authenticated user id in the ``X-User-ID`` header.
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header

from src.studio.core.errors import NotAuthenticated
from src.studio.core.logging import bind_user_context
from src.studio.core.validators import is_valid_entity_id


async def get_current_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> UUID:
    """Resolve the caller, raising Authentication (401) when absent or malformed."""
    if not x_user_id:
        raise NotAuthenticated("Missing X-User-ID header", code=401)
    if not is_valid_entity_id(x_user_id):
        raise NotAuthenticated("Invalid X-User-ID header", code=401)

    user_id = UUID(x_user_id)
    bind_user_context(user_id)
    return user_id


CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]
