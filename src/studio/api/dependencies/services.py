"""Application-scoped service dependencies.

The services are built once by ``create_app`` and live on ``app.state``.
"""

from typing import Annotated

from fastapi import Depends, Request

from src.studio.core.error_classifier import ErrorHistory
from src.studio.services import EntityAccessService


def get_access_service(request: Request) -> EntityAccessService:
    return request.app.state.access_service


def get_error_history(request: Request) -> ErrorHistory:
    return request.app.state.error_history


AccessServiceDep = Annotated[EntityAccessService, Depends(get_access_service)]
ErrorHistoryDep = Annotated[ErrorHistory, Depends(get_error_history)]
