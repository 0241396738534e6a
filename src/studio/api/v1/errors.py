"""Diagnostic error history and client recovery guidance."""

from typing import Annotated

from fastapi import APIRouter, Query

from src.studio.api.dependencies import CurrentUserId, ErrorHistoryDep
from src.studio.core.error_classifier import (
    friendly_message,
    public_message,
    recovery_suggestions,
)
from src.studio.core.errors import AppError, ErrorKind
from src.studio.schemas.responses import (
    Envelope,
    ErrorHistoryEnvelope,
    ErrorRecord,
    GuidanceEnvelope,
)

router = APIRouter(prefix="/errors", tags=["errors"])


def _record(error: AppError) -> ErrorRecord:
    return ErrorRecord(**{**error.to_dict(), "message": public_message(error)})


@router.get(
    "/recent",
    response_model=ErrorHistoryEnvelope,
    summary="Recent errors",
    responses={401: {"description": "Missing or invalid caller identity"}},
)
async def recent_errors(
    history: ErrorHistoryDep,
    user_id: CurrentUserId,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> ErrorHistoryEnvelope:
    """The caller's most recent classified errors, newest first."""
    entries = history.entries(limit, user_id=str(user_id))
    return ErrorHistoryEnvelope(
        message=f"{len(entries)} error(s)",
        errors=[_record(e) for e in entries],
    )


@router.delete("/recent", response_model=Envelope, summary="Clear error history")
async def clear_errors(history: ErrorHistoryDep, user_id: CurrentUserId) -> Envelope:
    """Forget the caller's errors; other callers' entries are kept."""
    history.clear(user_id=str(user_id))
    return Envelope(message="Error history cleared")


@router.get("/guidance", response_model=GuidanceEnvelope, summary="Recovery guidance")
async def guidance(
    kind: ErrorKind,
    code: str | None = None,
) -> GuidanceEnvelope:
    numeric_code: int | str | None = (
        int(code) if code and code.isascii() and code.isdigit() else code
    )
    return GuidanceEnvelope(
        message="Guidance",
        kind=kind,
        friendly_message=friendly_message(kind, numeric_code),
        suggestions=recovery_suggestions(kind),
    )
