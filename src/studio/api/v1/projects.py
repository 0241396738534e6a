"""Project endpoints.

Path ids are taken as plain strings and validated by the access layer, so a
malformed id is reported as a Validation error before any storage call.
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from src.studio.api.dependencies import AccessServiceDep, CurrentUserId
from src.studio.models import EntityKind
from src.studio.schemas import FileCreate, ProjectCreate, ProjectUpdate, SettingUpsert
from src.studio.schemas.responses import (
    Envelope,
    FileEnvelope,
    ProjectEnvelope,
    ProjectListEnvelope,
    SettingEnvelope,
)

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get(
    "",
    response_model=ProjectListEnvelope,
    summary="List projects",
    description="List the caller's projects, most recently updated first.",
    responses={
        200: {"description": "Projects owned by the caller"},
        401: {"description": "Missing or invalid caller identity"},
        403: {"description": "ownerId is not the caller"},
    },
)
async def list_projects(
    service: AccessServiceDep,
    user_id: CurrentUserId,
    owner_id: Annotated[str | None, Query(alias="ownerId")] = None,
) -> ProjectListEnvelope:
    projects = await service.list_projects(user_id, owner_id)
    return ProjectListEnvelope(message=f"{len(projects)} project(s)", projects=projects)


@router.get(
    "/{project_id}",
    response_model=ProjectEnvelope,
    summary="Get project",
    description="Get a project with its files, settings and conversations.",
    responses={
        200: {"description": "Project with dependent collections"},
        400: {"description": "Malformed project id"},
        404: {"description": "Project not found"},
        500: {"description": "Storage failure"},
    },
)
async def get_project(project_id: str, service: AccessServiceDep) -> ProjectEnvelope:
    project = await service.get(EntityKind.PROJECT, project_id)
    return ProjectEnvelope(message="Project loaded", project=project)


@router.post(
    "",
    response_model=ProjectEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create project",
    responses={
        201: {"description": "Project created"},
        400: {"description": "Missing or invalid fields"},
        403: {"description": "ownerId is not the caller"},
    },
)
async def create_project(
    request: ProjectCreate,
    service: AccessServiceDep,
    user_id: CurrentUserId,
) -> ProjectEnvelope:
    """Create a project; starter files and settings are added unless seedFiles is false."""
    project = await service.create_project(user_id, request)
    return ProjectEnvelope(message="Project created", project=project)


@router.patch(
    "/{project_id}",
    response_model=ProjectEnvelope,
    summary="Update project",
    responses={
        200: {"description": "Project updated"},
        403: {"description": "Not the owner"},
        404: {"description": "Project not found"},
    },
)
async def update_project(
    project_id: str,
    request: ProjectUpdate,
    service: AccessServiceDep,
    user_id: CurrentUserId,
) -> ProjectEnvelope:
    project = await service.update_project(user_id, project_id, request)
    return ProjectEnvelope(message="Project updated", project=project)


@router.delete(
    "/{project_id}",
    response_model=Envelope,
    summary="Delete project",
    description="Soft-delete a project and remove its files, settings and conversations.",
    responses={
        200: {"description": "Project deleted"},
        403: {"description": "Not the owner"},
        404: {"description": "Project not found"},
    },
)
async def delete_project(
    project_id: str,
    service: AccessServiceDep,
    user_id: CurrentUserId,
) -> Envelope:
    deleted = await service.delete_project(user_id, project_id)
    return Envelope(message=f"Project {deleted} deleted")


@router.post(
    "/{project_id}/files",
    response_model=FileEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Add file",
    responses={
        201: {"description": "File created"},
        403: {"description": "Not the owner"},
        404: {"description": "Project not found"},
    },
)
async def create_file(
    project_id: str,
    request: FileCreate,
    service: AccessServiceDep,
    user_id: CurrentUserId,
) -> FileEnvelope:
    file = await service.create_file(user_id, project_id, request)
    return FileEnvelope(message="File created", file=file)


@router.put(
    "/{project_id}/settings/{key}",
    response_model=SettingEnvelope,
    summary="Set project setting",
    responses={
        200: {"description": "Setting stored"},
        403: {"description": "Not the owner"},
        404: {"description": "Project not found"},
    },
)
async def upsert_setting(
    project_id: str,
    key: str,
    request: SettingUpsert,
    service: AccessServiceDep,
    user_id: CurrentUserId,
) -> SettingEnvelope:
    setting = await service.upsert_setting(user_id, project_id, key, request.value)
    return SettingEnvelope(message="Setting saved", setting=setting)
