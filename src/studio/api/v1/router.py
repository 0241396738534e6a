from fastapi import APIRouter

from src.studio.api.v1 import conversations, errors, projects

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(projects.router)
api_router.include_router(conversations.router)
api_router.include_router(errors.router)
