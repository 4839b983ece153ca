from fastapi import APIRouter, FastAPI

from .auth import router as auth_router
from .communities import router as communities_router
from .match import router as match_router
from .messages import router as messages_router
from .users import router as users_router


def include_modular_routers(app: FastAPI) -> None:
    app.include_router(auth_router, prefix="/auth", tags=["auth"])
    app.include_router(communities_router, tags=["communities"])
    app.include_router(users_router, tags=["users"])
    app.include_router(match_router, tags=["matches"])
    app.include_router(messages_router, tags=["messages"])


__all__ = ["include_modular_routers", "APIRouter"]
