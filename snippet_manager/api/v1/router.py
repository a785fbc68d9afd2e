from fastapi import APIRouter

from snippet_manager.api.v1 import health, shared, snippets

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(snippets.router, prefix="/snippets", tags=["snippets"])
v1_router.include_router(shared.router, prefix="/shared", tags=["shared"])
v1_router.include_router(health.router, prefix="/health", tags=["health"])
