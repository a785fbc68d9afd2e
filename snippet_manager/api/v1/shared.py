from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from snippet_manager.api.deps import get_db_session
from snippet_manager.schemas.common import ErrorResponse
from snippet_manager.schemas.snippet import SnippetResponse
from snippet_manager.services import share_service

router = APIRouter()


@router.get(
    "/{token}",
    response_model=SnippetResponse,
    summary="Public snippet",
    description="Resolve a share token of a public snippet and count the view.",
    responses={404: {"model": ErrorResponse, "description": "Unknown token or snippet not public"}},
)
async def get_shared_snippet(token: str, db: AsyncSession = Depends(get_db_session)):
    return await share_service.get_shared_snippet(db, token)
