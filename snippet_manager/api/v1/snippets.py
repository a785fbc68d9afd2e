from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from snippet_manager.api.deps import get_db_session
from snippet_manager.schemas.common import ErrorResponse, MessageResponse
from snippet_manager.schemas.share import ShareResponse, ShareUpdate
from snippet_manager.schemas.snippet import SnippetCreate, SnippetResponse, SnippetStats, SnippetUpdate
from snippet_manager.schemas.version import VersionCreate, VersionResponse
from snippet_manager.services import share_service, snippet_service, version_service

router = APIRouter()

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Snippet not found"}}
_BAD_REQUEST = {400: {"model": ErrorResponse, "description": "Validation failed or pin limit reached"}}


@router.get(
    "",
    response_model=list[SnippetResponse],
    summary="List snippets",
    description="All snippets, pinned first, then newest first.",
)
async def list_snippets(db: AsyncSession = Depends(get_db_session)):
    return await snippet_service.list_snippets(db)


@router.post(
    "",
    response_model=SnippetResponse,
    status_code=201,
    summary="Create snippet",
    description="Create a snippet. content, language and name are required; "
    "pinning fails once the pinned limit is reached.",
    responses=_BAD_REQUEST,
)
async def create_snippet(data: SnippetCreate, db: AsyncSession = Depends(get_db_session)):
    return await snippet_service.create_snippet(db, data)


@router.get(
    "/stats",
    response_model=SnippetStats,
    summary="Dashboard stats",
    description="Totals, distinct languages and tags, recent snippets and top languages.",
)
async def get_stats(db: AsyncSession = Depends(get_db_session)):
    return await snippet_service.get_snippet_stats(db)


@router.get(
    "/{snippet_id}",
    response_model=SnippetResponse,
    summary="Snippet detail",
    responses=_NOT_FOUND,
)
async def get_snippet(snippet_id: str, db: AsyncSession = Depends(get_db_session)):
    return await snippet_service.get_snippet(db, snippet_id)


@router.patch(
    "/{snippet_id}",
    response_model=SnippetResponse,
    summary="Update snippet",
    description="Partial update: omitted fields keep their current value.",
    responses={**_NOT_FOUND, **_BAD_REQUEST},
)
async def update_snippet(
    snippet_id: str,
    data: SnippetUpdate,
    db: AsyncSession = Depends(get_db_session),
):
    return await snippet_service.update_snippet(db, snippet_id, data)


@router.delete(
    "/{snippet_id}",
    response_model=MessageResponse,
    summary="Delete snippet",
    description="Delete a snippet together with its version history.",
    responses=_NOT_FOUND,
)
async def delete_snippet(snippet_id: str, db: AsyncSession = Depends(get_db_session)):
    await snippet_service.delete_snippet(db, snippet_id)
    return MessageResponse(message="Snippet deleted successfully")


# ---------------------------------------------------------------------------
# Sharing
# ---------------------------------------------------------------------------


@router.get(
    "/{snippet_id}/share",
    response_model=ShareResponse,
    summary="Get share link",
    description="Return the share token, issuing one (and making the snippet public) on first call.",
    responses=_NOT_FOUND,
)
async def get_share(snippet_id: str, db: AsyncSession = Depends(get_db_session)):
    return await share_service.get_or_create_share(db, snippet_id)


@router.patch(
    "/{snippet_id}/share",
    response_model=ShareResponse,
    summary="Update sharing",
    description="isPublic=false revokes the token; sharing again issues a new one.",
    responses={**_NOT_FOUND, **_BAD_REQUEST},
)
async def update_share(
    snippet_id: str,
    data: ShareUpdate,
    db: AsyncSession = Depends(get_db_session),
):
    return await share_service.update_share(db, snippet_id, data.is_public)


# ---------------------------------------------------------------------------
# Versions
# ---------------------------------------------------------------------------


@router.get(
    "/{snippet_id}/versions",
    response_model=list[VersionResponse],
    summary="Version history",
    description="Stored versions, newest first. The live content is not included.",
    responses=_NOT_FOUND,
)
async def list_versions(snippet_id: str, db: AsyncSession = Depends(get_db_session)):
    return await version_service.list_versions(db, snippet_id)


@router.post(
    "/{snippet_id}/versions",
    response_model=VersionResponse,
    status_code=201,
    summary="Save version",
    description="Snapshot the given content as the next version number.",
    responses={**_NOT_FOUND, **_BAD_REQUEST},
)
async def create_version(
    snippet_id: str,
    data: VersionCreate,
    db: AsyncSession = Depends(get_db_session),
):
    return await version_service.create_version(db, snippet_id, data.content)


@router.post(
    "/{snippet_id}/versions/{version_number}/restore",
    response_model=SnippetResponse,
    summary="Restore version",
    description="Copy a stored version into the live snippet. "
    "The current live content is not snapshotted first.",
    responses=_NOT_FOUND,
)
async def restore_version(
    snippet_id: str,
    version_number: int,
    db: AsyncSession = Depends(get_db_session),
):
    return await version_service.restore_version(db, snippet_id, version_number)
