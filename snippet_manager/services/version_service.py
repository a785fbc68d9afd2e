"""Explicit content snapshots per snippet.

Snapshots are only taken on an explicit "save version"; editing the live
snippet never creates one, so the live content can be ahead of the newest
stored version. Version numbers start at 1 and grow by one per snippet.
"""
from __future__ import annotations

import difflib
import logging
from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from snippet_manager.models.snippet import Snippet, SnippetVersion
from snippet_manager.schemas.version import VersionComparison, VersionResponse
from snippet_manager.services.errors import NotFoundError, SnippetValidationError
from snippet_manager.services.snippet_service import get_snippet

logger = logging.getLogger(__name__)

CURRENT_VERSION_ID = "current"


async def _latest_version_number(db: AsyncSession, snippet_id: str) -> int:
    return (
        await db.execute(
            select(func.max(SnippetVersion.version_number)).where(
                SnippetVersion.snippet_id == snippet_id
            )
        )
    ).scalar() or 0


async def list_versions(db: AsyncSession, snippet_id: str) -> list[SnippetVersion]:
    """All versions of a snippet, newest first."""
    await get_snippet(db, snippet_id)
    result = await db.execute(
        select(SnippetVersion)
        .where(SnippetVersion.snippet_id == snippet_id)
        .order_by(SnippetVersion.version_number.desc())
    )
    return list(result.scalars().all())


async def create_version(db: AsyncSession, snippet_id: str, content: str | None) -> SnippetVersion:
    if not content:
        raise SnippetValidationError("Content is required")
    await get_snippet(db, snippet_id)

    next_number = await _latest_version_number(db, snippet_id) + 1
    version = SnippetVersion(snippet_id=snippet_id, content=content, version_number=next_number)
    db.add(version)
    await db.commit()
    await db.refresh(version)
    logger.info("Saved version %d of snippet %s", next_number, snippet_id)
    return version


async def get_version(db: AsyncSession, snippet_id: str, version_number: int) -> SnippetVersion:
    version = (
        await db.execute(
            select(SnippetVersion).where(
                SnippetVersion.snippet_id == snippet_id,
                SnippetVersion.version_number == version_number,
            )
        )
    ).scalar_one_or_none()
    if version is None:
        raise NotFoundError(f"Version {version_number} not found")
    return version


async def restore_version(db: AsyncSession, snippet_id: str, version_number: int) -> Snippet:
    """Copy a stored version's content into the live snippet.

    The overwritten live content is not snapshotted first; an unsaved edit
    is lost.
    """
    snippet = await get_snippet(db, snippet_id)
    version = await get_version(db, snippet_id, version_number)
    snippet.content = version.content
    await db.commit()
    await db.refresh(snippet)
    logger.info("Restored snippet %s to version %d", snippet_id, version_number)
    return snippet


# ---------------------------------------------------------------------------
# History view and compare (pure)
# ---------------------------------------------------------------------------


def current_version(snippet, versions: Sequence) -> VersionResponse:
    """The live content as an implicit version above the newest stored one."""
    latest = max((v.version_number for v in versions), default=0)
    return VersionResponse(
        id=CURRENT_VERSION_ID,
        snippet_id=snippet.id,
        content=snippet.content,
        version_number=latest + 1,
        created_at=snippet.updated_at or snippet.created_at,
    )


def build_history(snippet, versions: Sequence) -> list[VersionResponse]:
    """Live content first, then stored versions newest first. Never persisted."""
    stored = sorted(
        (VersionResponse.model_validate(v) for v in versions),
        key=lambda v: v.version_number,
        reverse=True,
    )
    return [current_version(snippet, versions), *stored]


def compare_versions(first, second) -> VersionComparison:
    """Order two picks by version number (larger is newer) and diff them."""
    a = first if isinstance(first, VersionResponse) else VersionResponse.model_validate(first)
    b = second if isinstance(second, VersionResponse) else VersionResponse.model_validate(second)
    older, newer = (a, b) if a.version_number <= b.version_number else (b, a)
    diff_lines = difflib.unified_diff(
        older.content.splitlines(),
        newer.content.splitlines(),
        fromfile=f"version {older.version_number}",
        tofile=f"version {newer.version_number}",
        lineterm="",
    )
    return VersionComparison(older=older, newer=newer, diff="\n".join(diff_lines))
