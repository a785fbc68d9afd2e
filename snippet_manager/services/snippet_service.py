from __future__ import annotations

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from snippet_manager.config import settings
from snippet_manager.models.snippet import Snippet, SnippetVersion
from snippet_manager.schemas.snippet import (
    LanguageCount,
    SnippetCreate,
    SnippetResponse,
    SnippetStats,
    SnippetUpdate,
)
from snippet_manager.services.errors import NotFoundError, PinLimitExceededError, SnippetValidationError
from snippet_manager.services.snippet_query import extract_unique_tags, language_distribution

logger = logging.getLogger(__name__)

_RECENT_LIMIT = 5
_TOP_LANGUAGES_LIMIT = 5


async def _pinned_count(db: AsyncSession) -> int:
    return (
        await db.execute(select(func.count()).select_from(Snippet).where(Snippet.is_pinned.is_(True)))
    ).scalar() or 0


async def _ensure_can_pin(db: AsyncSession) -> None:
    """Read-then-write check; concurrent pins near the limit can both pass."""
    limit = settings.MAX_PINNED_SNIPPETS
    if await _pinned_count(db) >= limit:
        logger.warning("Pin rejected: %d pinned snippets already", limit)
        raise PinLimitExceededError(limit)


async def list_snippets(db: AsyncSession) -> list[Snippet]:
    """All snippets: pinned first, then newest first."""
    query = select(Snippet).order_by(Snippet.is_pinned.desc(), Snippet.created_at.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_snippet(db: AsyncSession, snippet_id: str) -> Snippet:
    snippet = await db.get(Snippet, snippet_id)
    if snippet is None:
        raise NotFoundError("Snippet not found")
    return snippet


async def create_snippet(db: AsyncSession, data: SnippetCreate) -> Snippet:
    if not data.content or not data.language or not data.name:
        raise SnippetValidationError("Content, language and name are required")

    if data.is_pinned:
        await _ensure_can_pin(db)

    snippet = Snippet(
        content=data.content,
        language=data.language,
        name=data.name,
        tags=list(data.tags),
        is_pinned=data.is_pinned,
    )
    db.add(snippet)
    await db.commit()
    await db.refresh(snippet)
    logger.info("Created snippet %s (%s, pinned=%s)", snippet.id, snippet.language, snippet.is_pinned)
    return snippet


async def update_snippet(db: AsyncSession, snippet_id: str, data: SnippetUpdate) -> Snippet:
    """Merge the supplied fields into the stored snippet (last write wins)."""
    snippet = await get_snippet(db, snippet_id)
    values = data.model_dump(exclude_unset=True, exclude_none=True)
    if not values:
        return snippet

    if values.get("is_pinned") and not snippet.is_pinned:
        await _ensure_can_pin(db)

    for field_name, value in values.items():
        setattr(snippet, field_name, value)
    await db.commit()
    await db.refresh(snippet)
    logger.info("Updated snippet %s: %s", snippet_id, sorted(values))
    return snippet


async def delete_snippet(db: AsyncSession, snippet_id: str) -> None:
    snippet = await get_snippet(db, snippet_id)
    await db.execute(delete(SnippetVersion).where(SnippetVersion.snippet_id == snippet_id))
    await db.delete(snippet)
    await db.commit()
    logger.info("Deleted snippet %s", snippet_id)


async def get_snippet_stats(db: AsyncSession) -> SnippetStats:
    """Dashboard counts over the whole collection."""
    snippets = await list_snippets(db)
    recent = (
        await db.execute(select(Snippet).order_by(Snippet.created_at.desc()).limit(_RECENT_LIMIT))
    ).scalars().all()
    return SnippetStats(
        total=len(snippets),
        pinned=sum(1 for s in snippets if s.is_pinned),
        languages=len({s.language or "text" for s in snippets}),
        tags=len(extract_unique_tags(snippets)),
        recent=[SnippetResponse.model_validate(s) for s in recent],
        top_languages=[
            LanguageCount(language=lang, count=count)
            for lang, count in language_distribution(snippets, _TOP_LANGUAGES_LIMIT)
        ],
    )
