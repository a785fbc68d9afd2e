"""Public share links.

Per-snippet states: private, public without token, public with token.
Revoking (is_public=False) drops the token for good; sharing again issues a
brand-new one, so links handed out earlier stop resolving.
"""
from __future__ import annotations

import logging
import secrets
import string

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from snippet_manager.config import settings
from snippet_manager.models.snippet import Snippet
from snippet_manager.schemas.share import ShareResponse
from snippet_manager.services.errors import NotFoundError, SnippetValidationError
from snippet_manager.services.snippet_service import get_snippet

logger = logging.getLogger(__name__)

# URL-safe 64-symbol alphabet; 10 symbols = 60 bits, uniqueness not re-checked
TOKEN_ALPHABET = string.ascii_letters + string.digits + "_-"


def generate_share_token(length: int | None = None) -> str:
    length = length or settings.SHARE_TOKEN_LENGTH
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def build_share_url(token: str | None) -> str | None:
    if not token:
        return None
    return f"{settings.APP_URL.rstrip('/')}/shared/{token}"


def _to_share(snippet: Snippet) -> ShareResponse:
    return ShareResponse(
        share_token=snippet.share_token,
        is_public=snippet.is_public,
        share_url=build_share_url(snippet.share_token),
    )


async def get_or_create_share(db: AsyncSession, snippet_id: str) -> ShareResponse:
    """Return the existing token, or issue one and make the snippet public."""
    snippet = await get_snippet(db, snippet_id)
    if snippet.share_token:
        return _to_share(snippet)

    snippet.share_token = generate_share_token()
    snippet.is_public = True
    await db.commit()
    await db.refresh(snippet)
    logger.info("Issued share token for snippet %s", snippet_id)
    return _to_share(snippet)


async def update_share(db: AsyncSession, snippet_id: str, is_public: bool | None) -> ShareResponse:
    """Toggle public access.

    Turning it off revokes the token; turning it on issues a fresh token when
    none exists.
    """
    if is_public is None:
        raise SnippetValidationError("isPublic field is required")
    snippet = await get_snippet(db, snippet_id)

    snippet.is_public = is_public
    if not is_public:
        snippet.share_token = None
    elif not snippet.share_token:
        snippet.share_token = generate_share_token()
    await db.commit()
    await db.refresh(snippet)
    logger.info("Snippet %s sharing set to public=%s", snippet_id, is_public)
    return _to_share(snippet)


async def get_shared_snippet(db: AsyncSession, token: str) -> Snippet:
    """Resolve a public token and count the view.

    The increment is a plain UPDATE without locking; concurrent reads may
    lose counts.
    """
    snippet = (
        await db.execute(
            select(Snippet).where(Snippet.share_token == token, Snippet.is_public.is_(True))
        )
    ).scalar_one_or_none()
    if snippet is None:
        raise NotFoundError("Shared snippet not found or not public")

    await db.execute(
        update(Snippet)
        .where(Snippet.id == snippet.id)
        .values(views=Snippet.views + 1, updated_at=Snippet.updated_at)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    await db.refresh(snippet)
    return snippet
