"""Tests for share token issue, revoke and public lookup."""
import pytest

from snippet_manager.config import settings
from snippet_manager.schemas.snippet import SnippetCreate
from snippet_manager.services import share_service, snippet_service
from snippet_manager.services.errors import NotFoundError, SnippetValidationError


async def _snippet(db):
    return await snippet_service.create_snippet(
        db, SnippetCreate(name="hello", content="print(1)", language="python")
    )


def test_generate_share_token_shape():
    token = share_service.generate_share_token()
    assert len(token) == settings.SHARE_TOKEN_LENGTH
    assert set(token) <= set(share_service.TOKEN_ALPHABET)
    assert len(share_service.generate_share_token(24)) == 24


def test_build_share_url(monkeypatch):
    monkeypatch.setattr(settings, "APP_URL", "https://snippets.example.com/")
    assert share_service.build_share_url("abc") == "https://snippets.example.com/shared/abc"
    assert share_service.build_share_url(None) is None


@pytest.mark.asyncio
async def test_first_share_issues_token_and_makes_public(db):
    snippet = await _snippet(db)
    share = await share_service.get_or_create_share(db, snippet.id)
    assert share.share_token
    assert share.is_public is True


@pytest.mark.asyncio
async def test_share_is_idempotent(db):
    snippet = await _snippet(db)
    first = await share_service.get_or_create_share(db, snippet.id)
    second = await share_service.get_or_create_share(db, snippet.id)
    assert first.share_token == second.share_token


@pytest.mark.asyncio
async def test_share_missing_snippet(db):
    with pytest.raises(NotFoundError):
        await share_service.get_or_create_share(db, "missing")


@pytest.mark.asyncio
async def test_revoke_then_reshare_issues_new_token(db):
    snippet = await _snippet(db)
    old = (await share_service.get_or_create_share(db, snippet.id)).share_token

    revoked = await share_service.update_share(db, snippet.id, False)
    assert revoked.is_public is False
    assert revoked.share_token is None
    with pytest.raises(NotFoundError):
        await share_service.get_shared_snippet(db, old)

    new = await share_service.get_or_create_share(db, snippet.id)
    assert new.share_token
    assert new.share_token != old


@pytest.mark.asyncio
async def test_update_share_to_public_issues_token(db):
    snippet = await _snippet(db)
    share = await share_service.update_share(db, snippet.id, True)
    assert share.is_public is True
    assert share.share_token


@pytest.mark.asyncio
async def test_update_share_requires_flag(db):
    snippet = await _snippet(db)
    with pytest.raises(SnippetValidationError, match="isPublic field is required"):
        await share_service.update_share(db, snippet.id, None)


@pytest.mark.asyncio
async def test_private_snippet_with_token_is_not_resolvable(db):
    """A leftover token on a private snippet must not expose it."""
    snippet = await _snippet(db)
    snippet.share_token = "leftover01"
    snippet.is_public = False
    await db.commit()

    with pytest.raises(NotFoundError, match="Shared snippet not found or not public"):
        await share_service.get_shared_snippet(db, "leftover01")


@pytest.mark.asyncio
async def test_shared_read_counts_views(db):
    snippet = await _snippet(db)
    token = (await share_service.get_or_create_share(db, snippet.id)).share_token

    first = await share_service.get_shared_snippet(db, token)
    assert first.views == 1
    second = await share_service.get_shared_snippet(db, token)
    assert second.views == 2
    assert second.content == "print(1)"


@pytest.mark.asyncio
async def test_unknown_token(db):
    with pytest.raises(NotFoundError):
        await share_service.get_shared_snippet(db, "nope")
