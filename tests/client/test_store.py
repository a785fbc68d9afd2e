"""Tests for the optimistic client store.

The happy paths run against the real app; failure paths use a mock
transport that serves a fixed collection and rejects every mutation.
"""
import httpx
import pytest
import pytest_asyncio

from snippet_manager.client.api import SnippetApiClient
from snippet_manager.client.notifications import NotificationLevel, Notifier
from snippet_manager.client.store import SnippetStore
from snippet_manager.schemas.version import VersionResponse
from snippet_manager.services.errors import NotFoundError, PinLimitExceededError, UnexpectedError
from snippet_manager.services.version_service import CURRENT_VERSION_ID

SEED = [
    {
        "id": "a1",
        "name": "hello",
        "content": "print(1)",
        "language": "python",
        "tags": ["demo"],
        "isPinned": False,
        "shareToken": None,
        "isPublic": False,
        "views": 0,
        "createdAt": "2025-01-02T00:00:00Z",
        "updatedAt": "2025-01-02T00:00:00Z",
    },
    {
        "id": "b2",
        "name": "query",
        "content": "SELECT 1",
        "language": "sql",
        "tags": ["db"],
        "isPinned": True,
        "shareToken": "tok",
        "isPublic": True,
        "views": 3,
        "createdAt": "2025-01-01T00:00:00Z",
        "updatedAt": "2025-01-01T00:00:00Z",
    },
]


def _failing_handler(request: httpx.Request) -> httpx.Response:
    if request.method == "GET" and request.url.path == "/api/v1/snippets":
        return httpx.Response(200, json=SEED)
    if request.method == "GET" and request.url.path.endswith("/missing"):
        return httpx.Response(404, json={"detail": "Snippet not found"})
    if request.method == "PATCH" and request.url.path == "/api/v1/snippets/a1":
        body = request.read()
        if b"isPinned" in body:
            return httpx.Response(400, json={"detail": "Maximum of 10 pinned snippets allowed"})
    return httpx.Response(500, json={"detail": "Internal server error"})


@pytest_asyncio.fixture
async def store(client):
    notifier = Notifier()
    async with SnippetStore(api=SnippetApiClient(client=client), notifier=notifier) as s:
        yield s


@pytest_asyncio.fixture
async def failing_store():
    http = httpx.AsyncClient(transport=httpx.MockTransport(_failing_handler), base_url="http://test/api/v1")
    async with SnippetStore(api=SnippetApiClient(client=http)) as s:
        await s.fetch_snippets()
        yield s
    await http.aclose()


# ---------------------------------------------------------------------------
# Happy paths against the app
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_detects_language_and_notifies(store):
    created = await store.create_snippet("hello", "def f(x):\n    return x\n", tags=["demo"])
    assert created is not None
    assert created.language == "python"
    assert [s.id for s in store.snippets] == [created.id]
    assert not created.id.startswith("pending-")
    assert store.all_tags == ["demo"]
    assert store.notifier.last.level is NotificationLevel.SUCCESS
    assert store.notifier.last.message == "Snippet created successfully"


@pytest.mark.asyncio
async def test_create_rejects_blank_input_without_request(store):
    assert await store.create_snippet("  ", "content") is None
    assert store.snippets == []
    assert store.notifier.last.message == "Please provide both a name and content"


@pytest.mark.asyncio
async def test_update_recomputes_tags_and_language(store):
    created = await store.create_snippet("hello", "print(1)", tags=["old"])
    updated = await store.update_snippet(created.id, content="SELECT id FROM users WHERE id = 1", tags=["new"])
    assert updated.language == "sql"
    assert store.get(created.id).tags == ["new"]
    assert store.all_tags == ["new"]
    assert store.notifier.last.message == "Snippet updated successfully!"


@pytest.mark.asyncio
async def test_update_rejects_unknown_fields(store):
    with pytest.raises(TypeError):
        await store.update_snippet("x", colour="red")


@pytest.mark.asyncio
async def test_delete_and_fetch(store):
    created = await store.create_snippet("hello", "print(1)")
    assert await store.delete_snippet(created.id) is True
    assert store.snippets == []

    await store.fetch_snippets()
    assert store.snippets == []
    assert store.error is None
    assert store.is_loading is False


@pytest.mark.asyncio
async def test_fetch_unknown_snippet_sets_not_found(store):
    assert await store.fetch_snippet("missing") is None
    assert store.not_found is True
    assert store.notifier.history == []


@pytest.mark.asyncio
async def test_versions_of_unknown_snippet_set_not_found(store):
    """Reading history of a missing snippet is a not-found state, not an error toast."""
    assert await store.load_versions("missing") == []
    assert store.not_found is True
    assert store.notifier.history == []


@pytest.mark.asyncio
async def test_share_of_unknown_snippet_sets_not_found(store):
    assert await store.get_share("missing") is None
    assert store.not_found is True
    assert store.notifier.history == []


@pytest.mark.asyncio
async def test_successful_read_clears_not_found(store):
    created = await store.create_snippet("hello", "print(1)")
    await store.load_versions("missing")
    assert store.not_found is True

    await store.get_share(created.id)
    assert store.not_found is False


@pytest.mark.asyncio
async def test_pin_toggle(store):
    created = await store.create_snippet("hello", "print(1)")
    pinned = await store.toggle_pin_status(created.id, True)
    assert pinned.is_pinned is True
    assert store.notifier.last.message == "Snippet pinned"
    assert [s.id for s in store.view().pinned] == [created.id]


@pytest.mark.asyncio
async def test_sharing(store):
    created = await store.create_snippet("hello", "print(1)")
    share = await store.set_public(created.id, True)
    assert share.share_token
    assert store.get(created.id).share_token == share.share_token
    assert store.notifier.last.message == "Sharing enabled"

    off = await store.set_public(created.id, False)
    assert off.share_token is None
    assert store.get(created.id).is_public is False
    assert store.notifier.last.message == "Sharing disabled"

    again = await store.get_share(created.id)
    assert again.share_token and again.share_token != share.share_token


@pytest.mark.asyncio
async def test_version_history_and_restore(store):
    created = await store.create_snippet("hello", "print(1)")
    saved = await store.save_version(created.id)
    assert saved.version_number == 1
    assert store.notifier.last.message == "Saved version 1"

    await store.update_snippet(created.id, content="print(2)")
    history = await store.load_versions(created.id)
    assert history[0].id == CURRENT_VERSION_ID
    assert history[0].content == "print(2)"
    assert [v.version_number for v in history] == [2, 1]

    # restoring the live content is a no-op
    assert (await store.restore_version(created.id, history[0])).content == "print(2)"

    restored = await store.restore_version(created.id, history[1])
    assert restored.content == "print(1)"
    assert store.get(created.id).content == "print(1)"
    assert store.notifier.last.message == "Restored version 1"

    comparison = store.compare(history[0], history[1])
    assert comparison.older.version_number == 1


@pytest.mark.asyncio
async def test_view_uses_search_and_tag(store):
    await store.create_snippet("alpha", "beta", tags=["demo"])
    await store.create_snippet("other", "SELECT 1", tags=["db"])

    store.set_search_query("demo")
    assert [s.name for s in store.filtered_snippets] == ["alpha"]

    store.set_search_query("")
    store.set_filter_tag("db")
    grouped = store.view()
    assert [s.name for group in grouped.by_language.values() for s in group] == ["other"]


# ---------------------------------------------------------------------------
# Rollback on failure
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_failed_create_rolls_back(failing_store):
    before = list(failing_store.snippets)
    assert await failing_store.create_snippet("new", "print(1)") is None
    assert failing_store.snippets == before
    assert failing_store.all_tags == ["demo", "db"]
    assert failing_store.notifier.last.level is NotificationLevel.ERROR
    assert failing_store.notifier.last.message == "Internal server error"


@pytest.mark.asyncio
async def test_failed_update_rolls_back(failing_store):
    before = list(failing_store.snippets)
    assert await failing_store.update_snippet("b2", name="renamed", tags=["x"]) is None
    assert failing_store.snippets == before
    assert failing_store.all_tags == ["demo", "db"]


@pytest.mark.asyncio
async def test_failed_pin_surfaces_limit_message(failing_store):
    assert await failing_store.toggle_pin_status("a1", True) is None
    assert failing_store.get("a1").is_pinned is False
    assert failing_store.notifier.last.message == "Maximum of 10 pinned snippets allowed"


@pytest.mark.asyncio
async def test_failed_delete_rolls_back(failing_store):
    assert await failing_store.delete_snippet("a1") is False
    assert [s.id for s in failing_store.snippets] == ["a1", "b2"]


@pytest.mark.asyncio
async def test_failed_unshare_restores_token(failing_store):
    assert await failing_store.set_public("b2", False) is None
    assert failing_store.get("b2").share_token == "tok"
    assert failing_store.get("b2").is_public is True


@pytest.mark.asyncio
async def test_failed_restore_rolls_back(failing_store):
    history = await failing_store.load_versions("a1")
    assert history == []
    assert failing_store.notifier.last.level is NotificationLevel.ERROR

    before = failing_store.get("a1")
    stored = VersionResponse(id="v1", snippet_id="a1", content="old", version_number=1)
    assert await failing_store.restore_version("a1", stored) is None
    assert failing_store.get("a1") == before


@pytest.mark.asyncio
async def test_failed_fetch_sets_error():
    http = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(500, json={"detail": "boom"})),
        base_url="http://test/api/v1",
    )
    async with SnippetStore(api=SnippetApiClient(client=http)) as store:
        await store.fetch_snippets()
        assert store.error == "boom"
        assert store.is_loading is False
    await http.aclose()


# ---------------------------------------------------------------------------
# API client error mapping
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_client_maps_status_to_typed_errors():
    http = httpx.AsyncClient(transport=httpx.MockTransport(_failing_handler), base_url="http://test/api/v1")
    api = SnippetApiClient(client=http)
    with pytest.raises(NotFoundError):
        await api.get_snippet("missing")
    with pytest.raises(PinLimitExceededError):
        await api.update_snippet("a1", {"isPinned": True})
    with pytest.raises(UnexpectedError):
        await api.delete_snippet("a1")
    await http.aclose()


@pytest.mark.asyncio
async def test_client_maps_transport_failure():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(refuse), base_url="http://test/api/v1")
    api = SnippetApiClient(client=http)
    with pytest.raises(UnexpectedError, match="Request failed"):
        await api.list_snippets()
    await http.aclose()
