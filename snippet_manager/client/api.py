"""Thin async HTTP client for the snippet API.

Maps non-2xx responses back to the typed service errors so callers handle
the same failures on both sides of the wire. Nothing is retried: a failed
request is surfaced immediately and retrying is left to the user.
"""
from __future__ import annotations

import logging
from typing import Any

import httpx

from snippet_manager.config import settings
from snippet_manager.schemas.share import ShareResponse
from snippet_manager.schemas.snippet import SnippetResponse, SnippetStats
from snippet_manager.schemas.version import VersionResponse
from snippet_manager.services.errors import UnexpectedError, error_for_status

logger = logging.getLogger(__name__)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("error") or f"HTTP {response.status_code}")
    return f"HTTP {response.status_code}"


class SnippetApiClient:
    """One instance per client session; call ``aclose()`` when done."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout or settings.API_TIMEOUT,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, *, json: dict[str, Any] | None = None) -> Any:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.RequestError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise UnexpectedError(f"Request failed: {e}") from e

        if response.is_error:
            detail = _error_detail(response)
            logger.warning("%s %s -> %d: %s", method, path, response.status_code, detail)
            raise error_for_status(response.status_code, detail)
        return response.json()

    # -- snippets ---------------------------------------------------------

    async def list_snippets(self) -> list[SnippetResponse]:
        data = await self._request("GET", "/snippets")
        return [SnippetResponse.model_validate(item) for item in data]

    async def get_snippet(self, snippet_id: str) -> SnippetResponse:
        return SnippetResponse.model_validate(await self._request("GET", f"/snippets/{snippet_id}"))

    async def create_snippet(self, payload: dict[str, Any]) -> SnippetResponse:
        return SnippetResponse.model_validate(await self._request("POST", "/snippets", json=payload))

    async def update_snippet(self, snippet_id: str, payload: dict[str, Any]) -> SnippetResponse:
        data = await self._request("PATCH", f"/snippets/{snippet_id}", json=payload)
        return SnippetResponse.model_validate(data)

    async def delete_snippet(self, snippet_id: str) -> None:
        await self._request("DELETE", f"/snippets/{snippet_id}")

    async def get_stats(self) -> SnippetStats:
        return SnippetStats.model_validate(await self._request("GET", "/snippets/stats"))

    # -- sharing ----------------------------------------------------------

    async def get_share(self, snippet_id: str) -> ShareResponse:
        return ShareResponse.model_validate(await self._request("GET", f"/snippets/{snippet_id}/share"))

    async def update_share(self, snippet_id: str, is_public: bool) -> ShareResponse:
        data = await self._request("PATCH", f"/snippets/{snippet_id}/share", json={"isPublic": is_public})
        return ShareResponse.model_validate(data)

    async def get_shared(self, token: str) -> SnippetResponse:
        return SnippetResponse.model_validate(await self._request("GET", f"/shared/{token}"))

    # -- versions ---------------------------------------------------------

    async def list_versions(self, snippet_id: str) -> list[VersionResponse]:
        data = await self._request("GET", f"/snippets/{snippet_id}/versions")
        return [VersionResponse.model_validate(item) for item in data]

    async def create_version(self, snippet_id: str, content: str) -> VersionResponse:
        data = await self._request("POST", f"/snippets/{snippet_id}/versions", json={"content": content})
        return VersionResponse.model_validate(data)

    async def restore_version(self, snippet_id: str, version_number: int) -> SnippetResponse:
        data = await self._request("POST", f"/snippets/{snippet_id}/versions/{version_number}/restore")
        return SnippetResponse.model_validate(data)
