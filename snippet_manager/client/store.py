"""Client-side snippet state for one session.

``SnippetStore`` is the single source of truth a UI binds to. Mutations are
optimistic:

  1. snapshot the collection
  2. apply the tentative change locally
  3. send the request
  4. success -> replace the tentative data with the server's copy
     failure -> restore the snapshot and surface a notification

A failed mutation therefore never leaves a partial change behind. Derived
data (``all_tags``) is recomputed every time the collection changes, and the
visible view is recomputed on demand by ``view()``.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from snippet_manager.client.api import SnippetApiClient
from snippet_manager.client.notifications import Notifier
from snippet_manager.schemas.share import ShareResponse
from snippet_manager.schemas.snippet import SnippetResponse
from snippet_manager.schemas.version import VersionComparison, VersionResponse
from snippet_manager.services.errors import NotFoundError, SnippetServiceError
from snippet_manager.services.language_detector import detect_language
from snippet_manager.services.snippet_query import (
    GroupedSnippets,
    extract_languages,
    extract_unique_tags,
    filter_snippets,
    organize_snippets,
    validate_snippet,
)
from snippet_manager.services.version_service import CURRENT_VERSION_ID, build_history, compare_versions

logger = logging.getLogger(__name__)

_PENDING_PREFIX = "pending-"

# snake_case field -> wire key for PATCH bodies
_WIRE_FIELDS = {
    "content": "content",
    "language": "language",
    "name": "name",
    "tags": "tags",
    "is_pinned": "isPinned",
}


class SnippetStore:
    def __init__(self, api: SnippetApiClient | None = None, notifier: Notifier | None = None) -> None:
        self.api = api or SnippetApiClient()
        self.notifier = notifier or Notifier()

        self.snippets: list[SnippetResponse] = []
        self.all_tags: list[str] = []
        self.search_query: str = ""
        self.filter_tag: str | None = None
        self.is_loading: bool = False
        self.error: str | None = None
        self.not_found: bool = False

    async def __aenter__(self) -> SnippetStore:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.api.aclose()

    # ------------------------------------------------------------------
    # Collection helpers
    # ------------------------------------------------------------------

    def _set_snippets(self, snippets: list[SnippetResponse]) -> None:
        self.snippets = snippets
        self.all_tags = extract_unique_tags(snippets)

    def _replace(self, snippet_id: str, replacement: SnippetResponse) -> None:
        self._set_snippets([replacement if s.id == snippet_id else s for s in self.snippets])

    def _rollback(self, snapshot: list[SnippetResponse], exc: SnippetServiceError) -> None:
        self._set_snippets(snapshot)
        self.notifier.error(exc.message)

    def get(self, snippet_id: str) -> SnippetResponse | None:
        return next((s for s in self.snippets if s.id == snippet_id), None)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def set_search_query(self, query: str) -> None:
        self.search_query = query

    def set_filter_tag(self, tag: str | None) -> None:
        self.filter_tag = tag

    @property
    def filtered_snippets(self) -> list[SnippetResponse]:
        return filter_snippets(self.snippets, self.search_query, self.filter_tag)

    @property
    def all_languages(self) -> list[str]:
        return extract_languages(self.snippets)

    def view(self, **filters: Any) -> GroupedSnippets:
        """Pinned group plus language groups for the current search and tag.

        Extra keyword filters (language, pinned_only, date_from, date_to) are
        passed through to the query engine.
        """
        return organize_snippets(self.snippets, self.search_query, self.filter_tag, **filters)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def fetch_snippets(self) -> None:
        self.is_loading = True
        try:
            self._set_snippets(await self.api.list_snippets())
            self.error = None
        except SnippetServiceError as e:
            self.error = e.message
        finally:
            self.is_loading = False

    async def fetch_snippet(self, snippet_id: str) -> SnippetResponse | None:
        """Load one snippet; an unknown id sets ``not_found`` instead of an error."""
        self.not_found = False
        try:
            snippet = await self.api.get_snippet(snippet_id)
        except NotFoundError:
            self.not_found = True
            return None
        except SnippetServiceError as e:
            self.notifier.error(e.message)
            return None

        if self.get(snippet_id) is not None:
            self._replace(snippet_id, snippet)
        else:
            self._set_snippets([snippet, *self.snippets])
        return snippet

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_snippet(
        self,
        name: str,
        content: str,
        tags: list[str] | None = None,
        is_pinned: bool = False,
    ) -> SnippetResponse | None:
        try:
            validate_snippet(name, content)
        except SnippetServiceError as e:
            self.notifier.error(e.message)
            return None

        language = detect_language(content)
        tentative = SnippetResponse(
            id=f"{_PENDING_PREFIX}{uuid.uuid4().hex}",
            name=name,
            content=content,
            language=language,
            tags=list(tags or []),
            is_pinned=is_pinned,
            created_at=datetime.now(timezone.utc),
        )
        snapshot = list(self.snippets)
        self._set_snippets([tentative, *snapshot])

        self.is_loading = True
        try:
            created = await self.api.create_snippet(
                {
                    "name": name,
                    "content": content,
                    "language": language,
                    "tags": tentative.tags,
                    "isPinned": is_pinned,
                }
            )
        except SnippetServiceError as e:
            self._rollback(snapshot, e)
            return None
        finally:
            self.is_loading = False

        self._replace(tentative.id, created)
        self.notifier.success("Snippet created successfully")
        return created

    async def update_snippet(self, snippet_id: str, **changes: Any) -> SnippetResponse | None:
        """Send a partial update; a content change re-detects the language."""
        unknown = set(changes) - set(_WIRE_FIELDS)
        if unknown:
            raise TypeError(f"Unknown snippet fields: {sorted(unknown)}")
        if "content" in changes and "language" not in changes:
            changes["language"] = detect_language(changes["content"])

        snapshot = list(self.snippets)
        current = self.get(snippet_id)
        if current is not None:
            self._replace(snippet_id, current.model_copy(update=changes))

        payload = {_WIRE_FIELDS[k]: v for k, v in changes.items()}
        try:
            result = await self.api.update_snippet(snippet_id, payload)
        except SnippetServiceError as e:
            self._rollback(snapshot, e)
            return None

        if current is not None:
            self._replace(snippet_id, result)
        self.notifier.success("Snippet updated successfully!")
        return result

    async def delete_snippet(self, snippet_id: str) -> bool:
        snapshot = list(self.snippets)
        self._set_snippets([s for s in snapshot if s.id != snippet_id])
        try:
            await self.api.delete_snippet(snippet_id)
        except SnippetServiceError as e:
            self._rollback(snapshot, e)
            return False

        self.notifier.success("Snippet deleted successfully")
        return True

    async def toggle_pin_status(self, snippet_id: str, is_pinned: bool) -> SnippetResponse | None:
        snapshot = list(self.snippets)
        current = self.get(snippet_id)
        if current is not None:
            self._replace(snippet_id, current.model_copy(update={"is_pinned": is_pinned}))
        try:
            result = await self.api.update_snippet(snippet_id, {"isPinned": is_pinned})
        except SnippetServiceError as e:
            self._rollback(snapshot, e)
            return None

        if current is not None:
            self._replace(snippet_id, result)
        self.notifier.success("Snippet pinned" if is_pinned else "Snippet unpinned")
        return result

    # ------------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------------

    def _merge_share(self, snippet_id: str, share: ShareResponse) -> None:
        current = self.get(snippet_id)
        if current is not None:
            self._replace(
                snippet_id,
                current.model_copy(update={"share_token": share.share_token, "is_public": share.is_public}),
            )

    async def get_share(self, snippet_id: str) -> ShareResponse | None:
        """Fetch the share link, issuing a token on first use."""
        self.not_found = False
        try:
            share = await self.api.get_share(snippet_id)
        except NotFoundError:
            self.not_found = True
            return None
        except SnippetServiceError as e:
            self.notifier.error(e.message)
            return None
        self._merge_share(snippet_id, share)
        return share

    async def set_public(self, snippet_id: str, is_public: bool) -> ShareResponse | None:
        snapshot = list(self.snippets)
        current = self.get(snippet_id)
        if current is not None:
            update: dict[str, Any] = {"is_public": is_public}
            if not is_public:
                update["share_token"] = None
            self._replace(snippet_id, current.model_copy(update=update))
        try:
            share = await self.api.update_share(snippet_id, is_public)
        except SnippetServiceError as e:
            self._rollback(snapshot, e)
            return None

        self._merge_share(snippet_id, share)
        self.notifier.success("Sharing enabled" if is_public else "Sharing disabled")
        return share

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    async def load_versions(self, snippet_id: str) -> list[VersionResponse]:
        """History with the live content first as the implicit current version."""
        self.not_found = False
        try:
            versions = await self.api.list_versions(snippet_id)
        except NotFoundError:
            self.not_found = True
            return []
        except SnippetServiceError as e:
            self.notifier.error(e.message or "Failed to load version history")
            return []
        snippet = self.get(snippet_id)
        if snippet is None:
            return versions
        return build_history(snippet, versions)

    async def save_version(self, snippet_id: str, content: str | None = None) -> VersionResponse | None:
        """Snapshot *content* (default: the live content held locally)."""
        if content is None:
            snippet = self.get(snippet_id)
            content = snippet.content if snippet is not None else None
        if not content:
            self.notifier.error("Content is required")
            return None
        try:
            version = await self.api.create_version(snippet_id, content)
        except SnippetServiceError as e:
            self.notifier.error(e.message)
            return None
        self.notifier.success(f"Saved version {version.version_number}")
        return version

    async def restore_version(self, snippet_id: str, version: VersionResponse) -> SnippetResponse | None:
        """Copy *version* into the live content.

        The live content being replaced is not snapshotted; save a version
        first to keep it.
        """
        if version.id == CURRENT_VERSION_ID:
            return self.get(snippet_id)

        snapshot = list(self.snippets)
        current = self.get(snippet_id)
        if current is not None:
            self._replace(snippet_id, current.model_copy(update={"content": version.content}))
        try:
            result = await self.api.restore_version(snippet_id, version.version_number)
        except SnippetServiceError as e:
            self._rollback(snapshot, e)
            return None

        if current is not None:
            self._replace(snippet_id, result)
        self.notifier.success(f"Restored version {version.version_number}")
        return result

    @staticmethod
    def compare(first: VersionResponse, second: VersionResponse) -> VersionComparison:
        return compare_versions(first, second)
