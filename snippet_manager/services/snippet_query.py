"""Pure search / filter / grouping over an in-memory snippet collection.

Works on anything exposing the snippet attributes (ORM rows or
``SnippetResponse`` objects). Nothing here touches the database or keeps
state: the same inputs always give the same output.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Protocol

from snippet_manager.services.errors import SnippetValidationError
from snippet_manager.services.language_detector import DEFAULT_LANGUAGE


class SnippetLike(Protocol):
    id: str
    name: str
    content: str
    language: str
    tags: list[str]
    is_pinned: bool
    created_at: datetime | None


@dataclass
class GroupedSnippets:
    """Visible view: pinned snippets, then the rest grouped by language."""

    pinned: list[Any] = field(default_factory=list)
    by_language: dict[str, list[Any]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.pinned) + sum(len(v) for v in self.by_language.values())


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


def matches_query(snippet: SnippetLike, query: str | None) -> bool:
    """Case-insensitive substring match on content, name or any tag."""
    if not query:
        return True
    needle = query.lower()
    return (
        needle in (snippet.content or "").lower()
        or needle in (snippet.name or "").lower()
        or any(needle in tag.lower() for tag in snippet.tags or [])
    )


def matches_tag(snippet: SnippetLike, tag: str | None) -> bool:
    """Exact tag membership; no tag means no restriction."""
    if not tag:
        return True
    return tag in (snippet.tags or [])


def _as_date(value: datetime | date | str | None) -> date | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(value).date()
    except (TypeError, ValueError) as e:
        raise SnippetValidationError(f"Invalid date: {value!r}") from e


def filter_snippets(
    snippets: Iterable[SnippetLike],
    query: str | None = None,
    tag: str | None = None,
    *,
    language: str | None = None,
    pinned_only: bool = False,
    date_from: datetime | date | str | None = None,
    date_to: datetime | date | str | None = None,
) -> list[SnippetLike]:
    """Return the snippets passing every active filter, in input order.

    ``query`` and ``tag`` are the basic search; ``language``, ``pinned_only``
    and the inclusive ``date_from``/``date_to`` range are the advanced ones.
    """
    start = _as_date(date_from)
    end = _as_date(date_to)
    result = []
    for snippet in snippets:
        if not matches_query(snippet, query) or not matches_tag(snippet, tag):
            continue
        if language and (snippet.language or DEFAULT_LANGUAGE) != language:
            continue
        if pinned_only and not snippet.is_pinned:
            continue
        if start or end:
            created = _as_date(snippet.created_at)
            if created is None:
                continue
            if start and created < start:
                continue
            if end and created > end:
                continue
        result.append(snippet)
    return result


def organize_snippets(
    snippets: Iterable[SnippetLike],
    query: str | None = None,
    tag: str | None = None,
    **filters: Any,
) -> GroupedSnippets:
    """Split the filtered collection into pinned and per-language groups.

    Language groups keep first-seen order; a snippet lands in exactly one
    group.
    """
    grouped = GroupedSnippets()
    for snippet in filter_snippets(snippets, query, tag, **filters):
        if snippet.is_pinned:
            grouped.pinned.append(snippet)
        else:
            lang = snippet.language or DEFAULT_LANGUAGE
            grouped.by_language.setdefault(lang, []).append(snippet)
    return grouped


# ---------------------------------------------------------------------------
# Derived reads
# ---------------------------------------------------------------------------


def extract_unique_tags(snippets: Iterable[SnippetLike]) -> list[str]:
    """Distinct tags across the collection, first-seen order, falsy dropped."""
    return list(dict.fromkeys(tag for s in snippets for tag in (s.tags or []) if tag))


def extract_languages(snippets: Iterable[SnippetLike]) -> list[str]:
    return list(dict.fromkeys(s.language or DEFAULT_LANGUAGE for s in snippets))


def process_tags(tags: Sequence[str], filter_tag: str | None = None) -> list[dict[str, Any]]:
    """Count tag occurrences; the active filter tag first, then by count."""
    counts: dict[str, int] = {}
    for tag in tags:
        counts[tag] = counts.get(tag, 0) + 1
    result = [{"tag": tag, "count": count} for tag, count in counts.items()]
    result.sort(key=lambda x: (x["tag"] != filter_tag, -x["count"]))
    return result


def language_distribution(snippets: Iterable[SnippetLike], limit: int | None = None) -> list[tuple[str, int]]:
    """(language, count) pairs, most used first."""
    counts: dict[str, int] = {}
    for s in snippets:
        lang = s.language or DEFAULT_LANGUAGE
        counts[lang] = counts.get(lang, 0) + 1
    ranked = sorted(counts.items(), key=lambda x: x[1], reverse=True)
    return ranked[:limit] if limit is not None else ranked


def suggest_name(language: str, snippets: Iterable[SnippetLike]) -> str:
    count = sum(1 for s in snippets if s.language == language)
    return f"{language}-{count + 1}"


def validate_snippet(name: str | None, content: str | None) -> None:
    if not (name or "").strip() or not (content or "").strip():
        raise SnippetValidationError("Please provide both a name and content")
