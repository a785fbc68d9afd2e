from datetime import datetime

from pydantic import Field, field_validator

from snippet_manager.schemas.common import CamelModel


def _clean_tags(tags: list[str] | None) -> list[str] | None:
    """Strip whitespace, drop blanks and duplicates, keep first-seen order."""
    if tags is None:
        return None
    seen: list[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class SnippetResponse(CamelModel):
    """A stored snippet."""

    id: str = Field(description="Snippet ID", examples=["3f2b9c4e8d1a4b6f9e0c7a5d2b1e4f6a"])
    name: str = Field(description="Display name", examples=["hello"])
    content: str = Field(description="Snippet text", examples=["print(1)"])
    language: str = Field(default="text", description="Language tag", examples=["python"])
    tags: list[str] = Field(default=[], description="Tags in display order", examples=[["demo"]])
    is_pinned: bool = Field(default=False, description="Pinned to the top of the list")
    share_token: str | None = Field(default=None, description="Public share token")
    is_public: bool = Field(default=False, description="Readable through the share token")
    views: int = Field(default=0, description="Public view counter")
    created_at: datetime | None = Field(default=None, description="Creation time (ISO 8601)")
    updated_at: datetime | None = Field(default=None, description="Last update time (ISO 8601)")


class SnippetCreate(CamelModel):
    """Create request body. content, language and name are required."""

    content: str | None = Field(default=None, description="Snippet text", examples=["print(1)"])
    language: str | None = Field(default=None, description="Language tag", examples=["python"])
    name: str | None = Field(default=None, description="Display name", examples=["hello"])
    tags: list[str] = Field(default=[], description="Tags", examples=[["demo"]])
    is_pinned: bool = Field(default=False, description="Pin on creation")

    @field_validator("tags")
    @classmethod
    def _tags(cls, v: list[str]) -> list[str]:
        return _clean_tags(v) or []


class SnippetUpdate(CamelModel):
    """Partial update; omitted fields keep their stored value."""

    content: str | None = Field(default=None, description="Snippet text")
    language: str | None = Field(default=None, description="Language tag")
    name: str | None = Field(default=None, description="Display name")
    tags: list[str] | None = Field(default=None, description="Replacement tag list")
    is_pinned: bool | None = Field(default=None, description="Pin or unpin")

    @field_validator("tags")
    @classmethod
    def _tags(cls, v: list[str] | None) -> list[str] | None:
        return _clean_tags(v)


class LanguageCount(CamelModel):
    language: str = Field(description="Language tag", examples=["python"])
    count: int = Field(description="Number of snippets", examples=[12])


class SnippetStats(CamelModel):
    """Dashboard summary."""

    total: int = Field(description="Total snippets", examples=[42])
    pinned: int = Field(description="Pinned snippets", examples=[3])
    languages: int = Field(description="Distinct languages", examples=[5])
    tags: int = Field(description="Distinct tags", examples=[17])
    recent: list[SnippetResponse] = Field(default=[], description="Five most recent snippets")
    top_languages: list[LanguageCount] = Field(default=[], description="Five most used languages")
