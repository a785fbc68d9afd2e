from datetime import datetime

from pydantic import Field

from snippet_manager.schemas.common import CamelModel


class VersionResponse(CamelModel):
    """An immutable content snapshot of a snippet."""

    id: str = Field(description="Version ID; 'current' for the live content")
    snippet_id: str = Field(description="Owning snippet ID")
    content: str = Field(description="Snapshot content")
    version_number: int = Field(description="Per-snippet version number, starting at 1", examples=[3])
    created_at: datetime | None = Field(default=None, description="Snapshot time (ISO 8601)")


class VersionCreate(CamelModel):
    content: str | None = Field(default=None, description="Content to snapshot")


class VersionComparison(CamelModel):
    """Two versions ordered by version number plus a unified diff."""

    older: VersionResponse
    newer: VersionResponse
    diff: str = Field(default="", description="Unified diff from older to newer")
