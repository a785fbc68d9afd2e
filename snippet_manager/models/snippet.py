from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from snippet_manager.models.base import Base, TimestampMixin, utcnow


def _new_id() -> str:
    return uuid.uuid4().hex


class Snippet(Base, TimestampMixin):
    __tablename__ = "snippets"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    language: Mapped[str] = mapped_column(String(50), nullable=False, default="text")
    tags: Mapped[list[str]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"), default=list, nullable=False
    )
    is_pinned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    share_token: Mapped[str | None] = mapped_column(String(32), nullable=True, unique=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    versions: Mapped[list[SnippetVersion]] = relationship(
        back_populates="snippet",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SnippetVersion.version_number.desc()",
    )

    __table_args__ = (Index("idx_snippets_pinned_created", "is_pinned", "created_at"),)

    def __repr__(self) -> str:
        return f"<Snippet(id={self.id}, name={self.name})>"


class SnippetVersion(Base):
    __tablename__ = "snippet_versions"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    snippet_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("snippets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    snippet: Mapped[Snippet] = relationship(back_populates="versions")

    __table_args__ = (
        UniqueConstraint("snippet_id", "version_number", name="uq_snippet_version_number"),
    )
