from snippet_manager.models.base import Base
from snippet_manager.models.snippet import Snippet, SnippetVersion

__all__ = ["Base", "Snippet", "SnippetVersion"]
