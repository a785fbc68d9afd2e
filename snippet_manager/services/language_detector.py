"""Heuristic language detection for snippet content.

Detection is advisory metadata: the result may change as the heuristics
improve, so it is never used to identify a snippet.

Order of checks:
  1. empty / whitespace-only input -> "text"
  2. shebang line
  3. weighted regex signatures per language (highest score wins)
  4. Pygments ``guess_lexer`` as a last resort
Every result goes through ``normalize_language`` and is limited to
``CANONICAL_LANGUAGES`` so display grouping only sees known tags.
"""
from __future__ import annotations

import logging
import re

from pygments.lexers import guess_lexer
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "text"

# Short or lexer-specific names -> canonical display tag
LANGUAGE_ALIASES: dict[str, str] = {
    "js": "javascript",
    "jsx": "javascript",
    "node": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "xml": "html",
    "htm": "html",
    "py": "python",
    "py3": "python",
    "python3": "python",
    "yml": "yaml",
    "md": "markdown",
    "shell": "bash",
    "sh": "bash",
    "zsh": "bash",
    "console": "bash",
    "c++": "cpp",
    "cs": "csharp",
    "c#": "csharp",
    "golang": "go",
    "rs": "rust",
    "rb": "ruby",
    "postgresql": "sql",
    "mysql": "sql",
    "plpgsql": "sql",
    "text only": "text",
    "plaintext": "text",
}

# (pattern, weight) per language; matched with MULTILINE
_SIGNATURES: dict[str, list[tuple[str, int]]] = {
    "python": [
        (r"^\s*def \w+\(.*\)\s*(->\s*[\w\[\], .]+)?:\s*$", 3),
        (r"^\s*class \w+(\(.*\))?:\s*$", 3),
        (r"^\s*(from [\w.]+ )?import [\w., ]+$", 2),
        (r"^\s*(elif|except|finally)\b.*:\s*$", 2),
        (r"\bprint\(", 1),
        (r"\bself\.", 1),
        (r"^\s*@\w+", 1),
        (r"\bNone\b|\bTrue\b|\bFalse\b", 1),
    ],
    "javascript": [
        (r"\bconst \w+\s*=", 2),
        (r"\blet \w+\s*=", 2),
        (r"\bfunction\s*\w*\s*\(", 2),
        (r"=>\s*[{(]?", 2),
        (r"\bconsole\.log\(", 3),
        (r"\brequire\(['\"]", 3),
        (r"\bmodule\.exports\b", 3),
        (r"\bdocument\.\w+", 2),
    ],
    "typescript": [
        (r"\binterface \w+\s*\{", 3),
        (r"\btype \w+\s*=", 3),
        (r"\b\w+\s*:\s*(string|number|boolean|any|void|unknown)\b", 3),
    ],
    "java": [
        (r"\bpublic (static )?(final )?(class|void|int|String)\b", 3),
        (r"\bSystem\.out\.println\(", 4),
        (r"^\s*package [\w.]+;", 3),
        (r"^\s*import java\.", 4),
        (r"\bprivate \w+ \w+;", 2),
    ],
    "html": [
        (r"<!DOCTYPE html>", 5),
        (r"</?(html|head|body|div|span|p|a|ul|li|script|style)\b[^>]*>", 2),
    ],
    "css": [
        (r"^\s*[.#]?[\w-]+(\s*[.#:>\w-]+)*\s*\{\s*$", 2),
        (r"^\s*[\w-]+\s*:\s*[^;{}]+;\s*$", 2),
        (r"@media\b", 3),
    ],
    "sql": [
        (r"\bSELECT\b.+\bFROM\b", 4),
        (r"\bINSERT INTO\b", 4),
        (r"\bCREATE TABLE\b", 4),
        (r"\bUPDATE \w+ SET\b", 4),
        (r"\bWHERE\b", 1),
    ],
    "bash": [
        (r"^\s*(sudo |apt(-get)? |brew |npm |pip |git |cd |ls |echo |export )", 2),
        (r"\$\{?\w+\}?", 1),
        (r"^\s*(if|for|while) .*; (then|do)\s*$", 3),
        (r"^\s*fi\s*$|^\s*done\s*$", 3),
    ],
    "json": [
        (r"^\s*[\[{]\s*$", 1),
        (r"^\s*\"[^\"]+\"\s*:\s*", 2),
    ],
    "yaml": [
        (r"^[\w-]+:\s*$", 2),
        (r"^\s+- [\w\"']", 1),
        (r"^---\s*$", 2),
    ],
    "go": [
        (r"^\s*package main\b", 4),
        (r"\bfunc \w*\(.*\)\s*.*\{", 3),
        (r"\bfmt\.Print", 4),
        (r":=", 1),
    ],
    "rust": [
        (r"\bfn \w+\(.*\)\s*(->\s*[\w<>&]+)?\s*\{", 3),
        (r"\blet mut \w+", 4),
        (r"\bprintln!\(", 4),
        (r"\bimpl\b", 2),
    ],
}

_MIN_SCORE = 2

# Closed set of tags detection may return; any other lexer guess is "text"
CANONICAL_LANGUAGES: frozenset[str] = frozenset(
    {DEFAULT_LANGUAGE, *_SIGNATURES, *LANGUAGE_ALIASES.values()}
)


def normalize_language(language: str | None) -> str:
    """Map an alias or lexer name to the canonical tag; empty -> "text"."""
    if not language:
        return DEFAULT_LANGUAGE
    key = language.strip().lower()
    if not key:
        return DEFAULT_LANGUAGE
    return LANGUAGE_ALIASES.get(key, key)


def _shebang_language(first_line: str) -> str | None:
    line = first_line.strip().lower()
    if not line.startswith("#!"):
        return None
    if "python" in line:
        return "python"
    if "node" in line:
        return "javascript"
    if "bash" in line or line.endswith("/sh") or " sh" in line or "zsh" in line:
        return "bash"
    return None


def _score_signatures(code: str) -> tuple[str, int] | None:
    scores: dict[str, int] = {}
    for language, patterns in _SIGNATURES.items():
        score = 0
        for pattern, weight in patterns:
            score += weight * len(re.findall(pattern, code, re.MULTILINE))
        if score:
            scores[language] = score
    if not scores:
        return None
    # TypeScript is a superset of JavaScript: its own markers decide.
    if "typescript" in scores and "javascript" in scores:
        scores["typescript"] += scores["javascript"]
    best = max(scores, key=scores.get)
    return best, scores[best]


def _guess_with_pygments(code: str) -> str:
    try:
        lexer = guess_lexer(code)
    except ClassNotFound:
        return DEFAULT_LANGUAGE
    aliases = getattr(lexer, "aliases", None) or []
    return aliases[0] if aliases else lexer.name


def detect_language(code: str | None) -> str:
    """Classify *code* into a canonical language tag, defaulting to "text"."""
    if not code or not code.strip():
        return DEFAULT_LANGUAGE

    shebang = _shebang_language(code.lstrip().splitlines()[0])
    if shebang:
        return shebang

    scored = _score_signatures(code)
    if scored and scored[1] >= _MIN_SCORE:
        return normalize_language(scored[0])

    try:
        guessed = normalize_language(_guess_with_pygments(code))
    except Exception as e:
        logger.warning("Language detection failed, using %s: %s", DEFAULT_LANGUAGE, e)
        return DEFAULT_LANGUAGE
    return guessed if guessed in CANONICAL_LANGUAGES else DEFAULT_LANGUAGE
