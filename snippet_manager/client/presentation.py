"""Display helpers for UI bindings: navigation icons and date labels."""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

DEFAULT_SYMBOL = "•"


class IconName(str, Enum):
    DASHBOARD = "IconDashboard"
    CODE = "IconCode"
    PLUS = "IconPlus"
    CLOSE = "IconX"


IconRenderer = Callable[[int], str]


def _glyph(symbol: str) -> IconRenderer:
    def render(size: int = 16) -> str:
        return f'<span class="icon" style="font-size:{size}px">{symbol}</span>'

    return render


# Closed set: anything not listed renders the default bullet.
ICON_RENDERERS: dict[IconName, IconRenderer] = {
    IconName.DASHBOARD: _glyph("▦"),
    IconName.CODE: _glyph("&lt;/&gt;"),
    IconName.PLUS: _glyph("+"),
    IconName.CLOSE: _glyph("×"),
}

_default_renderer = _glyph(DEFAULT_SYMBOL)


def get_icon_renderer(name: str | None) -> IconRenderer:
    try:
        return ICON_RENDERERS[IconName(name)]
    except (ValueError, KeyError):
        return _default_renderer


def render_icon(name: str | None, size: int = 16) -> str:
    return get_icon_renderer(name)(size)


@dataclass(frozen=True)
class NavItem:
    title: str
    url: str
    icon_name: str

    def render_icon(self, size: int = 16) -> str:
        return render_icon(self.icon_name, size)


NAV_ITEMS: list[NavItem] = [
    NavItem(title="Dashboard", url="/", icon_name=IconName.DASHBOARD.value),
    NavItem(title="Snippets", url="/snippets", icon_name=IconName.CODE.value),
]


def format_snippet_date(value: datetime | str) -> str:
    """e.g. ``Mar 5, 2025``."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return f"{value:%b} {value.day}, {value.year}"


def format_relative_time(value: datetime, now: datetime | None = None) -> str:
    """Coarse "x ago" label used in version lists."""
    now = now or datetime.now(timezone.utc)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    seconds = int((now - value).total_seconds())
    if seconds < 60:
        return "less than a minute ago"
    if seconds >= 86400:
        count, unit = seconds // 86400, "day"
    elif seconds >= 3600:
        count, unit = seconds // 3600, "hour"
    else:
        count, unit = seconds // 60, "minute"
    return f"{count} {unit}{'s' if count != 1 else ''} ago"
