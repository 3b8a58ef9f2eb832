"""Surf level <-> display color <-> label mapping.

All functions are pure and total: anything unrecognized maps to gray /
"Unknown" instead of raising.
"""

from surftray.models.common import Color

_LEVEL_COLORS: dict[str, Color] = {
    "beginner": Color.GREEN,
    "intermediate": Color.YELLOW,
    "advanced": Color.RED,
}

_COLOR_LEVELS: dict[Color, str] = {c: lvl for lvl, c in _LEVEL_COLORS.items()}

_COLOR_LABELS: dict[Color, str] = {
    Color.GREEN: "Good (Beginner)",
    Color.YELLOW: "Moderate (Intermediate)",
    Color.RED: "Challenging (Advanced)",
    Color.GRAY: "Unknown",
}

_COLOR_EMOJIS: dict[Color, str] = {
    Color.GREEN: "🟢",
    Color.YELLOW: "🟡",
    Color.RED: "🔴",
    Color.GRAY: "⚪",
}

UNKNOWN_LABEL = _COLOR_LABELS[Color.GRAY]


def _as_color(color: object) -> Color | None:
    try:
        return Color(color)
    except (ValueError, TypeError):
        return None


def color_for_level(level: object) -> Color:
    if not isinstance(level, str):
        return Color.GRAY
    return _LEVEL_COLORS.get(level, Color.GRAY)


def label_for_color(color: object) -> str:
    c = _as_color(color)
    return _COLOR_LABELS[c] if c is not None else UNKNOWN_LABEL


def level_for_color(color: object) -> str | None:
    """Reverse of color_for_level. Gray has no level."""
    c = _as_color(color)
    return _COLOR_LEVELS.get(c) if c is not None else None


def emoji_for_color(color: object) -> str:
    """Glyph shown when the icon can't be drawn."""
    c = _as_color(color)
    return _COLOR_EMOJIS[c] if c is not None else _COLOR_EMOJIS[Color.GRAY]


def tooltip_for_color(color: object) -> str:
    return f"Surf Conditions: {label_for_color(color)}"
