"""Tray icon drawing with Pillow."""

from PIL import Image, ImageDraw

from surftray.exceptions import RenderError
from surftray.models.common import Color

ICON_SIZE = 64

_FILL: dict[Color, str] = {
    Color.GREEN: "#34C759",
    Color.YELLOW: "#FFCC00",
    Color.RED: "#FF3B30",
    Color.GRAY: "#8E8E93",
}


def render_icon(color: Color, size: int = ICON_SIZE) -> Image.Image:
    """Draw a filled circle in the status color on a transparent background.

    Raises RenderError if Pillow fails for any reason.
    """
    fill = _FILL.get(color, _FILL[Color.GRAY])
    try:
        image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
        draw = ImageDraw.Draw(image)
        margin = size // 8
        draw.ellipse(
            [margin, margin, size - margin, size - margin],
            fill=fill,
            outline="white",
            width=max(1, size // 32),
        )
    except Exception as e:
        raise RenderError(f"Could not draw {color} icon: {e}") from e
    return image


_PLACEHOLDER = Image.new("RGBA", (ICON_SIZE, ICON_SIZE), _FILL[Color.GRAY])


def placeholder_icon(color: Color, size: int = ICON_SIZE) -> Image.Image:
    """Plain square in the status color, shown when the circle can't be drawn.

    Never raises: if even this fails, a gray square built at import is used.
    """
    try:
        return Image.new("RGBA", (size, size), _FILL.get(color, _FILL[Color.GRAY]))
    except Exception:
        return _PLACEHOLDER
