"""System tray icon for the surf monitor.

Shows one colored icon whose tooltip reads ``Surf Conditions: {label}`` and a
fixed menu: status header, Settings, Refresh Now, Quit. When the icon can't
be drawn, the emoji glyph for the color is put in the tooltip and header
instead, and the menu keeps working.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from surftray.display.icons import placeholder_icon, render_icon
from surftray.display.mapper import emoji_for_color, label_for_color, tooltip_for_color
from surftray.exceptions import RenderError
from surftray.models.common import Color

logger = logging.getLogger(__name__)

APP_NAME = "SurfMonitor"
HEADER_LABEL = "Current Status"


class TrayCallbacks(Protocol):
    """Expected callback interface for the tray icon owner."""

    def on_open_settings(self) -> None:
        """Open the settings window, or focus it if already open."""
        ...

    def on_refresh(self) -> None:
        """Trigger an immediate forecast poll."""
        ...

    def on_quit(self) -> None:
        """Stop polling and quit the application."""
        ...


@dataclass(frozen=True)
class MenuEntry:
    text: str | Callable[[], str]
    action: Callable[[], None] | None = None
    enabled: bool = True
    separator: bool = False


SEPARATOR = MenuEntry(text="", separator=True)


def _default_icon_factory(name: str, image: Any, title: str, menu: Any) -> Any:
    import pystray

    return pystray.Icon(name, icon=image, title=title, menu=menu)


def _menu_text(text: str | Callable[[], str]) -> Any:
    if callable(text):
        # pystray calls dynamic text with the menu item.
        return lambda item: text()
    return text


def _menu_action(action: Callable[[], None] | None) -> Callable[[], None] | None:
    # pystray picks the call signature from the argument count, so no defaults.
    if action is None:
        return None
    return lambda: action()


def _default_menu_factory(entries: list[MenuEntry]) -> Any:
    import pystray

    items = []
    for entry in entries:
        if entry.separator:
            items.append(pystray.Menu.SEPARATOR)
            continue
        items.append(
            pystray.MenuItem(
                _menu_text(entry.text),
                _menu_action(entry.action),
                enabled=entry.enabled,
            )
        )
    return pystray.Menu(*items)


class TrayPresenter:
    """Owns the tray icon. ``run()`` blocks the calling (main) thread."""

    def __init__(
        self,
        callbacks: TrayCallbacks,
        icon_factory: Callable[[str, Any, str, Any], Any] = _default_icon_factory,
        menu_factory: Callable[[list[MenuEntry]], Any] = _default_menu_factory,
    ):
        self._callbacks = callbacks
        self._icon_factory = icon_factory
        self._menu_factory = menu_factory
        self._icon: Any | None = None
        self._color = Color.GRAY
        self._text_fallback = False

    @property
    def color(self) -> Color:
        return self._color

    @property
    def text_fallback(self) -> bool:
        """True while the icon is shown as an emoji glyph instead of an image."""
        return self._text_fallback

    def header_text(self) -> str:
        if self._text_fallback:
            return f"{emoji_for_color(self._color)} {label_for_color(self._color)}"
        return f"{HEADER_LABEL}: {label_for_color(self._color)}"

    def tooltip_text(self) -> str:
        text = tooltip_for_color(self._color)
        if self._text_fallback:
            return f"{emoji_for_color(self._color)} {text}"
        return text

    def menu_entries(self) -> list[MenuEntry]:
        return [
            MenuEntry(lambda: self.header_text(), enabled=False),
            SEPARATOR,
            MenuEntry("Settings", self._callbacks.on_open_settings),
            MenuEntry("Refresh Now", self._callbacks.on_refresh),
            SEPARATOR,
            MenuEntry("Quit", self._callbacks.on_quit),
        ]

    @property
    def icon(self) -> Any | None:
        """The underlying tray icon, once created."""
        return self._icon

    def create(self) -> None:
        """Build the icon and menu. Needs a desktop session."""
        image = self._draw(self._color)
        if image is None:
            # The tray can only be shown with some image.
            image = placeholder_icon(self._color)
        self._icon = self._icon_factory(
            APP_NAME, image, self.tooltip_text(), self._menu_factory(self.menu_entries())
        )

    def run(self, setup: Callable[[Any], None] | None = None) -> None:
        if self._icon is None:
            self.create()
        logger.info("Tray icon running")
        self._icon.run(setup=setup)

    def stop(self) -> None:
        if self._icon is not None:
            self._icon.stop()
            logger.info("Tray icon removed")

    def render(self, color: Color) -> None:
        """Re-render icon, tooltip and header for a new status color."""
        self._color = color
        image = self._draw(color)
        if self._icon is None:
            return
        if image is not None:
            self._icon.icon = image
        self._icon.title = self.tooltip_text()
        update_menu = getattr(self._icon, "update_menu", None)
        if update_menu is not None:
            update_menu()

    def _draw(self, color: Color) -> Any | None:
        try:
            image = render_icon(color)
        except RenderError as e:
            logger.error("Icon render failed, falling back to text: %s", e)
            self._text_fallback = True
            return None
        self._text_fallback = False
        return image
