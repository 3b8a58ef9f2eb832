"""Tracks the single settings window.

The window is a browser page served by the bridge server; it counts as open
while its event stream is connected. Opening it again focuses the existing
page instead of launching a second one.
"""

import logging
import secrets
import webbrowser
from collections.abc import Callable

from surftray.bridge.api import SettingsBridge
from surftray.models.state import AppState

logger = logging.getLogger(__name__)


class SettingsWindow:
    def __init__(
        self,
        bridge: SettingsBridge,
        app_state: AppState,
        base_url: str,
        token: str | None = None,
        launcher: Callable[[str], object] = webbrowser.open,
    ):
        self.bridge = bridge
        self.app_state = app_state
        self.base_url = base_url.rstrip("/")
        self.token = token or secrets.token_urlsafe(24)
        self._launcher = launcher
        self._session: str | None = None

    @property
    def url(self) -> str:
        return f"{self.base_url}/?token={self.token}"

    @property
    def is_open(self) -> bool:
        return self.app_state.settings_window_open

    def open(self) -> None:
        """Open the settings page, or focus it if it is already open."""
        if self.is_open:
            logger.debug("Settings window already open, focusing it")
            self.bridge.request_focus()
            return
        logger.info("Opening settings window at %s", self.base_url)
        if not self._launcher(self.url):
            logger.warning("Could not launch a browser; open %s manually", self.url)

    def attach(self) -> str | None:
        """Mark the window open and return its session id.

        Returns None if another window is already attached. Only the holder
        of the session id may save settings.
        """
        if self.app_state.settings_window_open:
            return None
        self.app_state.settings_window_open = True
        self._session = secrets.token_urlsafe(12)
        logger.debug("Settings window attached")
        return self._session

    def owns(self, session: str | None) -> bool:
        """True if ``session`` belongs to the currently attached window."""
        if not self.is_open or not session or self._session is None:
            return False
        return secrets.compare_digest(session, self._session)

    def detach(self) -> None:
        # Closing the window never stops the process.
        self.app_state.settings_window_open = False
        self._session = None
        logger.debug("Settings window detached")
