"""Settings UI bridge: the only surface the settings window talks to.

One method per request/response operation, plus ``subscribe()`` for the
status push channel. Transport-agnostic; ``surftray.bridge.server`` exposes
it over local HTTP.
"""

import logging
from collections.abc import Callable
from typing import Any, Mapping

from surftray.config.store import SettingsStore
from surftray.display.mapper import label_for_color
from surftray.exceptions import SettingsValidationError
from surftray.models.state import AppState
from surftray.models.status import StatusUpdate

logger = logging.getLogger(__name__)

Listener = Callable[[str, dict], None]


class SettingsBridge:
    def __init__(
        self,
        store: SettingsStore,
        app_state: AppState,
        restart_poller: Callable[[], None],
    ):
        self.store = store
        self.app_state = app_state
        self._restart_poller = restart_poller
        self._listeners: list[Listener] = []

    # ── Requests ────────────────────────────────────────────────

    def get_settings(self) -> dict:
        return self.store.read().to_persisted()

    def save_settings(self, candidate: Mapping[str, Any]) -> dict:
        """Validate + persist, then restart the poller on the new settings.

        On failure nothing is written and the poller keeps its old schedule.
        """
        try:
            self.store.write(candidate)
        except SettingsValidationError as e:
            logger.info("Rejected settings: %s", e.errors)
            return {"success": False, "error": "\n".join(e.errors), "errors": e.errors}

        self._restart_poller()
        return {"success": True}

    def get_current_status(self) -> dict:
        color = self.app_state.color
        last = self.app_state.last_update
        return {
            "color": color.value,
            "label": label_for_color(color),
            "forecast": last.to_dict() if last is not None else None,
        }

    # ── Push channel ────────────────────────────────────────────

    @property
    def has_subscribers(self) -> bool:
        return bool(self._listeners)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for (event, payload) pushes. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish_status(self, update: StatusUpdate) -> None:
        """Push a completed forecast to the open settings window, if any."""
        self._publish("status", update.to_dict())

    def request_focus(self) -> None:
        self._publish("focus", {})

    def _publish(self, event: str, payload: dict) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, payload)
            except Exception:
                logger.exception("Settings window listener failed on %s", event)
