"""Forecast poller: fetches the swell forecast on a fixed interval.

Two states: IDLE (no timer) and ACTIVE (one timer armed on the event loop).
``start()`` and ``stop()`` are the only transitions, and ``start()`` always
cancels the previous timer before arming a new one, so two timers never
coexist. Every failure is caught at the fetch boundary and turned into a gray
status; nothing propagates into the event loop.
"""

import asyncio
import logging
from collections.abc import Callable
from enum import StrEnum

from surftray.config.store import SettingsStore
from surftray.display.mapper import color_for_level, label_for_color
from surftray.exceptions import FetchError
from surftray.ingest.forecast_parser import parse_forecast
from surftray.ingest.swell_client import SwellClient
from surftray.models.common import Color, utc_now_iso
from surftray.models.state import AppState
from surftray.models.status import StatusUpdate

logger = logging.getLogger(__name__)


class PollerState(StrEnum):
    IDLE = "idle"
    ACTIVE = "active"


class ForecastPoller:
    """Polls ``{apiUrl}/swell`` and pushes the result to its listeners.

    ``on_status`` is called with the new color after every completed poll
    (success or failure); ``on_update`` only after a successful poll that
    returned at least one forecast entry.
    """

    def __init__(
        self,
        store: SettingsStore,
        app_state: AppState,
        on_status: Callable[[Color], None] | None = None,
        on_update: Callable[[StatusUpdate], None] | None = None,
        client_factory: Callable[[str], SwellClient] = SwellClient,
    ):
        self.store = store
        self.app_state = app_state
        self.on_status = on_status
        self.on_update = on_update
        self._client_factory = client_factory

        self._loop: asyncio.AbstractEventLoop | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._interval: int | None = None
        self._tasks: set[asyncio.Task] = set()

        self.total_polls = 0
        self.total_successes = 0
        self.total_failures = 0
        self.consecutive_failures = 0
        self.last_error: str | None = None
        self.last_polled_at: str | None = None

    # ── State machine ──────────────────────────────────────────────

    @property
    def state(self) -> PollerState:
        return PollerState.ACTIVE if self._timer is not None else PollerState.IDLE

    @property
    def interval_seconds(self) -> int | None:
        return self._interval

    def start(self) -> None:
        """Enter ACTIVE with the current settings: fetch now, then every interval.

        Must be called from the event loop thread.
        """
        loop = asyncio.get_running_loop()
        settings = self.store.read()

        was_active = self._timer is not None
        self._cancel_timer()
        self._loop = loop
        self._interval = settings.interval_seconds

        self._spawn_fetch()
        self._schedule_next()

        logger.info(
            "Poller %s: every %dm, lat=%s lon=%s api=%s",
            "restarted" if was_active else "started",
            settings.interval_minutes, settings.latitude,
            settings.longitude, settings.api_url,
        )

    def stop(self) -> None:
        """Cancel the timer and go IDLE. In-flight fetches are left to finish."""
        if self._timer is None:
            return
        self._cancel_timer()
        self._interval = None
        logger.info(
            "Poller stopped: %d polls (%d ok, %d failed)",
            self.total_polls, self.total_successes, self.total_failures,
        )

    def next_poll_in(self) -> float | None:
        """Seconds until the next scheduled tick, or None when IDLE."""
        if self._timer is None or self._loop is None:
            return None
        return max(0.0, self._timer.when() - self._loop.time())

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule_next(self) -> None:
        if self._loop is None or self._interval is None:
            raise RuntimeError("Poller is not started")
        self._timer = self._loop.call_later(self._interval, self._on_tick)

    def _on_tick(self) -> None:
        # Fixed rate: the next tick does not wait for this fetch to finish.
        self._schedule_next()
        self._spawn_fetch()

    def _spawn_fetch(self) -> asyncio.Task:
        if self._loop is None:
            raise RuntimeError("Poller is not started")
        task = self._loop.create_task(self.fetch_once())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # ── Fetching ───────────────────────────────────────────────────

    async def fetch_once(self) -> StatusUpdate | None:
        """Run one poll. Returns the update, or None on failure / empty forecast.

        Also used directly for "Refresh Now"; a manual fetch may race a
        scheduled one and whichever finishes last sets the status.
        """
        settings = self.store.read()
        client = self._client_factory(settings.api_url)
        self.total_polls += 1
        poll_no = self.total_polls
        self.last_polled_at = utc_now_iso()

        try:
            raw = await client.get_forecast(settings.latitude, settings.longitude)
            forecast = parse_forecast(raw)
        except FetchError as e:
            self._record_failure(str(e))
            logger.error(
                "Poll #%d failed: %s [%d ok, %d failed]",
                poll_no, e, self.total_successes, self.total_failures,
            )
            self._set_color(Color.GRAY)
            return None
        except Exception as e:
            self._record_failure(repr(e))
            logger.exception("Poll #%d crashed", poll_no)
            self._set_color(Color.GRAY)
            return None

        self.total_successes += 1
        self.consecutive_failures = 0
        self.last_error = None

        entry = forecast.current
        if entry is None:
            logger.info(
                "Poll #%d returned no forecast entries, keeping %s",
                poll_no, self.app_state.color,
            )
            return None

        color = color_for_level(entry.surf_level)
        update = StatusUpdate(
            color=color,
            label=label_for_color(color),
            level=entry.surf_level,
            wave_height=entry.wave_height,
            period=entry.peak_wave_period,
            time=entry.time,
        )
        self.app_state.last_update = update
        self._set_color(color)
        self._notify(self.on_update, update)

        logger.info(
            "Poll #%d OK: %s (%s), waves %sm @ %ss, time=%s [%d ok, %d failed]",
            poll_no, color, entry.surf_level,
            entry.wave_height, entry.peak_wave_period, entry.time,
            self.total_successes, self.total_failures,
        )
        return update

    def _record_failure(self, message: str) -> None:
        self.total_failures += 1
        self.consecutive_failures += 1
        self.last_error = message
        if self.consecutive_failures > 1:
            logger.warning(
                "%d consecutive poll failures", self.consecutive_failures
            )

    def _set_color(self, color: Color) -> None:
        self.app_state.color = color
        self._notify(self.on_status, color)

    def _notify(self, callback: Callable | None, payload: object) -> None:
        if callback is None:
            return
        try:
            callback(payload)
        except Exception:
            logger.exception("Status listener %r failed", callback)
