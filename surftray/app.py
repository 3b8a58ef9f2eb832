"""Application controller: wires the store, poller, tray and settings bridge.

The tray library owns the main thread. Everything else (poll timer, HTTP
fetches, settings window requests) runs on one asyncio loop in a background
thread, so handlers never overlap. Tray menu callbacks only schedule work onto
that loop.

Usage:
    python -m surftray run
    python -m surftray run --ui-port 8778 --no-browser
"""

import asyncio
import logging
import signal
import threading
import webbrowser
from concurrent.futures import TimeoutError as FutureTimeoutError

from surftray.bridge.api import SettingsBridge
from surftray.bridge.server import build_server, create_app
from surftray.bridge.window import SettingsWindow
from surftray.config.defaults import DEFAULT_UI_HOST, DEFAULT_UI_PORT
from surftray.config.store import SettingsStore
from surftray.models.state import AppState
from surftray.models.status import StatusUpdate
from surftray.poller import ForecastPoller
from surftray.tray.presenter import TrayPresenter

logger = logging.getLogger(__name__)

SHUTDOWN_TIMEOUT = 10.0


def _print_url(url: str) -> bool:
    print(f"Settings: {url}")
    return True


class SurfTrayApp:
    """Owns the AppState and every component that reads or mutates it."""

    def __init__(
        self,
        store: SettingsStore,
        ui_host: str = DEFAULT_UI_HOST,
        ui_port: int = DEFAULT_UI_PORT,
        open_browser: bool = True,
        presenter: TrayPresenter | None = None,
    ):
        self.store = store
        self.ui_host = ui_host
        self.ui_port = ui_port
        self.state = AppState()

        self.presenter = presenter or TrayPresenter(self)
        self.poller = ForecastPoller(
            store,
            self.state,
            on_status=self.presenter.render,
            on_update=self._on_update,
        )
        self.bridge = SettingsBridge(store, self.state, restart_poller=self.poller.start)
        self.window = SettingsWindow(
            self.bridge,
            self.state,
            base_url=f"http://{ui_host}:{ui_port}",
            launcher=webbrowser.open if open_browser else _print_url,
        )
        self.api = create_app(self.bridge, self.window)

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop, name="surftray-loop", daemon=True
        )
        self._server = None
        self._server_task: asyncio.Task | None = None
        self._quitting = threading.Event()

    # ── Lifecycle ───────────────────────────────────────────────

    def run(self) -> int:
        """Start polling and the settings backend, then block in the tray loop."""
        self._thread.start()
        asyncio.run_coroutine_threadsafe(self._startup(), self._loop).result()
        self._setup_signals()
        logger.info("Surf monitor started: settings at http://%s:%d", self.ui_host, self.ui_port)

        try:
            self.presenter.run()
        except KeyboardInterrupt:
            logger.info("Interrupted by keyboard")
        finally:
            self._cleanup()
        return 0

    def quit(self) -> None:
        """Cancel the poll timer, stop the settings backend, remove the icon."""
        if self._quitting.is_set():
            return
        self._quitting.set()
        logger.info("Quit requested")
        self._stop_services()
        self.presenter.stop()

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    async def _startup(self) -> None:
        self._server = build_server(self.api, self.ui_host, self.ui_port)
        self._server_task = asyncio.create_task(self._serve())
        self.poller.start()

    async def _serve(self) -> None:
        try:
            await self._server.serve()
        except SystemExit:
            # uvicorn exits on bind failure; the tray keeps working without settings
            logger.error(
                "Settings window backend could not start on %s:%d",
                self.ui_host, self.ui_port,
            )

    async def _shutdown_services(self) -> None:
        self.poller.stop()
        if self._server is not None:
            self._server.should_exit = True
        if self._server_task is not None:
            await self._server_task

    def _stop_services(self) -> None:
        if not self._loop.is_running():
            return
        future = asyncio.run_coroutine_threadsafe(self._shutdown_services(), self._loop)
        try:
            future.result(timeout=SHUTDOWN_TIMEOUT)
        except FutureTimeoutError:
            logger.warning("Services did not stop within %.0fs", SHUTDOWN_TIMEOUT)

    def _cleanup(self) -> None:
        if not self._quitting.is_set():
            self._quitting.set()
            self._stop_services()
        if self._loop.is_running():
            self._loop.call_soon_threadsafe(self._loop.stop)
        if self._thread.is_alive():
            self._thread.join(timeout=SHUTDOWN_TIMEOUT)
        logger.info(
            "Surf monitor stopped: %d polls (%d ok, %d failed)",
            self.poller.total_polls,
            self.poller.total_successes,
            self.poller.total_failures,
        )

    def _setup_signals(self) -> None:
        """Handle SIGTERM and SIGINT the same way as the Quit menu item."""
        def _stop(signum: int, frame: object) -> None:
            sig_name = signal.Signals(signum).name
            logger.info("Received %s, shutting down gracefully...", sig_name)
            threading.Thread(target=self.quit, name="surftray-quit").start()

        signal.signal(signal.SIGTERM, _stop)
        signal.signal(signal.SIGINT, _stop)

    # ── Tray callbacks (called from the tray thread) ────────────

    def on_open_settings(self) -> None:
        self._loop.call_soon_threadsafe(self.window.open)

    def on_refresh(self) -> None:
        logger.info("Manual refresh requested")
        asyncio.run_coroutine_threadsafe(self.poller.fetch_once(), self._loop)

    def on_quit(self) -> None:
        self.quit()

    # ── Poller listeners (called on the loop thread) ────────────

    def _on_update(self, update: StatusUpdate) -> None:
        self.bridge.publish_status(update)
