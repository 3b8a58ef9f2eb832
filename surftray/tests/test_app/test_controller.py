"""Tests for the application controller wiring and lifecycle."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from surftray.app import SurfTrayApp
from surftray.models.common import Color
from surftray.models.status import StatusUpdate
from surftray.poller import PollerState


class FakeServer:
    def __init__(self):
        self.should_exit = False
        self.served = False

    async def serve(self) -> None:
        self.served = True
        while not self.should_exit:
            await asyncio.sleep(0.01)


@pytest.fixture
def presenter() -> MagicMock:
    return MagicMock()


@pytest.fixture
def app(store, presenter) -> SurfTrayApp:
    return SurfTrayApp(store, ui_port=8799, open_browser=False, presenter=presenter)


class TestWiring:
    def test_shared_state(self, app):
        assert app.poller.app_state is app.state
        assert app.bridge.app_state is app.state
        assert app.window.app_state is app.state
        assert app.state.color == Color.GRAY

    def test_status_goes_to_tray(self, app, presenter):
        app.poller.on_status(Color.RED)
        presenter.render.assert_called_once_with(Color.RED)

    def test_update_goes_to_open_window(self, app):
        received = []
        app.bridge.subscribe(lambda e, p: received.append(e))
        update = StatusUpdate(
            color=Color.GREEN, label="Good (Beginner)", level="beginner",
            wave_height=0.5, period=7.0, time="T",
        )
        app.poller.on_update(update)
        assert received == ["status"]

    def test_settings_url(self, app):
        assert app.window.url.startswith("http://127.0.0.1:8799/?token=")

    def test_quit_without_loop(self, app, presenter):
        app.quit()
        app.quit()
        presenter.stop.assert_called_once_with()


class TestLifecycle:
    def test_run_refresh_quit(self, app, presenter):
        server = FakeServer()

        def tray_loop(*args, **kwargs):
            assert app.poller.state == PollerState.ACTIVE
            app.on_refresh()
            app.on_quit()

        presenter.run.side_effect = tray_loop

        with (
            patch("surftray.app.build_server", return_value=server),
            patch.object(app, "_setup_signals"),
            patch.object(app.poller, "fetch_once", new=AsyncMock(return_value=None)) as fetch,
        ):
            assert app.run() == 0

        assert server.served
        assert server.should_exit
        assert fetch.await_count == 2
        assert app.poller.state == PollerState.IDLE
        presenter.stop.assert_called_once_with()
        assert not app._thread.is_alive()

    def test_keyboard_interrupt_stops_poller(self, app, presenter):
        server = FakeServer()
        presenter.run.side_effect = KeyboardInterrupt

        with (
            patch("surftray.app.build_server", return_value=server),
            patch.object(app, "_setup_signals"),
            patch.object(app.poller, "fetch_once", new=AsyncMock(return_value=None)),
        ):
            assert app.run() == 0

        assert server.should_exit
        assert app.poller.state == PollerState.IDLE
