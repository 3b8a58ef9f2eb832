"""Settings window backend: FastAPI app exposing the SettingsBridge on localhost.

All handlers are ``async def`` so they run on the same event loop as the
poller and never overlap with a timer tick. Every route requires the
per-process token that the tray embeds in the URL it opens. Saving also
needs the session id handed to the one attached window over its event stream.
"""

import asyncio
import json
import logging
import secrets
from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path
from typing import Any

import uvicorn
from fastapi import Body, Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import FileResponse, HTMLResponse, StreamingResponse

from surftray.bridge.api import SettingsBridge
from surftray.bridge.window import SettingsWindow

logger = logging.getLogger(__name__)

SETTINGS_HTML = Path(__file__).parent / "static" / "settings.html"
KEEPALIVE_SECONDS = 15.0


def format_sse(event: str, payload: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(payload)}\n\n"


async def event_stream(
    queue: "asyncio.Queue[tuple[str, dict]]",
    is_disconnected: Callable[[], Awaitable[bool]],
    on_close: Callable[[], None],
    keepalive: float = KEEPALIVE_SECONDS,
) -> AsyncIterator[str]:
    """Yield queued pushes as Server-Sent Events until the page goes away."""
    try:
        yield ": connected\n\n"
        while True:
            try:
                event, payload = await asyncio.wait_for(queue.get(), timeout=keepalive)
            except asyncio.TimeoutError:
                if await is_disconnected():
                    break
                yield ": keepalive\n\n"
                continue
            yield format_sse(event, payload)
    finally:
        on_close()


def create_app(bridge: SettingsBridge, window: SettingsWindow) -> FastAPI:
    app = FastAPI(title="Surf Monitor Settings", version="0.1.0")

    async def require_token(
        token: str | None = Query(default=None),
        x_surftray_token: str | None = Header(default=None),
    ) -> None:
        supplied = x_surftray_token or token or ""
        if not secrets.compare_digest(supplied, window.token):
            raise HTTPException(403, "Invalid session token")

    # ── Page ────────────────────────────────────────────────────

    @app.get("/", dependencies=[Depends(require_token)])
    async def serve_settings_page():
        if SETTINGS_HTML.exists():
            return FileResponse(SETTINGS_HTML, media_type="text/html")
        return HTMLResponse("<h1>Settings page not found</h1>", status_code=404)

    # ── Requests ────────────────────────────────────────────────

    @app.get("/api/settings", dependencies=[Depends(require_token)])
    async def get_settings():
        return bridge.get_settings()

    @app.post("/api/settings", dependencies=[Depends(require_token)])
    async def save_settings(
        candidate: dict[str, Any] = Body(...),
        x_surftray_window: str | None = Header(default=None),
    ):
        if not window.owns(x_surftray_window):
            logger.info("Rejected a save from a page that is not the settings window")
            raise HTTPException(409, "This page is not the open settings window")
        return bridge.save_settings(candidate)

    @app.get("/api/status", dependencies=[Depends(require_token)])
    async def get_status():
        return bridge.get_current_status()

    # ── Push channel ────────────────────────────────────────────

    @app.get("/api/events", dependencies=[Depends(require_token)])
    async def status_events(request: Request):
        session = window.attach()
        if session is None:
            logger.info("Rejected a second settings window")
            raise HTTPException(409, "Settings window already open")

        queue: asyncio.Queue[tuple[str, dict]] = asyncio.Queue()
        queue.put_nowait(("session", {"session": session}))
        unsubscribe = bridge.subscribe(
            lambda event, payload: queue.put_nowait((event, payload))
        )

        def on_close() -> None:
            unsubscribe()
            window.detach()
            logger.info("Settings window disconnected")

        return StreamingResponse(
            event_stream(queue, request.is_disconnected, on_close),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache"},
        )

    return app


def build_server(app: FastAPI, host: str, port: int) -> uvicorn.Server:
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level="warning",
        log_config=None,
        access_log=False,
    )
    return uvicorn.Server(config)
