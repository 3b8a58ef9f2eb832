"""Process-wide application state, owned by the SurfTrayApp controller."""

from dataclasses import dataclass

from surftray.models.common import Color
from surftray.models.status import StatusUpdate


@dataclass
class AppState:
    color: Color = Color.GRAY
    last_update: StatusUpdate | None = None
    settings_window_open: bool = False
