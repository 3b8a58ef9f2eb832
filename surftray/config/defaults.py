"""Default settings and on-disk locations."""

from pathlib import Path

from surftray.config.schema import Settings

DEFAULT_SETTINGS = Settings()

CONFIG_DIR = Path.home() / ".config" / "surftray"
DEFAULT_SETTINGS_PATH = CONFIG_DIR / "settings.yaml"
DEFAULT_LOG_PATH = CONFIG_DIR / "surftray.log"

DEFAULT_UI_HOST = "127.0.0.1"
DEFAULT_UI_PORT = 8777
