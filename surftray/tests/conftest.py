"""Shared test fixtures."""

import json
from pathlib import Path

import pytest
import yaml

from surftray.config.store import SettingsStore
from surftray.models.state import AppState

FIXTURE_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def settings_path(tmp_path: Path) -> Path:
    """Write a minimal valid settings YAML and return its path."""
    data = {
        "latitude": -23.55,
        "longitude": -46.63,
        "interval": 30,
        "apiUrl": "http://x",
    }
    path = tmp_path / "settings.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


@pytest.fixture
def store(settings_path: Path) -> SettingsStore:
    return SettingsStore(settings_path)


@pytest.fixture
def app_state() -> AppState:
    return AppState()


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return FIXTURE_DIR


@pytest.fixture
def swell_forecast() -> dict:
    with open(FIXTURE_DIR / "swell_forecast.json") as f:
        return json.load(f)
