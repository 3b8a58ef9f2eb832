"""Tests for the settings store: read merging, validated writes, get/set."""

from pathlib import Path

import pytest
import yaml

from surftray.config.defaults import DEFAULT_SETTINGS
from surftray.config.store import (
    SettingsStore,
    get_setting_value,
    set_setting_value,
    validate_settings,
)
from surftray.exceptions import SettingsValidationError

LAT_MSG = "Latitude must be a number between -90 and 90"
LON_MSG = "Longitude must be a number between -180 and 180"
INTERVAL_MSG = "Update interval must be a whole number of minutes between 1 and 1440"
URL_MSG = "API URL must be a valid URL"


class TestRead:
    def test_missing_file_uses_defaults(self, tmp_path: Path):
        store = SettingsStore(tmp_path / "nope.yaml")
        assert store.read() == DEFAULT_SETTINGS

    def test_reads_persisted(self, store: SettingsStore):
        s = store.read()
        assert s.latitude == -23.55
        assert s.longitude == -46.63
        assert s.interval_minutes == 30
        assert s.api_url == "http://x"

    def test_partial_file_merged_with_defaults(self, tmp_path: Path):
        path = tmp_path / "partial.yaml"
        path.write_text("interval: 5\n")
        s = SettingsStore(path).read()
        assert s.interval_minutes == 5
        assert s.latitude == DEFAULT_SETTINGS.latitude
        assert s.api_url == DEFAULT_SETTINGS.api_url

    def test_empty_file_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert SettingsStore(path).read() == DEFAULT_SETTINGS

    def test_corrupt_yaml_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("latitude: [unclosed\n")
        assert SettingsStore(path).read() == DEFAULT_SETTINGS

    def test_non_mapping_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        assert SettingsStore(path).read() == DEFAULT_SETTINGS

    def test_invalid_persisted_field_falls_back(self, tmp_path: Path):
        path = tmp_path / "s.yaml"
        path.write_text("latitude: 500\nlongitude: 10\n")
        s = SettingsStore(path).read()
        assert s.latitude == DEFAULT_SETTINGS.latitude
        assert s.longitude == 10

    def test_unknown_keys_ignored(self, tmp_path: Path):
        path = tmp_path / "s.yaml"
        path.write_text("units: metric\ninterval: 60\n")
        assert SettingsStore(path).read().interval_minutes == 60

    def test_fixtures_settings(self, fixtures_dir: Path):
        s = SettingsStore(fixtures_dir / "settings_default.yaml").read()
        assert s.interval_minutes == 15


class TestWrite:
    def test_write_persists(self, tmp_path: Path):
        path = tmp_path / "sub" / "settings.yaml"
        store = SettingsStore(path)
        store.write(
            {"latitude": 10, "longitude": 20, "interval": 15, "apiUrl": "http://surf:9000"}
        )
        with open(path) as f:
            raw = yaml.safe_load(f)
        assert raw == {
            "latitude": 10.0,
            "longitude": 20.0,
            "interval": 15,
            "apiUrl": "http://surf:9000",
        }
        assert store.read().interval_minutes == 15

    def test_write_accepts_attribute_names(self, tmp_path: Path):
        store = SettingsStore(tmp_path / "s.yaml")
        s = store.write(
            {"latitude": 1, "longitude": 2, "interval_minutes": 3, "api_url": "http://x"}
        )
        assert s.interval_minutes == 3

    def test_latitude_out_of_range_rejected(self, store: SettingsStore, settings_path: Path):
        before = settings_path.read_text()
        with pytest.raises(SettingsValidationError) as exc_info:
            store.write(
                {"latitude": 91, "longitude": 20, "interval": 30, "apiUrl": "http://x"}
            )
        assert exc_info.value.errors == [LAT_MSG]
        assert settings_path.read_text() == before
        assert store.read().latitude == -23.55

    def test_only_url_message_when_only_url_invalid(self, store: SettingsStore):
        with pytest.raises(SettingsValidationError) as exc_info:
            store.write(
                {"latitude": 10, "longitude": 20, "interval": 30, "apiUrl": "not a url"}
            )
        assert exc_info.value.errors == [URL_MSG]

    def test_all_violations_collected(self, store: SettingsStore):
        with pytest.raises(SettingsValidationError) as exc_info:
            store.write(
                {"latitude": "abc", "longitude": -181, "interval": 0, "apiUrl": ""}
            )
        assert exc_info.value.errors == [LAT_MSG, LON_MSG, INTERVAL_MSG, URL_MSG]

    def test_nan_rejected(self, store: SettingsStore):
        with pytest.raises(SettingsValidationError) as exc_info:
            store.write(
                {"latitude": float("nan"), "longitude": 0, "interval": 30, "apiUrl": "http://x"}
            )
        assert exc_info.value.errors == [LAT_MSG]

    def test_missing_field_is_a_violation(self, store: SettingsStore):
        with pytest.raises(SettingsValidationError) as exc_info:
            store.write({"latitude": 0, "longitude": 0, "apiUrl": "http://x"})
        assert exc_info.value.errors == [INTERVAL_MSG]

    def test_fractional_interval_rejected(self, store: SettingsStore):
        with pytest.raises(SettingsValidationError) as exc_info:
            store.write({"latitude": 0, "longitude": 0, "interval": 2.5, "apiUrl": "http://x"})
        assert exc_info.value.errors == [INTERVAL_MSG]

    def test_unknown_key_reported(self, store: SettingsStore):
        with pytest.raises(SettingsValidationError) as exc_info:
            store.write(
                {"latitude": 0, "longitude": 0, "interval": 5, "apiUrl": "http://x", "units": "m"}
            )
        assert exc_info.value.errors == ["Unknown setting: units"]

    def test_write_does_not_create_file_on_failure(self, tmp_path: Path):
        path = tmp_path / "fresh.yaml"
        store = SettingsStore(path)
        with pytest.raises(SettingsValidationError):
            store.write({"latitude": 100, "longitude": 0, "interval": 5, "apiUrl": "http://x"})
        assert not path.exists()
        assert list(tmp_path.iterdir()) == []

    def test_non_mapping_candidate(self):
        with pytest.raises(SettingsValidationError) as exc_info:
            validate_settings(["not", "a", "dict"])
        assert len(exc_info.value.errors) == 4


class TestGetSetValue:
    def test_get_by_alias_and_name(self, store: SettingsStore):
        s = store.read()
        assert get_setting_value(s, "apiUrl") == "http://x"
        assert get_setting_value(s, "interval_minutes") == 30

    def test_get_invalid_key(self, store: SettingsStore):
        with pytest.raises(KeyError):
            get_setting_value(store.read(), "nonexistent")

    def test_set_string_coercion(self, store: SettingsStore):
        s = set_setting_value(store, "interval", "45")
        assert s.interval_minutes == 45
        assert store.read().interval_minutes == 45

    def test_set_float(self, store: SettingsStore):
        s = set_setting_value(store, "latitude", "12.5")
        assert s.latitude == 12.5

    def test_set_invalid_value_raises(self, store: SettingsStore):
        with pytest.raises(SettingsValidationError):
            set_setting_value(store, "longitude", "-500")
        assert store.read().longitude == -46.63

    def test_set_unknown_key(self, store: SettingsStore):
        with pytest.raises(KeyError):
            set_setting_value(store, "units", "metric")
