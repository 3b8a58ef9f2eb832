"""YAML-backed settings store with validated writes and runtime get/set."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from surftray.config.defaults import DEFAULT_SETTINGS, DEFAULT_SETTINGS_PATH
from surftray.config.schema import FIELD_MESSAGES, Settings, field_for_key
from surftray.exceptions import SettingsValidationError

logger = logging.getLogger(__name__)


def validation_messages(exc: ValidationError) -> list[str]:
    """Turn a pydantic ValidationError into one message per rejected field.

    Messages come out in field declaration order, each at most once.
    """
    rejected: set[str] = set()
    unknown: list[str] = []
    for err in exc.errors():
        key = str(err["loc"][0]) if err["loc"] else ""
        field = field_for_key(key)
        if field is None:
            unknown.append(f"Unknown setting: {key}")
        else:
            rejected.add(field)
    messages = [msg for field, msg in FIELD_MESSAGES.items() if field in rejected]
    return messages + unknown


def validate_settings(candidate: Mapping[str, Any]) -> Settings:
    """Validate a full candidate. Raises SettingsValidationError listing every violation."""
    if not isinstance(candidate, Mapping):
        raise SettingsValidationError(list(FIELD_MESSAGES.values()))

    data = dict(candidate)
    # A missing field is a violation of that field's rule, not a silent default.
    present = {field_for_key(k) for k in data}
    for field in FIELD_MESSAGES:
        if field not in present:
            data.setdefault(field, None)

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise SettingsValidationError(validation_messages(e)) from e


class SettingsStore:
    """Persists the four user settings as YAML.

    ``read()`` never fails: missing or unreadable values fall back to defaults.
    ``write()`` validates everything first and only then replaces the file.
    """

    def __init__(self, path: str | Path = DEFAULT_SETTINGS_PATH):
        self.path = Path(path)

    def read(self) -> Settings:
        merged = DEFAULT_SETTINGS.to_persisted()
        for key, value in self._load_raw().items():
            field = field_for_key(key)
            if field is None:
                logger.warning("Ignoring unknown setting %r in %s", key, self.path)
                continue
            name = Settings.model_fields[field].alias or field
            trial = {**merged, name: value}
            try:
                Settings.model_validate(trial)
            except ValidationError:
                logger.warning(
                    "Persisted %s=%r is invalid, using %r",
                    name, value, merged[name],
                )
                continue
            merged = trial
        return Settings.model_validate(merged)

    def write(self, candidate: Mapping[str, Any]) -> Settings:
        """Validate and persist. Raises SettingsValidationError, leaving the file untouched."""
        settings = validate_settings(candidate)
        self._dump(settings)
        logger.info(
            "Settings saved: lat=%s lon=%s interval=%dm api=%s",
            settings.latitude, settings.longitude,
            settings.interval_minutes, settings.api_url,
        )
        return settings

    def _load_raw(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path) as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Could not read settings from %s: %s", self.path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Settings file %s is not a mapping, ignoring it", self.path)
            return {}
        return raw

    def _dump(self, settings: Settings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(
            dir=self.path.parent, prefix=".settings-", suffix=".yaml"
        )
        try:
            with os.fdopen(fd, "w") as f:
                yaml.safe_dump(
                    settings.to_persisted(), f,
                    default_flow_style=False, sort_keys=False,
                )
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


def get_setting_value(settings: Settings, key: str) -> Any:
    """Get a setting by persisted key or attribute name. E.g. 'apiUrl'."""
    field = field_for_key(key)
    if field is None:
        raise KeyError(f"Setting not found: {key}")
    return getattr(settings, field)


def set_setting_value(store: SettingsStore, key: str, value: Any) -> Settings:
    """Set one setting on top of the current ones and persist through validation."""
    field = field_for_key(key)
    if field is None:
        raise KeyError(f"Setting not found: {key}")
    data = store.read().model_dump()
    # Attempt type coercion for common cases
    old_value = data[field]
    if isinstance(value, str):
        if isinstance(old_value, int):
            try:
                value = int(value)
            except ValueError:
                pass
        elif isinstance(old_value, float):
            try:
                value = float(value)
            except ValueError:
                pass
    data[field] = value
    return store.write(data)
