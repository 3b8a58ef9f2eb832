"""Parse the /swell response into forecast entries."""

import logging
from collections.abc import Mapping

from surftray.exceptions import MalformedForecastError
from surftray.models.common import utc_now_iso
from surftray.models.forecast import ForecastEntry, SwellForecast

logger = logging.getLogger(__name__)


def parse_forecast(raw: object) -> SwellForecast:
    """Validate the response shape and build a SwellForecast.

    Expected: {"forecast": [{"surf_level", "wave_height", "peak_wave_period", "time"}, ...]}.
    Only the first entry is checked strictly, it is the only one consumed.
    """
    if not isinstance(raw, Mapping):
        raise MalformedForecastError(
            f"Expected a JSON object, got {type(raw).__name__}"
        )
    if "forecast" not in raw:
        raise MalformedForecastError("Response has no 'forecast' field")

    items = raw["forecast"]
    if items is None:
        items = []
    if not isinstance(items, list):
        raise MalformedForecastError(
            f"'forecast' should be a list, got {type(items).__name__}"
        )

    entries: list[ForecastEntry] = []
    for i, item in enumerate(items):
        try:
            entries.append(_parse_entry(item))
        except MalformedForecastError:
            if i == 0:
                raise
            logger.debug("Skipping malformed forecast entry #%d: %r", i, item)

    return SwellForecast(entries=entries, fetched_at=utc_now_iso())


def _parse_entry(item: object) -> ForecastEntry:
    if not isinstance(item, Mapping):
        raise MalformedForecastError(
            f"Forecast entry should be an object, got {type(item).__name__}"
        )
    if "surf_level" not in item:
        raise MalformedForecastError("Forecast entry has no 'surf_level'")

    level = item["surf_level"]
    return ForecastEntry(
        surf_level=level if isinstance(level, str) else str(level),
        wave_height=_optional_float(item.get("wave_height"), "wave_height"),
        peak_wave_period=_optional_float(
            item.get("peak_wave_period"), "peak_wave_period"
        ),
        time=str(item.get("time", "")),
    )


def _optional_float(value: object, name: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise MalformedForecastError(f"'{name}' should be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise MalformedForecastError(
            f"'{name}' should be a number, got {value!r}"
        ) from e
