"""Swell forecast data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ForecastEntry:
    surf_level: str
    wave_height: float | None
    peak_wave_period: float | None
    time: str  # as sent by the server, usually ISO 8601


@dataclass(frozen=True)
class SwellForecast:
    entries: list[ForecastEntry]
    fetched_at: str

    @property
    def current(self) -> ForecastEntry | None:
        """The entry the tray displays; the rest are ignored."""
        return self.entries[0] if self.entries else None
