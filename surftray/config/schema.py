"""Pydantic v2 settings schema with strict validation."""

from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator

# Field name -> the message shown to the user when that field is rejected.
FIELD_MESSAGES: dict[str, str] = {
    "latitude": "Latitude must be a number between -90 and 90",
    "longitude": "Longitude must be a number between -180 and 180",
    "interval_minutes": (
        "Update interval must be a whole number of minutes between 1 and 1440"
    ),
    "api_url": "API URL must be a valid URL",
}

# Persisted key -> attribute name.
ALIASES: dict[str, str] = {
    "latitude": "latitude",
    "longitude": "longitude",
    "interval": "interval_minutes",
    "apiUrl": "api_url",
}


class Settings(BaseModel):
    model_config = {"extra": "forbid", "populate_by_name": True, "frozen": True}

    latitude: float = Field(default=-23.5505, ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(
        default=-46.6333, ge=-180.0, le=180.0, allow_inf_nan=False
    )
    interval_minutes: int = Field(default=30, ge=1, le=1440, alias="interval")
    api_url: str = Field(default="http://localhost:8080", alias="apiUrl")

    @field_validator("api_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("empty URL")
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise ValueError(f"not an absolute http(s) URL: {value!r}")
        return value

    @property
    def interval_seconds(self) -> int:
        return self.interval_minutes * 60

    def to_persisted(self) -> dict:
        """Dump using the persisted key names (latitude, longitude, interval, apiUrl)."""
        return self.model_dump(by_alias=True)


def field_for_key(key: str) -> str | None:
    """Resolve a persisted key or attribute name to the attribute name."""
    if key in ALIASES:
        return ALIASES[key]
    if key in FIELD_MESSAGES:
        return key
    return None
