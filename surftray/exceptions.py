"""Exceptions raised across surftray."""


class SurfTrayError(Exception):
    """Base exception for surftray errors."""

    pass


class SettingsValidationError(SurfTrayError, ValueError):
    """One or more settings fields failed validation. Nothing was persisted."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class FetchError(SurfTrayError):
    """Network, HTTP or parse failure while polling the forecast service."""

    pass


class MalformedForecastError(FetchError):
    """The forecast response body did not have the expected shape."""

    pass


class RenderError(SurfTrayError):
    """Drawing the tray icon failed."""

    pass
