"""Swell forecast API client. One GET per call, no retries."""

import logging

import httpx

from surftray.exceptions import FetchError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "surftray/0.1.0"
DEFAULT_TIMEOUT = 30.0


class SwellClient:
    def __init__(
        self,
        base_url: str,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout

    def swell_url(self) -> str:
        return f"{self.base_url}/swell"

    async def get_forecast(self, lat: float, lon: float) -> dict:
        """Fetch the forecast for a point. Raises FetchError on any failure.

        Failures are terminal for this call; the poller's next tick is the retry.
        """
        url = self.swell_url()
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        params = {"lat": lat, "lon": lon}
        logger.debug("GET %s lat=%s lon=%s", url, lat, lon)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(url, params=params, headers=headers)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"HTTP {e.response.status_code} from {url}"
            ) from e
        except httpx.RequestError as e:
            raise FetchError(f"Request to {url} failed: {e!r}") from e

        try:
            return resp.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON from {url}: {e}") from e
