"""Tests for the swell API client with mocked httpx."""

import httpx
import pytest
import respx

from surftray.exceptions import FetchError
from surftray.ingest.swell_client import SwellClient


@pytest.fixture
def client() -> SwellClient:
    return SwellClient(base_url="http://surf.test")


class TestGetForecast:
    @pytest.mark.asyncio
    @respx.mock
    async def test_success(self, client: SwellClient, swell_forecast: dict):
        route = respx.get("http://surf.test/swell").mock(
            return_value=httpx.Response(200, json=swell_forecast)
        )

        result = await client.get_forecast(-23.55, -46.63)
        assert len(result["forecast"]) == 3
        assert route.call_count == 1
        params = route.calls[0].request.url.params
        assert params["lat"] == "-23.55"
        assert params["lon"] == "-46.63"

    @pytest.mark.asyncio
    @respx.mock
    async def test_trailing_slash_not_doubled(self, swell_forecast: dict):
        route = respx.get("http://surf.test/swell").mock(
            return_value=httpx.Response(200, json=swell_forecast)
        )
        await SwellClient("http://surf.test/").get_forecast(0, 0)
        assert route.calls[0].request.url.path == "/swell"

    @pytest.mark.asyncio
    @respx.mock
    async def test_user_agent_header(self, client: SwellClient, swell_forecast: dict):
        route = respx.get("http://surf.test/swell").mock(
            return_value=httpx.Response(200, json=swell_forecast)
        )
        await client.get_forecast(0, 0)
        assert "surftray" in route.calls[0].request.headers["user-agent"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_no_retry(self, client: SwellClient):
        route = respx.get("http://surf.test/swell").mock(
            return_value=httpx.Response(500)
        )
        with pytest.raises(FetchError, match="HTTP 500"):
            await client.get_forecast(0, 0)
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_not_found(self, client: SwellClient):
        respx.get("http://surf.test/swell").mock(return_value=httpx.Response(404))
        with pytest.raises(FetchError, match="HTTP 404"):
            await client.get_forecast(0, 0)

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error(self, client: SwellClient):
        respx.get("http://surf.test/swell").mock(
            side_effect=httpx.ConnectError("connection refused")
        )
        with pytest.raises(FetchError, match="failed"):
            await client.get_forecast(0, 0)

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_json(self, client: SwellClient):
        respx.get("http://surf.test/swell").mock(
            return_value=httpx.Response(200, text="<html>oops</html>")
        )
        with pytest.raises(FetchError, match="Invalid JSON"):
            await client.get_forecast(0, 0)
