"""
Unit tests for provider HTTP clients.

Tests cover:
- Successful responses and payload parsing
- Retry logic on 5xx and 429 errors
- No retry on other 4xx errors
- Contract violations
- Async context manager
"""
from urllib.parse import parse_qs

import pytest
import httpx
import respx
from unittest.mock import AsyncMock

from geocarbon.config import Settings, settings
from geocarbon.domain.exceptions import ComputationError, ProviderError
from geocarbon.domain.models import ForestType
from geocarbon.infrastructure.api_constants import OverpassQueries
from geocarbon.infrastructure.forest_data_client import ForestDataClient
from geocarbon.infrastructure.overpass_client import OverpassClient

FOREST_URL = f"{settings.forest_api_base_url}/forest/analyze"

FOREST_PAYLOAD = {
    "forestCoveragePercent": 72.5,
    "biomassPerHectare": 110.0,
    "forestType": "amazonia",
    "recentLossDetected": True,
    "changePercent": 3.2,
    "confidence": 85,
    "dataSource": "Hansen Global Forest Change",
}

BBOX = (-63.19, -17.79, -63.17, -17.77)


# ============================================================
# Client Lifecycle Tests
# ============================================================

class TestClientLifecycle:
    """Tests for client initialization and cleanup."""

    def test_forest_client_initialization(self):
        client = ForestDataClient()

        assert client.base_url == settings.forest_api_base_url
        assert client.client is not None

    def test_api_key_sent_as_bearer_token(self):
        client = ForestDataClient(Settings(forest_api_key="secret"))

        assert client.client.headers["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_context_manager_exit_closes_client(self):
        """__aexit__ should close the HTTP client."""
        client = OverpassClient()
        client.close = AsyncMock()

        async with client as ctx_client:
            assert ctx_client is client

        client.close.assert_called_once()


# ============================================================
# Forest Provider Tests
# ============================================================

class TestForestDataClient:
    """Tests for the satellite forest provider adapter."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_analyze_forest_success(self, project_polygon):
        route = respx.post(FOREST_URL).mock(
            return_value=httpx.Response(200, json=FOREST_PAYLOAD)
        )
        client = ForestDataClient()

        result = await client.analyze_forest(project_polygon)

        assert result.forest_coverage_percent == 72.5
        assert result.biomass_per_hectare == 110.0
        assert result.forest_type == ForestType.AMAZONIA
        assert result.recent_loss_detected is True
        assert route.calls.last.request.method == "POST"
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_wrapped_payload_unwrapped(self, project_polygon):
        respx.post(FOREST_URL).mock(
            return_value=httpx.Response(200, json={"success": True, "data": FOREST_PAYLOAD})
        )
        client = ForestDataClient()

        result = await client.analyze_forest(project_polygon)

        assert result.forest_coverage_percent == 72.5
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_unrecognised_forest_type(self, project_polygon):
        respx.post(FOREST_URL).mock(
            return_value=httpx.Response(200, json={**FOREST_PAYLOAD, "forestType": "cerrado"})
        )
        client = ForestDataClient()

        result = await client.analyze_forest(project_polygon)

        assert result.forest_type == ForestType.UNKNOWN
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_out_of_range_coverage_is_contract_breach(self, project_polygon):
        respx.post(FOREST_URL).mock(
            return_value=httpx.Response(200, json={**FOREST_PAYLOAD, "forestCoveragePercent": 140})
        )
        client = ForestDataClient()

        with pytest.raises(ComputationError):
            await client.analyze_forest(project_polygon)
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_4xx_error_no_retry(self, project_polygon):
        """4xx errors should not trigger retry."""
        route = respx.post(FOREST_URL).mock(
            return_value=httpx.Response(401, text="Unauthorized")
        )
        client = ForestDataClient()

        with pytest.raises(ProviderError) as exc_info:
            await client.analyze_forest(project_polygon)

        assert exc_info.value.status_code == 401
        assert exc_info.value.provider == "forest"
        assert route.call_count == 1
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_5xx_error_triggers_retry(self, project_polygon):
        """5xx errors should trigger retry."""
        route = respx.post(FOREST_URL)
        route.side_effect = [
            httpx.Response(500, text="Internal Server Error"),
            httpx.Response(200, json=FOREST_PAYLOAD),
        ]
        client = ForestDataClient()

        result = await client.analyze_forest(project_polygon)

        assert result.forest_coverage_percent == 72.5
        assert route.call_count == 2
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_retries_exhausted(self, project_polygon):
        route = respx.post(FOREST_URL).mock(
            return_value=httpx.Response(503, text="Service Unavailable")
        )
        client = ForestDataClient()

        with pytest.raises(ProviderError) as exc_info:
            await client.analyze_forest(project_polygon)

        assert exc_info.value.status_code == 503
        assert route.call_count == settings.max_retry_attempts
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_error(self, project_polygon):
        respx.post(FOREST_URL).mock(side_effect=httpx.ConnectError("connection refused"))
        client = ForestDataClient()

        with pytest.raises(ProviderError):
            await client.analyze_forest(project_polygon)
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_json_body(self, project_polygon):
        respx.post(FOREST_URL).mock(return_value=httpx.Response(200, text="<html>oops</html>"))
        client = ForestDataClient()

        with pytest.raises(ProviderError):
            await client.analyze_forest(project_polygon)
        await client.close()


# ============================================================
# Overpass Tests
# ============================================================

class TestOverpassClient:
    """Tests for the Overpass adapter."""

    def test_query_uses_south_west_north_east_bbox(self):
        query = OverpassQueries.build(OverpassQueries.BUILDINGS, BBOX, 25)

        assert query.startswith("[out:json][timeout:25][bbox:-17.79,-63.19,-17.77,-63.17];")
        assert query.endswith("out geom;")

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_waterways(self):
        route = respx.post(settings.overpass_api_url).mock(
            return_value=httpx.Response(200, json={
                "version": 0.6,
                "elements": [
                    {
                        "type": "way",
                        "id": 42,
                        "tags": {"waterway": "river", "name": "Río Grande"},
                        "geometry": [{"lat": -17.78, "lon": -63.18}, None, {"lat": -17.77, "lon": -63.17}],
                    }
                ],
            })
        )
        client = OverpassClient()

        elements = await client.fetch_waterways(BBOX)

        assert len(elements) == 1
        assert elements[0].points == [(-63.18, -17.78), (-63.17, -17.77)]
        form = parse_qs(route.calls.last.request.content.decode())
        assert 'waterway' in form["data"][0]
        assert "[bbox:-17.79,-63.19,-17.77,-63.17]" in form["data"][0]
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_rate_limit_is_retried(self):
        route = respx.post(settings.overpass_api_url)
        route.side_effect = [
            httpx.Response(429, text="Too Many Requests"),
            httpx.Response(200, json={"elements": []}),
        ]
        client = OverpassClient()

        elements = await client.fetch_buildings(BBOX)

        assert elements == []
        assert route.call_count == 2
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_elements_are_contract_breach(self):
        respx.post(settings.overpass_api_url).mock(
            return_value=httpx.Response(200, json={"elements": [{"type": "way"}]})
        )
        client = OverpassClient()

        with pytest.raises(ComputationError):
            await client.fetch_communities(BBOX)
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_json_body(self):
        respx.post(settings.overpass_api_url).mock(
            return_value=httpx.Response(200, text="runtime error: Query timed out")
        )
        client = OverpassClient()

        with pytest.raises(ProviderError):
            await client.fetch_vegetation(BBOX)
        await client.close()
