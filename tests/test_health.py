"""Tests for the /health endpoint and app-level wiring."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import AsyncClient


def _session_factory(execute: AsyncMock) -> MagicMock:
    session = AsyncMock()
    session.execute = execute
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=session)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory


class TestHealth:
    @pytest.mark.asyncio
    async def test_healthy_when_database_answers(self, client: AsyncClient) -> None:
        factory = _session_factory(AsyncMock())
        with patch("questverify.core.database.async_session_factory", factory):
            response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["service"] == "questverify-api"
        assert body["checks"]["classifier"]["backend"] == "none"

    @pytest.mark.asyncio
    async def test_degraded_when_database_down(self, client: AsyncClient) -> None:
        factory = _session_factory(AsyncMock(side_effect=OSError("connection refused")))
        with patch("questverify.core.database.async_session_factory", factory):
            response = await client.get("/health")

        body = response.json()
        assert body["status"] == "degraded"
        assert body["checks"]["postgresql"]["status"] == "unhealthy"
        assert "connection refused" in body["checks"]["postgresql"]["error"]

    @pytest.mark.asyncio
    async def test_version_header(self, client: AsyncClient) -> None:
        response = await client.get("/v1/gamification/badges")
        assert response.headers["X-API-Version"] == "v1"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_envelope(self, client: AsyncClient) -> None:
        response = await client.get("/v1/nope")
        assert response.status_code == 404
        assert response.json()["error"] == "http_404"
