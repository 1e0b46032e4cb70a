"""Tests for health, readiness and info routes."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException
from httpx import AsyncClient

from core.database import PoolStatus
from routes.health_routes import SERVICE_DESCRIPTION, health, ready

SERVICE_NAME = "business-services-api"


@pytest.mark.unit
class TestHealthEndpoint:
    """Tests for GET /health."""

    async def test_health_returns_200_healthy(self):
        """Health endpoint returns status=healthy."""
        result = await health()
        assert result.status == "healthy"
        assert result.service == SERVICE_NAME


@pytest.mark.unit
class TestReadyEndpoint:
    """Tests for GET /ready."""

    async def test_ready_returns_200_when_healthy(self):
        """Ready returns 200 when init_done=True and DB is reachable."""
        request = MagicMock()
        request.app.state.init_error = None
        request.app.state.init_done = True

        with patch(
            "routes.health_routes.check_db_connection",
            autospec=True,
        ) as mock_check:
            result = await ready(request)

        assert result.status == "ready"
        assert result.service == SERVICE_NAME
        mock_check.assert_awaited_once_with(request.app.state.engine)

    async def test_ready_returns_503_when_init_error(self):
        """Ready returns 503 when init_error is set."""
        request = MagicMock()
        request.app.state.init_error = "migration failed"
        request.app.state.init_done = False

        with pytest.raises(HTTPException) as exc_info:
            await ready(request)

        assert exc_info.value.status_code == 503
        assert exc_info.value.detail == "Initialization failed: migration failed"

    async def test_ready_returns_503_when_init_not_done(self):
        """Ready returns 503 while startup is still running."""
        request = MagicMock()
        request.app.state.init_error = None
        request.app.state.init_done = False

        with pytest.raises(HTTPException) as exc_info:
            await ready(request)

        assert exc_info.value.status_code == 503
        assert exc_info.value.detail == "Starting"

    async def test_ready_returns_503_when_db_check_fails(self):
        """Ready returns 503 when database connection check fails."""
        request = MagicMock()
        request.app.state.init_error = None
        request.app.state.init_done = True

        with patch(
            "routes.health_routes.check_db_connection",
            autospec=True,
            side_effect=ConnectionError("connection refused"),
        ):
            with pytest.raises(HTTPException) as exc_info:
                await ready(request)

        assert exc_info.value.status_code == 503
        assert exc_info.value.detail == "Database unavailable"


@pytest.mark.integration
class TestHealthOverHttp:
    """The same endpoints through the full middleware stack."""

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": SERVICE_NAME}
        assert response.headers["x-content-type-options"] == "nosniff"
        assert "x-request-id" in response.headers

    async def test_ready(self, client: AsyncClient):
        response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    async def test_ready_while_starting(self, app, client: AsyncClient):
        app.state.init_done = False

        response = await client.get("/ready")

        assert response.status_code == 503
        assert response.json() == {"detail": "Starting"}

    async def test_detailed_health_without_pool(self, client: AsyncClient):
        response = await client.get("/health/detailed")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] is True
        assert body["pool"] is None

    async def test_detailed_health_reports_pool(self, client: AsyncClient):
        pool = PoolStatus(pool_size=5, checked_out=1, overflow=0, checked_in=4)

        with patch("routes.health_routes.comprehensive_health_check") as mock_check:
            mock_check.return_value = {"database": False, "pool": pool}
            response = await client.get("/health/detailed")

        body = response.json()
        assert body["status"] == "unhealthy"
        assert body["pool"] == {
            "pool_size": 5,
            "checked_out": 1,
            "overflow": 0,
            "checked_in": 4,
        }

    async def test_info(self, client: AsyncClient):
        response = await client.get("/info")

        assert response.json() == {
            "service": SERVICE_NAME,
            "description": SERVICE_DESCRIPTION,
            "version": "1.0.0",
        }
