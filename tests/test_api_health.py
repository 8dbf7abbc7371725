"""Tests for health check endpoints."""

from pathlib import Path
from unittest.mock import AsyncMock

from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from guessacard.db.database import get_session
from guessacard.main import app


class TestHealthEndpoint:
    async def test_health_returns_healthy(self, client: AsyncClient) -> None:
        """Liveness check returns healthy."""
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"

    async def test_health_no_db_check(self, client: AsyncClient) -> None:
        """Health endpoint does not include database status."""
        response = await client.get("/health")

        data = response.json()
        assert data.get("database") is None


class TestReadyEndpoint:
    async def test_ready_returns_ready(self, client: AsyncClient) -> None:
        """Readiness check returns ready when the snapshot store is reachable."""
        response = await client.get("/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["database"] == "connected"
        assert data["dataset"] == "available"

    async def test_ready_returns_503_without_core_dataset(
        self, client: AsyncClient, data_dir: Path
    ) -> None:
        """A local data directory without the core file is not ready."""
        (data_dir / "core.json").unlink()

        response = await client.get("/ready")

        assert response.status_code == 503
        assert response.json()["dataset"] == "missing"

    async def test_ready_returns_503_on_db_failure(self) -> None:
        """Readiness check returns 503 when DB is unavailable."""

        async def override_get_session_broken():
            mock_session = AsyncMock()
            mock_session.execute.side_effect = OperationalError(
                "SELECT 1", {}, Exception("Database connection failed")
            )
            yield mock_session

        app.dependency_overrides[get_session] = override_get_session_broken

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/ready")

        app.dependency_overrides.clear()

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "not ready"
        assert data["database"] == "disconnected"
