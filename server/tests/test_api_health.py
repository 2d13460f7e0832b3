"""API health and observability tests without the database override."""

import pytest
from httpx import ASGITransport, AsyncClient

from travel_booking.main import create_app


@pytest.mark.asyncio
async def test_api_health_endpoints():
    """Test the probes against the configured database."""
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

        response = await client.get("/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

        response = await client.get("/info")
        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "travel-booking-api"
        assert data["endpoints"]["metrics"] == "/metrics"


@pytest.mark.asyncio
async def test_metrics_endpoint():
    """Business counters are exposed in Prometheus text format."""
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        await client.post("/v1/health/ping", json={})
        response = await client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "booking_status_transitions" in response.text
    assert "payments_processed" in response.text
    assert "http_requests" in response.text


@pytest.mark.asyncio
async def test_openapi_docs():
    """Test that OpenAPI docs are available in development."""
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/docs")
        assert response.status_code == 200

        response = await client.get("/openapi.json")
        paths = response.json()["paths"]
        assert "/v1/booking/update-status" in paths
        assert "/v1/payment/process" in paths


@pytest.mark.asyncio
async def test_unauthenticated_request_gets_problem_details():
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/v1/booking/list", json={})

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.json()["title"] == "Authentication Required"
