"""Smoke tests for health and app wiring."""

from httpx import AsyncClient


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data.get("status") == "ok"
    assert data.get("version")


async def test_request_id_is_echoed(client: AsyncClient) -> None:
    """A well-formed client X-Request-ID is returned unchanged."""
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
    assert response.headers.get("x-request-id") == "req-123"


async def test_request_id_is_generated_when_invalid(client: AsyncClient) -> None:
    """A malformed X-Request-ID is replaced by a generated one."""
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "bad id with spaces"})
    request_id = response.headers.get("x-request-id")
    assert request_id
    assert request_id != "bad id with spaces"


async def test_unknown_route_is_404(client: AsyncClient) -> None:
    """Unrouted paths go through the HTTP exception handler."""
    response = await client.get("/api/v1/nope")
    assert response.status_code == 404
    assert response.json()["error"] == "HTTP_ERROR"
