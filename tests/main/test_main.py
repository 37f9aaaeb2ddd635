from httpx import AsyncClient
from pytest import mark


@mark.asyncio
async def test_root_endpoint(client: AsyncClient) -> None:
    """Test root endpoint."""
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to the Blog Posts API"}


@mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    """Test health check endpoint."""
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == "1.0.0"
    assert data["storage"] == "local"
    cache = data["cache"]
    assert cache["backend"] == "in-memory"
    assert cache["status"] == "healthy"
    assert "hits" in cache["statistics"]


@mark.asyncio
async def test_unknown_route_uses_error_envelope(client: AsyncClient) -> None:
    response = await client.get("/v1/nowhere")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Not Found"}


@mark.asyncio
async def test_security_headers_present(client: AsyncClient) -> None:
    response = await client.get("/")
    assert response.headers.get("X-Content-Type-Options") == "nosniff"
