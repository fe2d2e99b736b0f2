"""
Health endpoint tests.
"""

from blobstorageapi.core.exceptions import ConfigurationError


def test_health_endpoint(client):
    """Test that the /health endpoint returns 200 OK."""
    response = client.get("/health/")
    assert response.status_code == 200
    data = response.json()
    assert "data" in data
    assert data["data"]["status"] == "healthy"
    assert "timestamp" in data["data"]
    assert "version" in data["data"]
    assert data["data"]["service"] == "Blob Storage API"


def test_health_live_endpoint(client):
    response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "alive"


def test_health_ready_when_backends_respond(client, blob_service):
    response = client.get("/health/ready")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "ready"
    assert data["checks"] == {"azure_blob_storage": "ok", "cosmos_db": "ok"}
    assert "get_account_information" in blob_service.calls


def test_health_ready_degraded_when_blob_storage_fails(client, blob_service):
    async def broken():
        raise RuntimeError("connection refused")

    blob_service.get_account_information = broken

    response = client.get("/health/ready")
    body = response.json()
    assert response.status_code == 200
    assert body["data"]["status"] == "degraded"
    assert body["data"]["checks"]["azure_blob_storage"].startswith("error: connection refused")
    assert body["message"] == "Some services unavailable"


def test_health_ready_reports_unconfigured_backend(client, cosmos_service):
    async def unconfigured():
        raise ConfigurationError("Cosmos DB connection string is required.")

    cosmos_service.ping = unconfigured

    data = client.get("/health/ready").json()["data"]
    assert data["checks"]["cosmos_db"] == "not_configured"
    assert data["status"] == "ready"


def test_root_endpoint(client):
    """Test that the root endpoint returns API information."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "service" in data
    assert "version" in data
    assert data["status"] == "running"
    assert data["endpoints"]["upload_blob"] == "POST /blob/upload"


def test_request_id_is_generated_and_echoed(client):
    response = client.get("/health/live")
    request_id = response.headers["X-Request-ID"]
    assert request_id
    assert response.json()["request_id"] == request_id
    assert "X-Process-Time" in response.headers


def test_incoming_request_id_is_reused(client):
    response = client.get("/health/live", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"
    assert response.json()["request_id"] == "abc-123"
