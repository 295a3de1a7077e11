"""Health endpoint tests."""

import shutil
from pathlib import Path

from fastapi.testclient import TestClient


def test_liveness_returns_200(client: TestClient) -> None:
    """Liveness endpoint returns 200 OK."""
    response = client.get("/api/health/live")
    assert response.status_code == 200


def test_liveness_returns_status(client: TestClient) -> None:
    """Liveness endpoint returns alive status."""
    response = client.get("/api/health/live")
    data = response.json()
    assert "status" in data
    assert data["status"] == "alive"


def test_readiness_ok_when_storage_exists(client: TestClient) -> None:
    """Readiness passes while the storage root is accessible."""
    response = client.get("/api/health/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ready"


def test_readiness_fails_when_storage_removed(
    client: TestClient, storage: Path
) -> None:
    """Readiness reports 503 once the storage root is gone."""
    shutil.rmtree(storage)
    response = client.get("/api/health/ready")
    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "not_ready"
    assert data["checks"][0]["status"] == "failed"
