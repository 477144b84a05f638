"""
Tests for the cortex cache API.
"""

import pytest
from fastapi.testclient import TestClient

from cortex_cache.api.app import create_app
from cortex_cache.errors import EntityValidationError
from cortex_cache.handlers import to_http_exception


@pytest.fixture
def api_service(service_factory, flaky_store):
    return service_factory(flaky_store, capacity=2)


@pytest.fixture
def client(api_service):
    """Create a test client; the context manager runs the lifespan."""
    with TestClient(create_app(api_service)) as test_client:
        yield test_client


def _put(client, name="Alpha", **overrides):
    body = {"entityType": "Fact", "observations": ["o1"], **overrides}
    return client.put(f"/entities/{name}", json=body)


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Cortex Cache API"
    assert data["endpoints"]["entities"] == "/entities/{name}"


def test_health(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "initialized": True, "backing_store_healthy": True}


def test_health_reports_unreachable_store(client, flaky_store):
    flaky_store.reachable = False
    data = client.get("/health").json()
    assert data["status"] == "unhealthy"
    assert data["backing_store_healthy"] is False


def test_put_then_get_entity(client):
    """Test storing an entity and reading it back."""
    response = _put(client, observations=["T1 fact"], metadata={"source": "api"})
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["locator"] == "cortex/entities/alpha.json"
    assert data["stored_bytes"] > 0

    response = client.get("/entities/Alpha")
    assert response.status_code == 200
    assert response.json() == {
        "name": "Alpha",
        "entityType": "Fact",
        "observations": ["T1 fact"],
        "metadata": {"source": "api"},
    }


def test_get_unknown_entity(client):
    response = client.get("/entities/Ghost")
    assert response.status_code == 404
    detail = response.json()["detail"]
    assert detail["error"] == "EntityNotFoundError"
    assert detail["entity_name"] == "Ghost"


def test_put_rejects_invalid_body(client):
    response = client.put("/entities/Alpha", json={"observations": ["o1"]})
    assert response.status_code == 422


def test_put_rejects_name_without_safe_characters(client):
    response = _put(client, name="---")
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "EntityValidationError"


def test_put_reports_storage_failure(client, flaky_store):
    flaky_store.fail_writes = True
    response = _put(client)
    assert response.status_code == 502
    assert response.json()["detail"]["error"] == "StorageError"


def test_get_reports_divergence(client):
    _put(client, name="Foo Bar")
    _put(client, name="foo_bar")
    _put(client, name="Other")

    response = client.get("/entities/Foo Bar")
    assert response.status_code == 409
    assert response.json()["detail"]["locator"] == "cortex/entities/foo_bar.json"


def test_get_metrics(client):
    """Test metrics endpoint."""
    _put(client)
    client.get("/entities/Alpha")

    response = client.get("/metrics")
    assert response.status_code == 200
    data = response.json()
    assert data["catalog"]["reference_count"] == 1
    assert data["cache"]["hits"] == 1
    assert data["backing_store"]["persist_successes"] == 1
    assert data["backing_store"]["fetch_requests"] == 0
    assert data["access"]["total_accesses"] == 1
    assert 0 < data["memory_reduction_percent"] <= 100


def test_lifespan_initializes_and_flushes(api_service, tmp_path):
    with TestClient(create_app(api_service)) as client:
        assert api_service.initialized
        assert _put(client).status_code == 200
    assert not hasattr(client.app.state, "tiered_service")


def test_error_status_mapping():
    error = EntityValidationError("bad shape", entity_name="Alpha", operation="put_entity")

    exception = to_http_exception(error)

    assert exception.status_code == 422
    assert exception.detail == {
        "error": "EntityValidationError",
        "message": "bad shape",
        "entity_name": "Alpha",
        "operation": "put_entity",
    }
