import pytest
from fastapi.testclient import TestClient

from adapters.base import ConfigurationError
from api.main import create_app
from schema.registry import registry_table_names
from storage.context import init_adapter


def test_lifespan_bootstraps_and_tears_down(sqlite_config):
    app = create_app(lambda: init_adapter(sqlite_config))
    with TestClient(app) as client:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "driver": "sqlite", "database": "forum", "engine_open": True}

        response = client.get("/schema")
        assert response.status_code == 200
        body = response.json()
        assert body["missing_tables"] == []
        assert [t["table_name"] for t in body["tables"]] == list(registry_table_names())
        session = body["tables"][0]
        assert session["present"] is True
        assert session["columns"] == ["session_key", "session_data", "session_expiry"]
        assert session["missing_columns"] == []

    assert not app.state.context.adapter.is_open


def test_health_without_storage_is_unavailable():
    client = TestClient(create_app(lambda: None))
    response = client.get("/health")
    assert response.status_code == 503


def test_startup_failure_aborts():
    def broken_factory():
        raise ConfigurationError("driverName is required")

    app = create_app(broken_factory)
    with pytest.raises(ConfigurationError):
        with TestClient(app):
            pass
