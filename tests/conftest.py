"""Shared fixtures: the app wired to an in-memory MongoDB (mongomock-motor)."""

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from sensores_api.main import create_app
from sensores_api.services import RecordStore


@pytest.fixture
def store() -> RecordStore:
    """Store backed by a fresh in-memory client (connect() is done by the app)."""
    return RecordStore(
        "mongodb://localhost:27017/sensores_test",
        database="sensores_test",
        client=AsyncMongoMockClient(),
    )


@pytest.fixture
def client(store):
    """TestClient with the lifespan running (gateway + notifier injected)."""
    with TestClient(create_app(store)) as test_client:
        yield test_client


@pytest.fixture
def temp_sensor() -> dict:
    return {"tipo": "Sensor", "nombre": "Temp1", "valor": 22.5, "unidad": "C"}


@pytest.fixture
def relay_actuator() -> dict:
    return {"tipo": "actuador", "nombre": "Relay Bomba", "valor": "encendido"}
