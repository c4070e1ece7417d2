import asyncio

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from app.config.database import db_config
from app.main import app


@pytest.fixture
def db():
    """Point the shared db_config at a fresh in-memory MongoDB"""
    client = AsyncMongoMockClient()
    db_config.client = client
    db_config.database = client[db_config.DATABASE_NAME]
    asyncio.run(db_config.ensure_indexes())
    yield db_config.database
    db_config.client = None
    db_config.database = None


@pytest.fixture
def client(db):
    # Not entered as a context manager: the lifespan would connect to a real server
    return TestClient(app)


@pytest.fixture
def vehicle_payload():
    return {
        "number": "KA01AB1234",
        "type": "car",
        "model": "Toyota Innova",
        "capacity": 7,
        "driver": {"name": "Ravi Kumar", "phone": "9845012345", "license": "KA0120190001234"},
    }


@pytest.fixture
def vehicle(client, vehicle_payload):
    response = client.post("/api/vehicles/", json=vehicle_payload)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def booking_payload(vehicle):
    return {
        "customer": {"name": "Asha Rao", "phone": "9990001111", "email": "asha@example.com"},
        "vehicle": {
            "vehicleId": vehicle["_id"],
            "type": vehicle["type"],
            "number": vehicle["number"],
            "driver": "Ravi Kumar",
        },
        "trip": {
            "from": "Bengaluru",
            "to": "Mysuru",
            "startDate": "2026-11-01T06:00:00Z",
            "endDate": "2026-11-03T20:00:00Z",
            "purpose": "Family trip",
        },
        "payment": {"total": 12000, "advance": 2000, "rateType": "lumpsum"},
    }


@pytest.fixture
def booking(client, booking_payload):
    response = client.post("/api/bookings/", json=booking_payload)
    assert response.status_code == 201
    return response.json()["booking"]
