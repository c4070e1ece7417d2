import asyncio

import pytest
from bson import ObjectId
from fastapi import HTTPException
from pymongo.errors import DuplicateKeyError

from app.services import consumer_service
from app.services.consumer_service import find_or_create_consumer

CONSUMER = {"name": "Meera Nair", "phone": "9876543210", "email": "meera@example.com"}


def test_create_consumer_defaults(client):
    response = client.post("/api/consumers/", json=CONSUMER)

    assert response.status_code == 201
    body = response.json()
    assert body["type"] == "new"
    assert body["address"] == ""
    assert body["totalBookings"] == 0
    assert body["outstandingAmount"] == 0


def test_create_consumer_duplicate_phone(client):
    client.post("/api/consumers/", json=CONSUMER)

    response = client.post("/api/consumers/", json={**CONSUMER, "email": "other@example.com"})

    assert response.status_code == 409
    assert response.json() == {"message": "A consumer with this phone number already exists."}


def test_create_consumer_duplicate_email_hits_unique_index(client):
    client.post("/api/consumers/", json=CONSUMER)

    response = client.post("/api/consumers/", json={**CONSUMER, "phone": "9000000001"})

    assert response.status_code == 409
    assert "error" in response.json()


def test_create_consumer_requires_name_and_phone(client):
    assert client.post("/api/consumers/", json={"phone": "9000000001", "email": "a@example.com"}).status_code == 400
    assert client.post("/api/consumers/", json={**CONSUMER, "type": "vip"}).status_code == 400


def test_get_consumer(client):
    created = client.post("/api/consumers/", json=CONSUMER).json()

    assert client.get(f"/api/consumers/{created['_id']}").json()["phone"] == "9876543210"
    assert client.get("/api/consumers/123").json() == {"message": "Invalid consumer ID format."}
    assert client.get(f"/api/consumers/{ObjectId()}").status_code == 404


def test_update_consumer_partial(client):
    created = client.post("/api/consumers/", json=CONSUMER).json()

    response = client.put(f"/api/consumers/{created['_id']}", json={"type": "corporate", "company": "Acme"})

    assert response.status_code == 200
    assert response.json()["type"] == "corporate"
    assert response.json()["company"] == "Acme"
    assert response.json()["name"] == "Meera Nair"


def test_update_consumer_phone_collision(client):
    first = client.post("/api/consumers/", json=CONSUMER).json()
    client.post("/api/consumers/", json={"name": "Arun", "phone": "9000000002", "email": "arun@example.com"})

    response = client.put(f"/api/consumers/{first['_id']}", json={"phone": "9000000002"})

    assert response.status_code == 409


def test_update_consumer_rejects_null_required_fields(client):
    created = client.post("/api/consumers/", json=CONSUMER).json()

    response = client.put(f"/api/consumers/{created['_id']}", json={"name": None, "phone": None})

    assert response.status_code == 400
    stored = client.get(f"/api/consumers/{created['_id']}").json()
    assert stored["name"] == CONSUMER["name"]
    assert stored["phone"] == CONSUMER["phone"]


def test_update_unknown_consumer(client):
    assert client.put(f"/api/consumers/{ObjectId()}", json={"name": "X"}).status_code == 404


def test_delete_consumer(client):
    created = client.post("/api/consumers/", json=CONSUMER).json()

    response = client.delete(f"/api/consumers/{created['_id']}")

    assert response.json() == {"message": "Consumer deleted successfully."}
    assert client.delete(f"/api/consumers/{created['_id']}").status_code == 404


def test_find_or_create_is_idempotent(db):
    async def resolve_twice():
        first = await find_or_create_consumer("Meera Nair", "9876543210", "meera@example.com")
        second = await find_or_create_consumer("Someone Else", "9876543210", "else@example.com")
        count = await db["consumers"].count_documents({"phone": "9876543210"})
        return first, second, count

    first, second, count = asyncio.run(resolve_twice())

    assert first["_id"] == second["_id"]
    assert second["name"] == "Meera Nair"
    assert count == 1


def test_find_or_create_email_held_by_other_phone(db):
    async def resolve():
        await find_or_create_consumer("Meera Nair", "9876543210", "meera@example.com")
        return await find_or_create_consumer("Imposter", "9000000003", "meera@example.com")

    with pytest.raises(HTTPException) as excinfo:
        asyncio.run(resolve())

    assert excinfo.value.status_code == 409


def test_find_or_create_returns_concurrent_winner(db, monkeypatch):
    async def lose_race(*args, **kwargs):
        # Another request inserted the same phone after our upsert matched nothing
        await db["consumers"].insert_one({"name": "First Caller", "phone": "9876543210", "email": "first@example.com"})
        raise DuplicateKeyError("E11000 duplicate key error collection: consumers index: phone_1")

    monkeypatch.setattr(consumer_service.db_ops, "find_or_create", lose_race)

    consumer = asyncio.run(find_or_create_consumer("Meera Nair", "9876543210", "meera@example.com"))

    assert consumer["name"] == "First Caller"
    assert consumer["email"] == "first@example.com"
