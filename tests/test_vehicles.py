from datetime import datetime, timedelta

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from app.services import vehicle_service


def _dates(**offsets):
    now = datetime.utcnow()
    return {name: (now + timedelta(days=days)).isoformat() for name, days in offsets.items()}


def test_create_vehicle(client, vehicle_payload):
    response = client.post("/api/vehicles/", json=vehicle_payload)

    assert response.status_code == 201
    body = response.json()
    assert body["number"] == "KA01AB1234"
    assert body["status"] == "available"
    assert body["ownership"] == "own"
    assert body["stats"] == {"totalTrips": 0, "totalKms": 0, "revenue": 0}


def test_create_vehicle_duplicate_number_any_casing(client, vehicle_payload):
    assert client.post("/api/vehicles/", json=vehicle_payload).status_code == 201
    vehicle_payload["number"] = " ka01ab1234 "

    response = client.post("/api/vehicles/", json=vehicle_payload)

    assert response.status_code == 409
    assert response.json() == {"message": "A vehicle with this number already exists."}
    assert client.get("/api/vehicles/").json()["totalVehicles"] == 1


def test_create_vehicle_rejects_unknown_type(client, vehicle_payload):
    vehicle_payload["type"] = "rickshaw"

    assert client.post("/api/vehicles/", json=vehicle_payload).status_code == 400


def test_bulk_create_skip_report(client, vehicle):
    response = client.post("/api/vehicles/many", json=[
        {"number": "KA02CD5678", "type": "bus"},
        {"type": "car"},
        {"number": "ka01ab1234", "type": "car"},
        {"number": "KA02cd5678", "type": "tempo"},
    ])

    assert response.status_code == 201
    body = response.json()
    assert body["createdCount"] == 1
    assert body["skippedCount"] == 3
    assert [s["reason"] for s in body["skippedVehicles"]] == [
        "missing number",
        "exists in database",
        "duplicate in request",
    ]
    assert body["skippedVehicles"][0]["data"] == {"type": "car"}
    assert body["skippedVehicles"][1]["number"] == "KA01AB1234"
    assert body["createdVehicles"][0]["number"] == "KA02CD5678"
    assert client.get("/api/vehicles/").json()["totalVehicles"] == 2


def test_bulk_create_nothing_new(client, vehicle):
    response = client.post("/api/vehicles/many", json=[{"number": "KA01AB1234", "type": "car"}])

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "No new vehicles were created."
    assert body["createdCount"] == 0
    assert body["skippedCount"] == 1


def test_bulk_create_requires_non_empty_list(client):
    for payload in ([], {"number": "KA01AB1234", "type": "car"}):
        response = client.post("/api/vehicles/many", json=payload)
        assert response.status_code == 400
        assert response.json()["message"] == "Request body must be a non-empty array of vehicle objects."


def test_bulk_create_invalid_entry_fails_whole_batch(client):
    response = client.post("/api/vehicles/many", json=[
        {"number": "KA09XY0001", "type": "car"},
        {"number": "KA09XY0002", "type": "hovercraft"},
    ])

    assert response.status_code == 400
    assert client.get("/api/vehicles/").json()["totalVehicles"] == 0


def test_get_vehicle_by_id(client, vehicle):
    response = client.get(f"/api/vehicles/{vehicle['_id']}")

    assert response.status_code == 200
    assert response.json()["number"] == "KA01AB1234"
    assert response.json()["vendor"]["vendorId"] is None


def test_get_vehicle_malformed_and_unknown_id(client):
    assert client.get("/api/vehicles/xyz").status_code == 400
    assert client.get(f"/api/vehicles/{ObjectId()}").status_code == 404


def test_get_vehicle_by_number_is_case_insensitive(client, vehicle):
    response = client.get("/api/vehicles/number/ka01ab1234")

    assert response.status_code == 200
    assert response.json()["_id"] == vehicle["_id"]


def test_get_vehicle_by_number_not_found(client):
    response = client.get("/api/vehicles/number/KA99ZZ0000")

    assert response.status_code == 404
    assert response.json() == {"message": "Vehicle with number KA99ZZ0000 not found"}


def test_list_vehicles_filters_and_paginates(client):
    entries = [{"number": f"KA10AA{i:04d}", "type": "bus" if i % 2 else "car"} for i in range(7)]
    client.post("/api/vehicles/many", json=entries)

    page = client.get("/api/vehicles/", params={"type": "bus", "limit": 2, "page": 2}).json()

    assert page["totalVehicles"] == 3
    assert page["totalPages"] == 2
    assert page["currentPage"] == 2
    assert len(page["vehicles"]) == 1
    assert all(v["type"] == "bus" for v in page["vehicles"])


def test_list_vehicles_rejects_bad_paging(client):
    assert client.get("/api/vehicles/", params={"page": 0}).status_code == 400
    assert client.get("/api/vehicles/", params={"limit": 1000}).status_code == 400


def test_update_vehicle_by_number_merges_nested_fields(client, vehicle):
    response = client.put("/api/vehicles/ka01ab1234", json={
        "status": "maintenance",
        "driver": {"phone": "9000011111"},
    })

    assert response.status_code == 200
    updated = response.json()
    assert updated["status"] == "maintenance"
    assert updated["driver"]["phone"] == "9000011111"
    assert updated["driver"]["name"] == "Ravi Kumar"


def test_update_vehicle_number_conflict(client, vehicle):
    client.post("/api/vehicles/", json={"number": "KA02CD5678", "type": "bus"})

    response = client.put(f"/api/vehicles/{vehicle['_id']}", json={"number": "ka02cd5678"})

    assert response.status_code == 400
    assert response.json() == {"message": "Another vehicle with this number already exists."}


def test_update_vehicle_rejects_null_required_fields(client, vehicle):
    response = client.put(f"/api/vehicles/{vehicle['_id']}", json={"number": None, "type": None})

    assert response.status_code == 400
    assert response.json()["message"] == "Validation error"
    stored = client.get(f"/api/vehicles/{vehicle['_id']}").json()
    assert stored["number"] == "KA01AB1234"
    assert stored["type"] == vehicle["type"]


def test_update_vehicle_number_taken_during_write(client, vehicle, monkeypatch):
    async def taken(*args, **kwargs):
        raise DuplicateKeyError("E11000 duplicate key error collection: vehicles index: number_1")

    monkeypatch.setattr(vehicle_service.db_ops, "update", taken)

    response = client.put(f"/api/vehicles/{vehicle['_id']}", json={"number": "KA09ZZ0001"})

    assert response.status_code == 400
    assert response.json() == {"message": "Another vehicle with this number already exists."}


def test_update_vehicle_keeping_own_number(client, vehicle):
    response = client.put(f"/api/vehicles/{vehicle['_id']}", json={"number": "KA01AB1234", "capacity": 8})

    assert response.status_code == 200
    assert response.json()["capacity"] == 8


def test_update_vehicle_validates_fields(client, vehicle):
    assert client.put(f"/api/vehicles/{vehicle['_id']}", json={"status": "stolen"}).status_code == 400
    assert client.put(f"/api/vehicles/{vehicle['_id']}", json={}).status_code == 400


def test_update_unknown_vehicle(client):
    assert client.put("/api/vehicles/KA00XX0000", json={"status": "booked"}).status_code == 404


def test_delete_vehicle(client, vehicle):
    response = client.delete(f"/api/vehicles/{vehicle['_id']}")

    assert response.status_code == 200
    assert response.json() == {"message": "Vehicle deleted successfully."}
    assert client.get(f"/api/vehicles/{vehicle['_id']}").status_code == 404
    assert client.delete(f"/api/vehicles/{vehicle['_id']}").status_code == 404
    assert client.delete("/api/vehicles/bad-id").status_code == 400


def test_compliance_window_is_monotonic(client):
    client.post("/api/vehicles/", json={
        "number": "KA01EX0001", "type": "car",
        "compliance": _dates(fitnessExpiry=-2),
    })
    client.post("/api/vehicles/", json={
        "number": "KA01EX0002", "type": "car",
        "compliance": {"insurance": {"number": "INS-1", **_dates(expiry=10)}},
    })
    client.post("/api/vehicles/", json={
        "number": "KA01EX0003", "type": "bus",
        "compliance": _dates(rcExpiry=400, pocExpiry=200),
    })
    client.post("/api/vehicles/", json={"number": "KA01EX0004", "type": "bus"})

    def numbers(days):
        body = client.get("/api/vehicles/compliance/nearing-expiry", params={"days": days}).json()
        return {v["number"] for v in body} if isinstance(body, list) else set()

    assert numbers(0) == {"KA01EX0001"}
    assert numbers(30) == {"KA01EX0001", "KA01EX0002"}
    assert numbers(365) == {"KA01EX0001", "KA01EX0002", "KA01EX0003"}
    assert numbers(0) <= numbers(30) <= numbers(365)


def test_compliance_projection(client):
    client.post("/api/vehicles/", json={
        "number": "KA01EX0001", "type": "car", "model": "Dzire",
        "compliance": _dates(fitnessExpiry=-2),
    })

    vehicle = client.get("/api/vehicles/compliance/nearing-expiry").json()[0]

    assert set(vehicle) == {"_id", "number", "model", "compliance"}
    assert "driver" not in vehicle


def test_compliance_empty_returns_message(client, vehicle):
    response = client.get("/api/vehicles/compliance/nearing-expiry", params={"days": 7})

    assert response.status_code == 200
    assert response.json() == {"message": "No vehicle compliance documents expiring within the next 7 days."}


def test_fleet_stats_empty(client):
    response = client.get("/api/vehicles/stats/overall")

    assert response.status_code == 200
    assert response.json() == {"fleetSummary": {}, "statusBreakdown": {}}


def test_fleet_stats_totals(client):
    client.post("/api/vehicles/", json={
        "number": "KA01ST0001", "type": "car",
        "stats": {"totalTrips": 4, "totalKms": 820, "revenue": 24000},
    })
    client.post("/api/vehicles/", json={
        "number": "KA01ST0002", "type": "bus", "status": "maintenance",
        "stats": {"totalTrips": 1, "totalKms": 300, "revenue": 15000},
    })
    client.post("/api/vehicles/", json={"number": "KA01ST0003", "type": "tempo"})

    body = client.get("/api/vehicles/stats/overall").json()

    assert body["fleetSummary"] == {
        "totalVehicles": 3,
        "totalTrips": 5,
        "totalKms": 1120,
        "totalRevenue": 39000,
    }
    assert body["statusBreakdown"] == {"available": 2, "maintenance": 1}
