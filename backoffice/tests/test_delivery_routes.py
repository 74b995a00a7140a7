"""
Integration tests for numeric-id delivery routes and drivers.
"""

import pytest

from conftest import DELIVERY_ROUTES_URL


def route_payload(route_id=10, driver_id=1, **overrides):
    payload = {
        "id": route_id,
        "driverId": driver_id,
        "date": "2024-05-01",
        "notes": "Morning run",
        "orders": [
            {"sequence": 1, "value": 120.5, "priority": True},
            {"sequence": 2, "value": 80},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_list_drivers(client, drivers):
    response = await client.get("/api/drivers")

    assert response.status_code == 200
    assert response.json()["data"] == [
        {"id": 1, "name": "Carlos Mendoza"},
        {"id": 2, "name": "Lucia Fernandez"},
    ]


@pytest.mark.asyncio
async def test_create_and_get_delivery_route(client, drivers, upstream):
    created = await client.post("/api/routes", json=route_payload())
    fetched = await client.get("/api/routes/10")

    assert created.status_code == 201
    data = created.json()["data"]
    assert data["driver"] == {"id": 1, "name": "Carlos Mendoza"}
    assert [o["sequence"] for o in data["orders"]] == [1, 2]
    assert data["orders"][0]["priority"] is True
    assert data["orders"][1]["priority"] is False
    assert fetched.json()["source"] == "local"
    assert fetched.json()["data"] == data
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_duplicate_delivery_route_conflicts(client, drivers):
    await client.post("/api/routes", json=route_payload())

    response = await client.post("/api/routes", json=route_payload(notes="second"))

    assert response.status_code == 409
    assert response.json()["success"] is False
    assert (await client.get("/api/routes/10")).json()["data"]["notes"] == "Morning run"


@pytest.mark.asyncio
async def test_delivery_route_needs_existing_driver(client, drivers):
    response = await client.post("/api/routes", json=route_payload(driver_id=42))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_duplicate_id_wins_over_unknown_driver(client, drivers):
    await client.post("/api/routes", json=route_payload())

    response = await client.post("/api/routes", json=route_payload(driver_id=42))

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_delivery_route_rejects_non_positive_ids(client, drivers):
    body = await client.post("/api/routes", json=route_payload(route_id=0))
    path = await client.get("/api/routes/0")

    assert body.status_code == 400
    assert path.status_code == 400


@pytest.mark.asyncio
async def test_list_delivery_routes_formats_dates(client, drivers):
    await client.post("/api/routes", json=route_payload())
    await client.post("/api/routes", json=route_payload(11, 2, date="2024-05-03"))

    response = await client.get("/api/routes")

    routes = response.json()["data"]
    assert [(r["id"], r["date"]) for r in routes] == [(11, "2024-05-03"), (10, "2024-05-01")]


@pytest.mark.asyncio
async def test_update_delivery_route_upserts_orders(client, drivers):
    created = await client.post("/api/routes", json=route_payload())
    first_order = created.json()["data"]["orders"][0]

    response = await client.put(
        "/api/routes/10",
        json={
            "driverId": 2,
            "orders": [
                {"id": first_order["id"], "sequence": 1, "value": 150, "priority": False},
                {"sequence": 3, "value": 10, "priority": True},
            ],
        },
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["driver"]["id"] == 2
    assert data["notes"] == "Morning run"
    values = {o["sequence"]: o["value"] for o in data["orders"]}
    assert values == {1: 150, 2: 80, 3: 10}


@pytest.mark.asyncio
async def test_update_delivery_route_unknown_driver(client, drivers):
    await client.post("/api/routes", json=route_payload())

    response = await client.put("/api/routes/10", json={"driverId": 99})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_delivery_route(client, drivers):
    await client.post("/api/routes", json=route_payload())

    deleted = await client.delete("/api/routes/10")
    fetched = await client.get("/api/routes/10")

    assert deleted.status_code == 200
    assert fetched.status_code == 404


@pytest.mark.asyncio
async def test_delivery_route_from_external_service(client, upstream):
    upstream.add(f"{DELIVERY_ROUTES_URL}/77", json={"id": "77", "driver": "remote"})

    response = await client.get("/api/routes/77")

    assert response.status_code == 200
    body = response.json()
    assert body["source"] == "external"
    assert body["data"] == {"id": 77, "driver": "remote"}
